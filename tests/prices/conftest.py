from __future__ import annotations

from pathlib import Path

import pytest

from btc_price_feed.prices.db import ensure_table


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "prices.duckdb"
    ensure_table(path)
    return path
