from __future__ import annotations

import pandas as pd

from btc_price_feed.prices.db import get_prices_times, get_prices_times_and_ids, save_prices
from btc_price_feed.scripts import backfill_prices_from_csv as backfill_mod
from btc_price_feed.scripts import export_prices_to_csv as export_mod
from tests.prices.helpers import HOUR, T0, make_prices


def _write_csv(path, rows):
    pd.DataFrame(rows).to_csv(path, index=False)
    return path


def test_clean_transform_parses_times_and_missing_cells():
    raw = pd.DataFrame(
        [
            {"Time": "2024-01-01 01:00:00", "usd": 42000.4, "eur": None},
            {"Time": "2024-01-01 00:00:00", "usd": 41000.0, "eur": 38000.0},
            {"Time": "2024-01-01 00:00:00", "usd": 1.0, "eur": 1.0},
        ]
    )
    df = backfill_mod.clean_transform(raw)
    assert df["time"].tolist() == [T0, T0 + HOUR]
    assert df["USD"].tolist() == [41000, 42000]
    assert df["EUR"].tolist() == [38000, -1]
    # currencies absent from the CSV are missing
    assert df["JPY"].tolist() == [-1, -1]


def test_backfill_skips_existing_times(db_path, tmp_path):
    save_prices(db_path, T0, make_prices())
    csv_path = _write_csv(
        tmp_path / "history.csv",
        [
            {"time": T0, "USD": 1, "EUR": 1},
            {"time": T0 + HOUR, "USD": 51000, "EUR": 46000},
            {"time": T0 + 2 * HOUR, "USD": None, "EUR": 46000},
        ],
    )
    assert backfill_mod.main(["--csv", str(csv_path), "--duckdb", str(db_path)]) == 0

    # the row without USD is never stored
    assert get_prices_times(db_path) == [T0, T0 + HOUR]
    assert get_prices_times_and_ids(db_path)[0] == (T0, 1, 50000)

    df = backfill_mod.clean_transform(pd.read_csv(csv_path))
    # T0 + 2h is still absent but has no USD price, so nothing is left to write
    assert backfill_mod.backfill(db_path, df) == 0


def test_backfill_dry_run(db_path, tmp_path):
    csv_path = _write_csv(tmp_path / "history.csv", [{"time": T0, "USD": 50000}])
    assert backfill_mod.main(["--csv", str(csv_path), "--duckdb", str(db_path), "--dry-run"]) == 0
    assert get_prices_times(db_path) == []


def test_export_prices(db_path, tmp_path):
    save_prices(db_path, T0 + HOUR, make_prices(USD=51000))
    save_prices(db_path, T0, make_prices())
    out = tmp_path / "out" / "prices.csv"

    assert export_mod.main(["--duckdb", str(db_path), "--out", str(out)]) == 0
    df = pd.read_csv(out)
    assert list(df.columns) == ["time", "id", "USD", "EUR", "GBP", "CAD", "CHF", "AUD", "JPY"]
    assert df["USD"].tolist() == [50000, 51000]
    assert df["time"].iloc[0] == "2024-01-01 00:00:00"

    # refuses to overwrite without --overwrite
    assert export_mod.main(["--duckdb", str(db_path), "--out", str(out)]) == 2
    assert export_mod.main(["--duckdb", str(db_path), "--out", str(out), "--overwrite"]) == 0


def test_backfill_counts_only_rows_with_usd(db_path, tmp_path):
    csv_path = _write_csv(
        tmp_path / "history.csv",
        [
            {"time": T0, "USD": 50000},
            {"time": T0 + HOUR, "USD": None},
            {"time": T0 + 2 * HOUR, "USD": 52000},
        ],
    )
    df = backfill_mod.clean_transform(pd.read_csv(csv_path))
    assert backfill_mod.backfill(db_path, df, dry_run=True) == 2
    assert backfill_mod.backfill(db_path, df) == 2
    assert get_prices_times(db_path) == [T0, T0 + 2 * HOUR]
