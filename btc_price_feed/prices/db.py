from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

import duckdb  # type: ignore

from .api import empty_prices
from .currencies import CURRENCIES
from .rates import Conversion, PriceObservation, derive_exchange_rates
from .validation import is_missing_usd, sanitize_prices


TABLE_NAME = "prices"
SEQUENCE_NAME = f"{TABLE_NAME}_id_seq"

_AMOUNT_COLUMNS = ", ".join(c.value for c in CURRENCIES)
_SELECT_OBSERVATIONS = f"SELECT CAST(epoch(time) AS BIGINT) AS unix_time, id, {_AMOUNT_COLUMNS} FROM {TABLE_NAME}"

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """Raised when a price observation cannot be written to the store."""


def _connect(db_path: Path):
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(db_path))


def _fetch_all(db_path: Path, q: str, params: Optional[Sequence[Any]] = None) -> List[tuple]:
    con = _connect(db_path)
    try:
        con.execute("SET TimeZone='UTC';")
        return con.execute(q, list(params or [])).fetchall()
    finally:
        con.close()


def _row_to_observation(row: Sequence[Any]) -> PriceObservation:
    time, id_, *amounts = row
    return PriceObservation(
        time=int(time),
        id=int(id_),
        **{c.value: int(a) for c, a in zip(CURRENCIES, amounts)},
    )


def ensure_table(db_path: Path) -> None:
    con = _connect(db_path)
    try:
        con.execute(f"CREATE SEQUENCE IF NOT EXISTS {SEQUENCE_NAME} START 1;")
        con.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
              time TIMESTAMP NOT NULL,
              id INTEGER DEFAULT nextval('{SEQUENCE_NAME}'),
              USD BIGINT NOT NULL DEFAULT 0,
              EUR BIGINT NOT NULL DEFAULT 0,
              GBP BIGINT NOT NULL DEFAULT 0,
              CAD BIGINT NOT NULL DEFAULT 0,
              CHF BIGINT NOT NULL DEFAULT 0,
              AUD BIGINT NOT NULL DEFAULT 0,
              JPY BIGINT NOT NULL DEFAULT 0
            );
            """
        )
        con.execute(f"CREATE INDEX IF NOT EXISTS idx_{TABLE_NAME}_time ON {TABLE_NAME}(time);")
    finally:
        con.close()


def save_prices(db_path: Path, time: int, prices: Mapping[str, int]) -> None:
    """Sanitize and insert one observation.

    Observations without a USD price are skipped. Amounts outside
    [-1, MAX_PRICES[currency]] are stored as 0.
    """
    if is_missing_usd(prices):
        logger.debug(f"Skip prices at {time}: no USD price")
        return

    clean = sanitize_prices(prices)
    try:
        con = _connect(db_path)
        try:
            con.execute("SET TimeZone='UTC';")
            con.execute(
                f"""
                INSERT INTO {TABLE_NAME} (time, {_AMOUNT_COLUMNS})
                VALUES (to_timestamp(?), ?, ?, ?, ?, ?, ?, ?);
                """,
                [time, *(clean[c] for c in CURRENCIES)],
            )
        finally:
            con.close()
    except duckdb.Error as e:
        logger.error(f"Cannot save exchange rate into db. Reason: {e}")
        raise PersistenceError(f"Cannot save prices at {time}: {e}") from e


def get_oldest_price_time(db_path: Path) -> int:
    rows = _fetch_all(
        db_path,
        f"SELECT CAST(epoch(time) AS BIGINT) FROM {TABLE_NAME} WHERE USD != 0 ORDER BY time LIMIT 1",
    )
    return int(rows[0][0]) if rows else 0


def get_latest_price_id(db_path: Path) -> Optional[int]:
    rows = _fetch_all(db_path, f"SELECT id FROM {TABLE_NAME} WHERE USD != 0 ORDER BY time DESC LIMIT 1")
    return int(rows[0][0]) if rows else None


def get_latest_price_time(db_path: Path) -> int:
    rows = _fetch_all(
        db_path,
        f"SELECT CAST(epoch(time) AS BIGINT) FROM {TABLE_NAME} WHERE USD != 0 ORDER BY time DESC LIMIT 1",
    )
    return int(rows[0][0]) if rows else 0


def get_prices_times(db_path: Path) -> List[int]:
    rows = _fetch_all(
        db_path,
        f"SELECT CAST(epoch(time) AS BIGINT) FROM {TABLE_NAME} WHERE USD != 0 ORDER BY time",
    )
    return [int(r[0]) for r in rows]


def get_prices_times_and_ids(db_path: Path) -> List[tuple[int, int, int]]:
    """(time, id, USD) for every row, rows without a USD price included."""
    rows = _fetch_all(
        db_path,
        f"SELECT CAST(epoch(time) AS BIGINT), id, USD FROM {TABLE_NAME} ORDER BY time",
    )
    return [(int(t), int(i), int(usd)) for t, i, usd in rows]


def get_latest_conversion_rates(db_path: Path, empty: Optional[PriceObservation] = None) -> PriceObservation:
    """Raw amounts of the most recent row, or `empty` (all zeros by default) if there is none."""
    rows = _fetch_all(db_path, f"SELECT {_AMOUNT_COLUMNS} FROM {TABLE_NAME} ORDER BY time DESC LIMIT 1")
    if not rows:
        return empty if empty is not None else empty_prices()
    return PriceObservation(**{c.value: int(a) for c, a in zip(CURRENCIES, rows[0])})


def get_nearest_historical_price(db_path: Path, timestamp: Optional[int]) -> Optional[Conversion]:
    """Latest row strictly before `timestamp`, with rates from the current latest row.

    A `timestamp` of None matches no row. Returns None on failure.
    """
    try:
        if timestamp is None:
            rows = []
        else:
            rows = _fetch_all(
                db_path,
                f"{_SELECT_OBSERVATIONS} WHERE epoch(time) < ? ORDER BY time DESC LIMIT 1",
                [timestamp],
            )
        latest = get_latest_conversion_rates(db_path)
        return Conversion(
            prices=[_row_to_observation(r) for r in rows],
            exchange_rates=derive_exchange_rates(latest),
        )
    except Exception as e:
        logger.error(f"Cannot fetch single historical prices from the db. Reason {e}")
        return None


def get_historical_prices(db_path: Path) -> Optional[Conversion]:
    """Every row, newest first, with rates from the newest row. Returns None on failure."""
    try:
        rows = _fetch_all(db_path, f"{_SELECT_OBSERVATIONS} ORDER BY time DESC")
        if not rows:
            raise LookupError("Cannot get historical prices from an empty table")
        observations = [_row_to_observation(r) for r in rows]
        return Conversion(
            prices=observations,
            exchange_rates=derive_exchange_rates(observations[0]),
        )
    except Exception as e:
        logger.error(f"Cannot fetch historical prices from the db. Reason {e}")
        return None
