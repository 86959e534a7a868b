#!/usr/bin/env python3
from __future__ import annotations

"""
Backfill historical BTC fiat prices into DuckDB from a CSV.

Expected columns: time plus any of USD, EUR, GBP, CAD, CHF, AUD, JPY.
`time` is either unix seconds or a datetime string (UTC assumed). Empty
currency cells are treated as missing (-1).

Essential steps:
  - Clean/transform: parse times to unix seconds, integer amounts, sort, dedupe
  - Insert: one save_prices call per row, skipping times already stored

Usage example:
  python -m btc_price_feed.scripts.backfill_prices_from_csv \
    --csv data/btc_fiat_history.csv --duckdb data/prices.duckdb
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from btc_price_feed.prices.currencies import CURRENCIES, MISSING_PRICE
from btc_price_feed.prices.db import ensure_table, get_prices_times_and_ids, save_prices


logger = logging.getLogger(__name__)


def _parse_times(col: pd.Series) -> pd.Series:
    numeric = pd.to_numeric(col, errors="coerce")
    if numeric.notna().all():
        return numeric.astype("int64")
    ts = pd.to_datetime(col, utc=True)
    return (ts - pd.Timestamp(0, tz="UTC")) // pd.Timedelta(seconds=1)


def clean_transform(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).strip() for c in df.columns]
    renames = {c: c.lower() if c.lower() == "time" else c.upper() for c in df.columns}
    df = df.rename(columns=renames)
    if "time" not in df.columns:
        raise ValueError("missing required column in CSV: time")

    out = pd.DataFrame({"time": _parse_times(df["time"])})
    for currency in CURRENCIES:
        if currency.value in df.columns:
            amounts = pd.to_numeric(df[currency.value], errors="coerce").round()
        else:
            amounts = pd.Series(float("nan"), index=df.index)
        out[currency.value] = amounts.fillna(MISSING_PRICE).astype("int64")

    out = out.sort_values("time", kind="mergesort").reset_index(drop=True)
    before = len(out)
    out = out.drop_duplicates(subset=["time"], keep="first").reset_index(drop=True)
    dups = before - len(out)
    if dups:
        logger.info(f"Dropped duplicate times: {dups}")
    return out


def backfill(db_path: Path, df: pd.DataFrame, dry_run: bool = False) -> int:
    """Save every row whose time is not stored yet. Returns the number of rows written.

    Rows without a USD price are never stored, so they are left out up front.
    """
    ensure_table(db_path)
    existing = {t for t, _, _ in get_prices_times_and_ids(db_path)}
    to_insert = df[~df["time"].isin(existing) & (df["USD"] != MISSING_PRICE)]
    if dry_run:
        logger.info(f"[DRY-RUN] Would insert {len(to_insert)} rows")
        return len(to_insert)
    for row in to_insert.itertuples(index=False):
        record = row._asdict()
        save_prices(db_path, int(record.pop("time")), {k: int(v) for k, v in record.items()})
    return len(to_insert)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Backfill BTC fiat prices into DuckDB from CSV")
    p.add_argument("--csv", type=Path, required=True, help="Path to CSV file")
    p.add_argument("--duckdb", type=Path, required=True, help="Path to DuckDB file to backfill into")
    p.add_argument("--dry-run", action="store_true", help="Parse and count only; do not write to DB")
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    df = clean_transform(pd.read_csv(args.csv))
    if df.empty:
        print("[WARN] No rows in CSV")
        return 0
    print(f"[CHECK] rows={len(df):,} range={df['time'].iloc[0]}..{df['time'].iloc[-1]}")

    inserted = backfill(args.duckdb, df, dry_run=args.dry_run)
    print(f"[INFO] Processed {inserted} new rows into {args.duckdb}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
