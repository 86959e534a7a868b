#!/usr/bin/env python3
from __future__ import annotations

"""
Export all rows of the DuckDB prices table to a CSV.

Usage example:
  python -m btc_price_feed.scripts.export_prices_to_csv \
    --duckdb data/prices.duckdb --out data/prices.csv --overwrite

Notes:
  - Outputs columns: time, id, USD, EUR, GBP, CAD, CHF, AUD, JPY (UTC-naive timestamps)
  - By default prevents overwriting unless --overwrite is passed
"""

import argparse
from pathlib import Path
import sys
from typing import Optional

import duckdb  # type: ignore
import pandas as pd

from btc_price_feed.prices.currencies import CURRENCIES
from btc_price_feed.prices.db import TABLE_NAME, ensure_table


EXPORT_COLUMNS = ["time", "id", *(c.value for c in CURRENCIES)]


def load_prices(db_path: Path) -> pd.DataFrame:
    ensure_table(db_path)
    con = duckdb.connect(str(db_path))
    try:
        con.execute("SET TimeZone='UTC';")
        return con.execute(f"SELECT {', '.join(EXPORT_COLUMNS)} FROM {TABLE_NAME} ORDER BY time").fetch_df()
    finally:
        con.close()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Export BTC fiat prices from DuckDB to CSV")
    parser.add_argument("--duckdb", type=Path, required=True, help="Path to DuckDB file")
    parser.add_argument("--out", type=Path, required=True, help="Output CSV path")
    parser.add_argument("--overwrite", action="store_true", help="Allow overwriting existing output file")
    args = parser.parse_args(argv)

    out_path: Path = args.out
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if out_path.exists() and not args.overwrite:
        print(f"ERROR: Output exists: {out_path}. Pass --overwrite to replace.")
        return 2

    df = load_prices(args.duckdb)
    if df.empty:
        print("WARN: No rows fetched from DuckDB; writing empty CSV with header.")
    df = df[EXPORT_COLUMNS].copy()

    df.to_csv(out_path, index=False)
    if not df.empty:
        print(f"Wrote {len(df):,} rows to {out_path}")
        print(f"Range: {df['time'].iloc[0]} .. {df['time'].iloc[-1]}")
    else:
        print(f"Wrote empty CSV to {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
