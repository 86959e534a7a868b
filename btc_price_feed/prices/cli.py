from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .api import compute_price_time, fetch_latest_prices
from .currencies import MISSING_PRICE, Currency
from .db import (
    ensure_table,
    get_historical_prices,
    get_latest_conversion_rates,
    get_latest_price_time,
    get_nearest_historical_price,
    get_oldest_price_time,
    save_prices,
)


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


@dataclass
class RunConfig:
    command: str
    duckdb_path: Path
    timestamp: Optional[int] = None
    dry_run: bool = False
    debug: bool = False


def run_update(cfg: RunConfig) -> int:
    price_time = compute_price_time()
    latest_time = get_latest_price_time(cfg.duckdb_path)
    if latest_time >= price_time:
        logger.info(f"Prices for {price_time} already stored; nothing to do")
        return 0

    prices = fetch_latest_prices()
    if prices[Currency.USD.value] == MISSING_PRICE:
        print("[ERROR] No USD price available; not saving", file=sys.stderr)
        return 2

    if cfg.dry_run:
        print(f"[DRY-RUN] Would save prices at {price_time}: {prices}")
        return 0

    save_prices(cfg.duckdb_path, price_time, prices)
    print(f"saved time={price_time} " + " ".join(f"{k}={v}" for k, v in prices.items()))
    return 0


def run_once(cfg: RunConfig) -> int:
    ensure_table(cfg.duckdb_path)

    if cfg.command == "update":
        return run_update(cfg)

    if cfg.command == "latest":
        print(json.dumps(get_latest_conversion_rates(cfg.duckdb_path).to_dict()))
        return 0

    if cfg.command == "nearest":
        conversion = get_nearest_historical_price(cfg.duckdb_path, cfg.timestamp)
        if conversion is None:
            print("[ERROR] Cannot fetch nearest historical price", file=sys.stderr)
            return 1
        print(json.dumps(conversion.to_dict()))
        return 0

    if cfg.command == "history":
        conversion = get_historical_prices(cfg.duckdb_path)
        if conversion is None:
            print("[ERROR] No historical prices", file=sys.stderr)
            return 1
        print(
            f"rows={len(conversion.prices)} oldest={get_oldest_price_time(cfg.duckdb_path)} "
            f"latest={get_latest_price_time(cfg.duckdb_path)} "
            f"rates={json.dumps(conversion.to_dict()['exchangeRates'])}"
        )
        return 0

    raise ValueError(f"unknown command: {cfg.command}")


def parse_args(argv: Optional[list[str]] = None) -> RunConfig:
    p = argparse.ArgumentParser(description="Hourly BTC fiat price store")
    p.add_argument("--duckdb", type=Path, required=True, help="Path to DuckDB file")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = p.add_subparsers(dest="command", required=True)

    upd = sub.add_parser("update", help="Fetch current prices and store them for this hour")
    upd.add_argument("--dry-run", action="store_true", help="Do not write to DB")
    sub.add_parser("latest", help="Print latest stored prices")
    near = sub.add_parser("nearest", help="Print the observation right before a unix timestamp")
    near.add_argument("--timestamp", type=int, required=True, help="Unix timestamp (seconds)")
    sub.add_parser("history", help="Summarize stored history and current exchange rates")
    args = p.parse_args(argv)

    return RunConfig(
        command=args.command,
        duckdb_path=args.duckdb,
        timestamp=getattr(args, "timestamp", None),
        dry_run=getattr(args, "dry_run", False),
        debug=args.debug,
    )


def main(argv: Optional[list[str]] = None) -> int:
    cfg = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if cfg.debug else logging.INFO, format=LOG_FORMAT)
    try:
        return run_once(cfg)
    except Exception as e:  # surface clear error message
        print(f"[ERROR] {e}", file=sys.stderr)
        if cfg.debug:
            raise
        return 3


if __name__ == "__main__":
    raise SystemExit(main())
