"""CLI scripts for loading and dumping historical prices.

Scripts:
- backfill_prices_from_csv: Backfill DuckDB from a historical prices CSV
- export_prices_to_csv: Export the DuckDB prices table to CSV

Usage:
    python -m btc_price_feed.scripts.backfill_prices_from_csv --help
    python -m btc_price_feed.scripts.export_prices_to_csv --help
"""

__all__ = [
    "backfill_prices_from_csv",
    "export_prices_to_csv",
]
