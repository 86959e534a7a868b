"""Hourly BTC fiat prices (USD, EUR, GBP, CAD, CHF, AUD, JPY).

Implements price sanitization, DuckDB storage and exchange rate derivation.
"""

__all__ = [
    "api",
    "cli",
    "currencies",
    "db",
    "rates",
    "validation",
]
