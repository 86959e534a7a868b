from __future__ import annotations

T0 = 1704067200  # 2024-01-01 00:00:00 UTC
HOUR = 3600


def make_prices(**overrides: int) -> dict[str, int]:
    prices = {"USD": 50000, "EUR": 45000, "GBP": 40000, "CAD": 60000, "CHF": 48000, "AUD": 70000, "JPY": 5000000}
    prices.update(overrides)
    return prices
