from __future__ import annotations

import logging
from typing import Mapping

from .currencies import CURRENCIES, MAX_PRICES, MISSING_PRICE, Currency


logger = logging.getLogger(__name__)


def is_missing_usd(prices: Mapping[str, int]) -> bool:
    """True when the USD price carries the missing sentinel.

    Some historical entries have no USD price at all; those rows are not stored.
    """
    return prices.get(Currency.USD.value, MISSING_PRICE) == MISSING_PRICE


def is_within_bounds(currency: Currency, amount: float) -> bool:
    # -1 is the "missing data" marker, so it is a valid entry
    return MISSING_PRICE <= amount <= MAX_PRICES[currency]


def sanitize_prices(prices: Mapping[str, int]) -> dict[Currency, int]:
    """Return a copy of `prices` keyed by Currency with out-of-range amounts set to 0.

    - Currencies absent from `prices` are stored as 0 (no data).
    - Keys that are not a known currency are ignored.
    - The input mapping is left untouched.
    """
    out: dict[Currency, int] = {}
    for currency in CURRENCIES:
        amount = prices.get(currency.value)
        if amount is None:
            out[currency] = 0
            continue
        if not is_within_bounds(currency, amount):
            logger.info(f"Ignore BTC{currency.value} price of {amount}")
            amount = 0
        out[currency] = int(amount)
    return out
