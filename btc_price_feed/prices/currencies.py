from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    CHF = "CHF"
    AUD = "AUD"
    JPY = "JPY"


# Marks "missing data" at ingestion time
MISSING_PRICE = -1

MAX_PRICES: Mapping[Currency, int] = MappingProxyType(
    {
        Currency.USD: 100_000_000,
        Currency.EUR: 100_000_000,
        Currency.GBP: 100_000_000,
        Currency.CAD: 100_000_000,
        Currency.CHF: 100_000_000,
        Currency.AUD: 100_000_000,
        Currency.JPY: 10_000_000_000,
    }
)

# Column order of the prices table
CURRENCIES: tuple[Currency, ...] = tuple(Currency)
