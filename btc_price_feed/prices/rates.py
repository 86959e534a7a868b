from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any, List, Optional


@dataclass(frozen=True)
class PriceObservation:
    """One row of the prices table. Amounts are integer fiat prices of 1 BTC."""

    USD: int
    EUR: int
    GBP: int
    CAD: int
    CHF: int
    AUD: int
    JPY: int
    time: Optional[int] = None
    id: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class ExchangeRates:
    USDEUR: float
    USDGBP: float
    USDCAD: float
    USDCHF: float
    USDAUD: float
    USDJPY: float


@dataclass(frozen=True)
class Conversion:
    prices: List[PriceObservation] = field(default_factory=list)
    exchange_rates: Optional[ExchangeRates] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "prices": [p.to_dict() for p in self.prices],
            "exchangeRates": asdict(self.exchange_rates) if self.exchange_rates is not None else None,
        }


def _round_half_up(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def _rate(amount: int, usd: int) -> float:
    if usd == 0:
        return math.nan
    return _round_half_up(amount / usd)


def derive_exchange_rates(reference: PriceObservation) -> ExchangeRates:
    """Compute USD->fiat rates from the BTC prices of a reference row.

    Each rate is rounded to 2 decimals, halves rounded up. A reference row
    without a USD price (USD == 0) yields NaN for every rate.
    """
    usd = reference.USD
    return ExchangeRates(
        USDEUR=_rate(reference.EUR, usd),
        USDGBP=_rate(reference.GBP, usd),
        USDCAD=_rate(reference.CAD, usd),
        USDCHF=_rate(reference.CHF, usd),
        USDAUD=_rate(reference.AUD, usd),
        USDJPY=_rate(reference.JPY, usd),
    )
