from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Callable, Dict
from urllib.error import URLError
from urllib.request import Request, urlopen

import pandas as pd

from .currencies import CURRENCIES, MISSING_PRICE, Currency
from .rates import PriceObservation


COINBASE_API = "https://api.coinbase.com"

logger = logging.getLogger(__name__)


def _build_spot_url(currency: Currency) -> str:
    return f"{COINBASE_API}/v2/prices/BTC-{currency.value}/spot"


def fetch_spot_price(currency: Currency) -> float:
    """Fetch the current BTC spot price in `currency` from Coinbase.

    Payload: {"data": {"base": "BTC", "currency": "USD", "amount": "43123.45"}}
    """
    req = Request(_build_spot_url(currency), headers={"User-Agent": "btc-price-feed/1.0"})
    with urlopen(req, timeout=15) as resp:
        payload = json.loads(resp.read())
    return float(payload["data"]["amount"])


def fetch_latest_prices(fetch: Callable[[Currency], float] = fetch_spot_price) -> Dict[str, int]:
    """Current BTC price in every supported currency, rounded to whole units.

    A currency whose price cannot be fetched is reported as -1 (missing).
    """
    prices: Dict[str, int] = {}
    for currency in CURRENCIES:
        try:
            prices[currency.value] = int(round(fetch(currency)))
        except (URLError, OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Cannot fetch BTC{currency.value} price. Reason: {e}")
            prices[currency.value] = MISSING_PRICE
    return prices


def empty_prices() -> PriceObservation:
    """Zero-valued observation returned when no price is stored yet."""
    return PriceObservation(**{c.value: 0 for c in CURRENCIES})


def compute_price_time(now: datetime | None = None) -> int:
    """Unix seconds of the current hour boundary (UTC); one observation per hour."""
    now = now or datetime.now(timezone.utc)
    ts = pd.Timestamp(now)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return int(ts.floor("h").timestamp())
