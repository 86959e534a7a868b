"""BTC Price Feed - historical Bitcoin fiat prices.

Provides:
- DuckDB price store with derived fiat exchange rates
- Hourly price updater and CLI
- CSV backfill and export scripts
"""

__version__ = "0.1.0"

from . import prices
from . import scripts

__all__ = ["prices", "scripts", "__version__"]
