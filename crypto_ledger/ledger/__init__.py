"""Ledger core: store, summary aggregation, conversion and rate refresh."""

from crypto_ledger.ledger.conversion import format_local_currency, to_local_currency
from crypto_ledger.ledger.rate_updater import (
    RateLookupInterface,
    RateUpdater,
    UnavailableRateLookup,
)
from crypto_ledger.ledger.store import DEFAULT_EXCHANGE_RATE, LedgerStore
from crypto_ledger.ledger.summary import recent_activity, summarize

__all__ = [
    "DEFAULT_EXCHANGE_RATE",
    "LedgerStore",
    "RateLookupInterface",
    "RateUpdater",
    "UnavailableRateLookup",
    "format_local_currency",
    "recent_activity",
    "summarize",
    "to_local_currency",
]
