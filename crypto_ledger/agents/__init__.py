"""AI Agents package."""

from crypto_ledger.agents.rate_agent import (
    RateLookupAgent,
    extract_sources,
    parse_rate,
)

__all__ = [
    "RateLookupAgent",
    "extract_sources",
    "parse_rate",
]
