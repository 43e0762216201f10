"""
Exchange Rate Updater

Runs a single best-effort lookup against an external rate provider and
merges the result into the ledger store.

STATES:
    Idle --refresh()--> Updating --(success | failure | timeout)--> Idle

BOUNDARIES:
- One lookup at a time: a refresh requested while another is running
  returns immediately without calling the provider
- No retry, no backoff
- A stalled provider is abandoned after `timeout_seconds`
- Failures never reach the caller and never change the store
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from crypto_ledger.audit import AuditLogger, create_correlation_id
from crypto_ledger.ledger.store import LedgerStore
from crypto_ledger.models.audit import LedgerEventBuilder
from crypto_ledger.models.transaction import RateLookupResult


DEFAULT_TIMEOUT_SECONDS = 30.0


class RateLookupInterface(ABC):
    """An external service that reports the current exchange rate."""

    @abstractmethod
    async def lookup(self) -> RateLookupResult:
        """
        Fetch the current rate.

        Returns:
            The rate (or None if the provider could not determine one)
            and the sources it cited

        Raises:
            Exception: Any provider failure; the updater absorbs it
        """
        pass


class UnavailableRateLookup(RateLookupInterface):
    """Stand-in used when no provider is configured. Never finds a rate."""

    async def lookup(self) -> RateLookupResult:
        return RateLookupResult()


class RateUpdater:
    """
    Refreshes the store's exchange rate from a lookup provider.

    Callers should disable their refresh control while `is_updating`
    is True.
    """

    def __init__(
        self,
        store: LedgerStore,
        lookup: RateLookupInterface,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        audit_logger: Optional[AuditLogger] = None,
    ):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._store = store
        self._lookup = lookup
        self._timeout_seconds = timeout_seconds
        self._audit_logger = audit_logger or AuditLogger()
        self._updating = False

    @property
    def is_updating(self) -> bool:
        return self._updating

    async def refresh(self) -> RateLookupResult:
        """
        Look up the current rate and adopt it if one was found.

        Returns the lookup result. An empty result (no rate, no sources)
        is returned when the lookup failed, timed out, or was skipped
        because another refresh is in progress.
        """
        if self._updating:
            self._audit_logger.log(LedgerEventBuilder.rate_refresh_skipped())
            return RateLookupResult()

        self._updating = True
        correlation_id = create_correlation_id()
        self._audit_logger.log(LedgerEventBuilder.rate_refresh_started(correlation_id))

        try:
            try:
                result = await asyncio.wait_for(
                    self._lookup.lookup(),
                    timeout=self._timeout_seconds,
                )
            except asyncio.TimeoutError:
                self._audit_logger.log(
                    LedgerEventBuilder.rate_refresh_failed(
                        reason=f"timed out after {self._timeout_seconds}s",
                        correlation_id=correlation_id,
                    )
                )
                return RateLookupResult()
            except Exception as e:
                self._audit_logger.log(
                    LedgerEventBuilder.rate_refresh_failed(
                        reason="lookup error",
                        correlation_id=correlation_id,
                        error_message=str(e),
                    )
                )
                return RateLookupResult()

            if result.rate is None:
                self._audit_logger.log(
                    LedgerEventBuilder.rate_refresh_failed(
                        reason="no rate in lookup result",
                        correlation_id=correlation_id,
                    )
                )
                return result

            try:
                self._store.apply_rate_update(result, correlation_id)
            except Exception as e:
                self._audit_logger.log(
                    LedgerEventBuilder.rate_refresh_failed(
                        reason="could not persist rate",
                        correlation_id=correlation_id,
                        error_message=str(e),
                    )
                )
                return RateLookupResult()

            self._audit_logger.log(
                LedgerEventBuilder.rate_refresh_completed(
                    rate=str(result.rate),
                    source_count=len(result.sources),
                    correlation_id=correlation_id,
                )
            )
            return result
        finally:
            self._updating = False
