"""
Application Wiring for Crypto Ledger

This module ties together all the components:
1. Storage backend (chosen from settings)
2. Ledger store (built once, shared by reference)
3. Rate updater (backed by the Gemini lookup agent when configured)

DESIGN DECISION: Nothing in the ledger reaches for global state. Every
collaborator is constructed here and handed in explicitly, so the UI
and the tests build exactly the same objects.
"""

from typing import Optional

import structlog

from crypto_ledger.agents import RateLookupAgent
from crypto_ledger.audit import AuditLogger
from crypto_ledger.config import Settings, get_settings
from crypto_ledger.ledger import (
    LedgerStore,
    RateLookupInterface,
    RateUpdater,
    UnavailableRateLookup,
)
from crypto_ledger.services.storage import (
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    LedgerStorageInterface,
)


logger = structlog.get_logger("crypto_ledger.orchestrator")


def create_storage(settings: Optional[Settings] = None) -> LedgerStorageInterface:
    """
    Build the storage backend named in StorageSettings.

    Raises:
        ConnectionError: If Google Sheets is selected but unreachable
    """
    settings = settings or get_settings()
    storage_settings = settings.storage

    if storage_settings.backend == "google_sheets":
        from crypto_ledger.services.storage.google_sheets import (
            GoogleSheetsClient,
            GoogleSheetsLedgerStorage,
        )
        return GoogleSheetsLedgerStorage(GoogleSheetsClient(settings.google_sheets))

    if storage_settings.backend == "memory":
        return InMemoryLedgerStorage(
            transactions_key=storage_settings.transactions_key,
            exchange_rate_key=storage_settings.exchange_rate_key,
        )

    return JsonFileLedgerStorage(
        data_dir=storage_settings.data_dir,
        transactions_key=storage_settings.transactions_key,
        exchange_rate_key=storage_settings.exchange_rate_key,
    )


def create_rate_lookup(settings: Optional[Settings] = None) -> RateLookupInterface:
    """
    Build the Gemini rate lookup, or a no-op lookup if Gemini is not configured.
    """
    settings = settings or get_settings()
    try:
        return RateLookupAgent(settings=settings.gemini, app_settings=settings.app)
    except Exception as e:
        # Gemini not configured - refresh becomes a no-op
        logger.warning("rate_lookup_unavailable", error=str(e))
        return UnavailableRateLookup()


def create_app_components(
    use_ai: bool = True,
    settings: Optional[Settings] = None,
    storage: Optional[LedgerStorageInterface] = None,
    rate_lookup: Optional[RateLookupInterface] = None,
) -> tuple[LedgerStore, RateUpdater]:
    """
    Factory function to create all application components.

    Args:
        use_ai: Whether to use Gemini for rate lookups.
                Set to False to run without any external service.
        settings: Settings to build from (defaults to get_settings())
        storage: Storage override (defaults to the configured backend)
        rate_lookup: Lookup override (takes precedence over use_ai)

    Returns:
        (ledger_store, rate_updater)
    """
    settings = settings or get_settings()
    app_settings = settings.app
    audit_logger = AuditLogger()

    if storage is None:
        storage = create_storage(settings)

    if rate_lookup is None:
        rate_lookup = (
            create_rate_lookup(settings)
            if use_ai
            else UnavailableRateLookup()
        )

    store = LedgerStore(
        storage=storage,
        audit_logger=audit_logger,
        default_exchange_rate=str(app_settings.default_exchange_rate),
    )
    rate_updater = RateUpdater(
        store=store,
        lookup=rate_lookup,
        timeout_seconds=app_settings.rate_lookup_timeout_seconds,
        audit_logger=audit_logger,
    )

    return store, rate_updater
