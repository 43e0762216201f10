"""Services package."""

from crypto_ledger.services.storage import (
    ConnectionError,
    DeserializationError,
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    KeyValueLedgerStorage,
    LedgerStorageInterface,
    StorageError,
)

__all__ = [
    # Storage services
    "ConnectionError",
    "DeserializationError",
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
    "KeyValueLedgerStorage",
    "LedgerStorageInterface",
    "StorageError",
]
