"""
Storage Services Package

Provides the abstract ledger storage interface and its implementations:
in-memory (tests), local JSON files (default), and Google Sheets.
"""

from crypto_ledger.services.storage.interface import (
    ConnectionError,
    DeserializationError,
    LedgerStorageInterface,
    StorageError,
)
from crypto_ledger.services.storage.key_value import (
    InMemoryLedgerStorage,
    JsonFileLedgerStorage,
    KeyValueLedgerStorage,
)

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "ConnectionError",
    "DeserializationError",
    "StorageError",
    # Key-value implementations
    "InMemoryLedgerStorage",
    "JsonFileLedgerStorage",
    "KeyValueLedgerStorage",
]
