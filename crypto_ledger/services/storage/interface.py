"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Persist to local files, Google Sheets, or anything else
2. Use in-memory storage for testing
3. Keep the ledger decoupled from storage implementation

Durable state is exactly two values: the transaction list and the
exchange rate. Every save is a full rewrite of one of them; there are
no partial writes.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from crypto_ledger.models.transaction import Transaction


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation (local files, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load_transactions(self) -> list[Transaction]:
        """
        Load the persisted transaction sequence.

        Returns:
            Transactions in stored order (newest first),
            or an empty list if nothing has been persisted

        Raises:
            DeserializationError: If persisted data is corrupt
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save_transactions(self, transactions: list[Transaction]) -> None:
        """
        Replace the persisted transaction sequence.

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def load_exchange_rate(self) -> Optional[Decimal]:
        """
        Load the persisted exchange rate.

        Returns:
            The rate, or None if no rate has been persisted

        Raises:
            DeserializationError: If the persisted value is not a positive decimal
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save_exchange_rate(self, rate: Decimal) -> None:
        """
        Replace the persisted exchange rate.

        Raises:
            StorageError: If save fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DeserializationError(StorageError):
    """Persisted data exists but could not be decoded."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
