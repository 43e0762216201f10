"""
Key-Value Storage Implementations

The ledger's durable state maps naturally onto a small key-value store
(like a browser's local storage): one key for the transaction list, one
key for the exchange rate, both holding text.

KeyValueLedgerStorage implements the ledger interface on top of two
primitives, get_item and set_item, so each backend only has to know
how to read and write a string.
"""

import os
import tempfile
from abc import abstractmethod
from decimal import Decimal
from pathlib import Path
from typing import Optional

from crypto_ledger.models.transaction import Transaction
from crypto_ledger.services.storage import codec
from crypto_ledger.services.storage.interface import (
    DeserializationError,
    LedgerStorageInterface,
    StorageError,
)


DEFAULT_TRANSACTIONS_KEY = "transactions"
DEFAULT_EXCHANGE_RATE_KEY = "exchange_rate"


class KeyValueLedgerStorage(LedgerStorageInterface):
    """Ledger storage over a text key-value store."""

    def __init__(
        self,
        transactions_key: str = DEFAULT_TRANSACTIONS_KEY,
        exchange_rate_key: str = DEFAULT_EXCHANGE_RATE_KEY,
    ):
        if transactions_key == exchange_rate_key:
            raise ValueError("Transactions and exchange rate keys must differ")
        self.transactions_key = transactions_key
        self.exchange_rate_key = exchange_rate_key

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored text for key, or None if absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store text under key, replacing any previous value."""
        pass

    def load_transactions(self) -> list[Transaction]:
        raw = self.get_item(self.transactions_key)
        if raw is None or not raw.strip():
            return []
        return codec.load_transactions(raw)

    def save_transactions(self, transactions: list[Transaction]) -> None:
        self.set_item(self.transactions_key, codec.dump_transactions(transactions))

    def load_exchange_rate(self) -> Optional[Decimal]:
        raw = self.get_item(self.exchange_rate_key)
        if raw is None or not raw.strip():
            return None
        return codec.load_exchange_rate(raw)

    def save_exchange_rate(self, rate: Decimal) -> None:
        self.set_item(self.exchange_rate_key, codec.dump_exchange_rate(rate))


class InMemoryLedgerStorage(KeyValueLedgerStorage):
    """
    Dict-backed storage.

    Used in tests and when no durable backend is configured.
    The raw items are exposed so tests can inspect or corrupt them.
    """

    def __init__(
        self,
        items: Optional[dict[str, str]] = None,
        transactions_key: str = DEFAULT_TRANSACTIONS_KEY,
        exchange_rate_key: str = DEFAULT_EXCHANGE_RATE_KEY,
    ):
        super().__init__(transactions_key, exchange_rate_key)
        self.items: dict[str, str] = dict(items or {})
        self.write_count = 0

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value
        self.write_count += 1


class JsonFileLedgerStorage(KeyValueLedgerStorage):
    """
    One file per key inside a data directory.

    Writes go to a temporary file that is then moved over the target,
    so a crash mid-write never leaves a half-written file behind.
    """

    def __init__(
        self,
        data_dir: Path,
        transactions_key: str = DEFAULT_TRANSACTIONS_KEY,
        exchange_rate_key: str = DEFAULT_EXCHANGE_RATE_KEY,
    ):
        super().__init__(transactions_key, exchange_rate_key)
        self._data_dir = Path(data_dir)

    def _path_for(self, key: str) -> Path:
        suffix = ".json" if key == self.transactions_key else ".txt"
        return self._data_dir / f"{key}{suffix}"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise DeserializationError(f"{path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._data_dir, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
