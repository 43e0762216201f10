"""
Ledger Store

Holds the ordered transaction list and the current exchange rate, and
persists both on every mutation.

DESIGN DECISION: The store is an explicit object built once at startup
and passed to every consumer, with persistence injected. There is no
module-level state, so tests run against an in-memory fake.

GUARANTEES:
- New transactions become the head of the sequence
- Every mutation fully re-serializes the affected value (no batching)
- A failed write raises StorageError and leaves memory unchanged
- Persisted state that cannot be read never stops the store from
  starting; it falls back to empty / default values
"""

import datetime as dt
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from crypto_ledger.audit import AuditLogger
from crypto_ledger.ledger import conversion
from crypto_ledger.ledger.summary import recent_activity, summarize
from crypto_ledger.models.audit import LedgerEventBuilder
from crypto_ledger.models.transaction import (
    ActivityPoint,
    FinancialSummary,
    RateLookupResult,
    RateSource,
    Transaction,
    TransactionType,
)
from crypto_ledger.services.storage import LedgerStorageInterface, StorageError


DEFAULT_EXCHANGE_RATE = Decimal("1")


class LedgerStore:
    """
    The ledger and its exchange rate.

    Reads are served from memory. Writes go to storage first and only
    replace the in-memory state once the write has succeeded.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        default_exchange_rate: Union[Decimal, float, str] = DEFAULT_EXCHANGE_RATE,
    ):
        """
        Initialize the store and load persisted state.

        Args:
            storage: Persistence backend
            audit_logger: Receives ledger events. If None, events are
                          logged locally only.
            default_exchange_rate: Rate used when none has been persisted
        """
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._default_rate = _positive_decimal(default_exchange_rate)

        self._transactions: tuple[Transaction, ...] = ()
        self._exchange_rate = self._default_rate
        self._rate_sources: tuple[RateSource, ...] = ()
        self._summary: Optional[FinancialSummary] = None

        self.load()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self) -> tuple[Transaction, ...]:
        """
        (Re)load persisted state.

        Missing or unreadable transactions load as an empty ledger;
        a missing or unreadable rate loads as the default rate.
        """
        try:
            transactions = self._storage.load_transactions()
        except StorageError as e:
            self._audit_logger.log(
                LedgerEventBuilder.state_load_failed("transactions", str(e))
            )
            transactions = []

        try:
            rate = self._storage.load_exchange_rate()
        except StorageError as e:
            self._audit_logger.log(
                LedgerEventBuilder.state_load_failed("exchange_rate", str(e))
            )
            rate = None

        self._transactions = tuple(transactions)
        self._exchange_rate = rate if rate is not None else self._default_rate
        self._rate_sources = ()
        self._summary = None
        return self._transactions

    # -------------------------------------------------------------------------
    # Read accessors
    # -------------------------------------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """All transactions, newest first."""
        return self._transactions

    @property
    def exchange_rate(self) -> Decimal:
        return self._exchange_rate

    @property
    def rate_sources(self) -> tuple[RateSource, ...]:
        """Citations for the current rate (empty until a refresh succeeds)."""
        return self._rate_sources

    @property
    def summary(self) -> FinancialSummary:
        """Totals for the current ledger, recomputed after each mutation."""
        if self._summary is None:
            self._summary = summarize(self._transactions)
        return self._summary

    def get(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def __len__(self) -> int:
        return len(self._transactions)

    def recent_activity(self, limit: int = 7) -> list[ActivityPoint]:
        return recent_activity(self._transactions, limit)

    def to_local_currency(self, amount: Union[Decimal, float, int, str]) -> Decimal:
        return conversion.to_local_currency(amount, self._exchange_rate)

    def format_local_currency(self, amount: Union[Decimal, float, int, str]) -> str:
        return conversion.format_local_currency(amount, self._exchange_rate)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(
        self,
        description: str,
        amount: Union[Decimal, float, int, str],
        type: Union[TransactionType, str],
        category: str = "",
        date: Optional[Union[dt.date, str]] = None,
    ) -> Transaction:
        """
        Record a new transaction at the head of the ledger.

        Raises:
            pydantic.ValidationError: If amount is not positive
            StorageError: If the ledger could not be persisted
        """
        fields = {
            "description": description,
            "amount": amount,
            "type": type,
            "category": category,
        }
        if date is not None:
            fields["date"] = date
        transaction = Transaction.model_validate(fields)

        self._commit_transactions((transaction,) + self._transactions)

        self._audit_logger.log(
            LedgerEventBuilder.transaction_added(
                transaction_id=transaction.id,
                transaction_type=transaction.type.value,
                amount=str(transaction.amount),
                category=transaction.category,
            )
        )
        return transaction

    def delete(self, transaction_id: str) -> None:
        """
        Remove a transaction by id.

        Unknown ids leave the ledger unchanged. The resulting sequence
        is persisted either way.
        """
        remaining = tuple(t for t in self._transactions if t.id != transaction_id)
        found = len(remaining) != len(self._transactions)

        self._commit_transactions(remaining)

        if found:
            event = LedgerEventBuilder.transaction_deleted(transaction_id, len(remaining))
        else:
            event = LedgerEventBuilder.transaction_delete_missed(transaction_id)
        self._audit_logger.log(event)

    def set_exchange_rate(
        self,
        rate: Union[Decimal, float, int, str],
        sources: tuple[RateSource, ...] = (),
        correlation_id: Optional[UUID] = None,
    ) -> Decimal:
        """
        Replace the exchange rate (manual override or refresh result).

        Raises:
            ValueError: If rate is not a positive number
            StorageError: If the rate could not be persisted
        """
        new_rate = _positive_decimal(rate)
        previous_rate = self._exchange_rate

        self._storage.save_exchange_rate(new_rate)
        self._exchange_rate = new_rate
        self._rate_sources = tuple(sources)

        self._audit_logger.log(
            LedgerEventBuilder.exchange_rate_set(
                rate=str(new_rate),
                previous_rate=str(previous_rate),
                source_count=len(self._rate_sources),
                correlation_id=correlation_id,
            )
        )
        return new_rate

    def apply_rate_update(
        self,
        result: RateLookupResult,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Adopt a looked-up rate and its sources.

        Returns False (and changes nothing) if the result has no rate.
        """
        if result.rate is None:
            return False
        self.set_exchange_rate(result.rate, tuple(result.sources), correlation_id)
        return True

    def _commit_transactions(self, transactions: tuple[Transaction, ...]) -> None:
        self._storage.save_transactions(list(transactions))
        self._transactions = transactions
        self._summary = None


def _positive_decimal(value: Union[Decimal, float, int, str]) -> Decimal:
    try:
        rate = value if isinstance(value, Decimal) else Decimal(str(value))
    except ArithmeticError as e:
        raise ValueError(f"Exchange rate must be a number: {value!r}") from e
    if not rate.is_finite() or rate <= 0:
        raise ValueError(f"Exchange rate must be positive: {value!r}")
    return rate
