"""
Wire format for persisted ledger state.

The transaction list is stored as a JSON array of records:

    [{"id": "...", "description": "...", "amount": "12.5",
      "type": "INCOME", "category": "...", "date": "2024-05-01"}, ...]

and the exchange rate as plain decimal text ("120.0").

Amounts are written as strings so Decimal values survive the round
trip exactly; numeric amounts written by older versions are still
accepted on load.
"""

from decimal import Decimal, InvalidOperation

from pydantic import TypeAdapter, ValidationError

from crypto_ledger.models.transaction import Transaction
from crypto_ledger.services.storage.interface import DeserializationError


_TRANSACTION_LIST = TypeAdapter(list[Transaction])


def dump_transactions(transactions: list[Transaction]) -> str:
    """Serialize transactions to a JSON array, preserving order."""
    return _TRANSACTION_LIST.dump_json(list(transactions)).decode("utf-8")


def load_transactions(raw: str) -> list[Transaction]:
    """Deserialize a JSON array of transactions."""
    try:
        return _TRANSACTION_LIST.validate_json(raw)
    except ValidationError as e:
        raise DeserializationError(
            f"Invalid transaction data: {e.error_count()} error(s)"
        ) from e


def dump_exchange_rate(rate: Decimal) -> str:
    return str(rate)


def load_exchange_rate(raw: str) -> Decimal:
    """Parse persisted rate text, rejecting anything but a positive decimal."""
    try:
        rate = Decimal(raw.strip())
    except (InvalidOperation, AttributeError) as e:
        raise DeserializationError(f"Invalid exchange rate: {raw!r}") from e

    if not rate.is_finite() or rate <= 0:
        raise DeserializationError(f"Exchange rate must be positive: {raw!r}")
    return rate
