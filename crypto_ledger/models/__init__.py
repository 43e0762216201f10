"""
Data Models Package

This package contains all Pydantic models used in the Crypto Ledger system.
All data flowing through the system must conform to these schemas.
"""

from crypto_ledger.models.transaction import (
    ActivityPoint,
    FinancialSummary,
    RateLookupResult,
    RateSource,
    Transaction,
    TransactionType,
    new_transaction_id,
)
from crypto_ledger.models.audit import (
    AuditSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)

__all__ = [
    # Ledger models
    "ActivityPoint",
    "FinancialSummary",
    "RateLookupResult",
    "RateSource",
    "Transaction",
    "TransactionType",
    "new_transaction_id",
    # Audit models
    "AuditSeverity",
    "LedgerEvent",
    "LedgerEventBuilder",
    "LedgerEventType",
]
