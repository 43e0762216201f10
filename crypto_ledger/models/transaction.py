"""
Core Data Models for Crypto Ledger

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Amounts are always positive Decimals in the tracked
crypto unit. The sign of a transaction is carried by its type, never
by its amount.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


def new_transaction_id() -> str:
    """Generate a collision-resistant opaque transaction identifier."""
    return uuid4().hex


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


# =============================================================================
# LEDGER MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    A single ledger entry.

    Transactions are immutable once created. The only way to change the
    ledger is to add a new transaction or delete an existing one.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        default_factory=new_transaction_id,
        min_length=1,
        description="Opaque unique identifier"
    )
    description: str = Field(
        ...,
        description="What the transaction was for"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in the tracked crypto unit (always positive)"
    )
    type: TransactionType = Field(
        ...,
        description="INCOME or EXPENSE"
    )
    category: str = Field(
        default="",
        description="Free-text category"
    )
    date: dt.date = Field(
        default_factory=dt.date.today,
        description="Calendar date of the transaction"
    )

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign implied by the transaction type."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


class FinancialSummary(BaseModel):
    """
    Totals derived from the ledger.

    Never persisted. Always a pure function of the transaction sequence.
    """
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = Field(default=Decimal("0"))
    total_expense: Decimal = Field(default=Decimal("0"))
    total_balance: Decimal = Field(default=Decimal("0"))

    @model_validator(mode='after')
    def validate_balance(self) -> 'FinancialSummary':
        """Balance must always equal income minus expense."""
        if self.total_balance != self.total_income - self.total_expense:
            raise ValueError("Balance must equal total income minus total expense")
        return self


class ActivityPoint(BaseModel):
    """One bar of the recent activity chart."""
    model_config = ConfigDict(frozen=True)

    label: str
    amount: Decimal
    type: TransactionType
    date: dt.date


# =============================================================================
# EXCHANGE RATE MODELS
# =============================================================================

class RateSource(BaseModel):
    """
    A citation accompanying a fetched rate.

    Held for the current session only; never persisted.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    title: str = Field(
        default="",
        description="Human-readable title of the source page"
    )
    uri: str = Field(
        ...,
        min_length=1,
        description="Link to the source"
    )


class RateLookupResult(BaseModel):
    """
    Result of an exchange rate lookup.

    A missing rate means the lookup produced nothing usable.
    """
    model_config = ConfigDict(frozen=True)

    rate: Optional[Decimal] = Field(
        default=None,
        gt=0,
        description="Fiat value of one crypto unit"
    )
    sources: list[RateSource] = Field(
        default_factory=list,
        description="Citations backing the rate"
    )

    @property
    def has_rate(self) -> bool:
        return self.rate is not None
