"""
Summary Aggregation

Pure functions deriving display values from a transaction sequence.
Nothing here is stored; callers recompute after every mutation.
"""

from decimal import Decimal
from typing import Iterable, Sequence

from crypto_ledger.models.transaction import (
    ActivityPoint,
    FinancialSummary,
    Transaction,
    TransactionType,
)


def summarize(transactions: Iterable[Transaction]) -> FinancialSummary:
    """
    Fold a transaction sequence into income, expense and balance totals.

    Balance is derived once from the two totals, so it always equals
    income minus expense even when the totals round.
    """
    total_income = Decimal("0")
    total_expense = Decimal("0")

    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            total_income += transaction.amount
        else:
            total_expense += transaction.amount

    return FinancialSummary(
        total_income=total_income,
        total_expense=total_expense,
        total_balance=total_income - total_expense,
    )


def recent_activity(
    transactions: Sequence[Transaction],
    limit: int = 7,
) -> list[ActivityPoint]:
    """
    The most recent `limit` transactions, oldest first.

    The ledger is kept newest first, so this takes the head of the
    sequence and reverses it for a left-to-right chart.
    """
    if limit < 1:
        return []

    return [
        ActivityPoint(
            label=transaction.description,
            amount=transaction.amount,
            type=transaction.type,
            date=transaction.date,
        )
        for transaction in reversed(transactions[:limit])
    ]
