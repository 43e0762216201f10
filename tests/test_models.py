"""
Tests for Crypto Ledger models

Test strategy:
1. Unit tests for individual components (models, aggregation, storage)
2. Flow tests for the store and rate updater (with fake collaborators)
3. No real API calls in tests (use fakes)
"""

import pytest
from datetime import date
from decimal import Decimal

from crypto_ledger.audit import AuditLogger
from crypto_ledger.models.transaction import (
    FinancialSummary,
    RateLookupResult,
    RateSource,
    Transaction,
    TransactionType,
)
from crypto_ledger.models.audit import (
    AuditSeverity,
    LedgerEvent,
    LedgerEventBuilder,
    LedgerEventType,
)


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_creation(self):
        """Test Transaction creation with a generated id."""
        transaction = Transaction(
            description="Salary",
            amount=Decimal("100"),
            type=TransactionType.INCOME,
            category="Work",
            date=date(2024, 5, 1),
        )
        assert transaction.id
        assert transaction.amount == Decimal("100")
        assert transaction.type == TransactionType.INCOME

    def test_generated_ids_are_unique(self):
        """Test that each transaction gets its own id."""
        ids = {
            Transaction(description="x", amount=1, type="INCOME").id
            for _ in range(100)
        }
        assert len(ids) == 100

    def test_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from text fields."""
        transaction = Transaction(description="  Coffee  ", amount=1, type="EXPENSE")
        assert transaction.description == "Coffee"

    def test_transaction_parses_text_fields(self):
        """Test amounts, types and dates given as text."""
        transaction = Transaction(
            description="Rent",
            amount="30.5",
            type="EXPENSE",
            date="2024-05-01",
        )
        assert transaction.amount == Decimal("30.5")
        assert transaction.type == TransactionType.EXPENSE
        assert transaction.date == date(2024, 5, 1)

    @pytest.mark.parametrize("amount", [0, -1, "-0.01"])
    def test_transaction_rejects_non_positive_amount(self, amount):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(description="Bad", amount=amount, type="INCOME")

    def test_transaction_text_fields_are_unbounded(self):
        """Test that description and category carry no length limits."""
        blank = Transaction(description="   ", amount=1, type="INCOME")
        long = Transaction(description="d" * 1000, amount=1, type="INCOME", category="c" * 500)
        assert blank.description == ""
        assert len(long.description) == 1000

    def test_transaction_rejects_unknown_type(self):
        """Test that only INCOME and EXPENSE are accepted."""
        with pytest.raises(ValueError):
            Transaction(description="Gift", amount=1, type="TRANSFER")

    def test_transaction_is_immutable(self):
        """Test that transactions cannot be edited after creation."""
        transaction = Transaction(description="Salary", amount=1, type="INCOME")
        with pytest.raises(ValueError):
            transaction.amount = Decimal("2")

    def test_signed_amount(self):
        """Test that the sign comes from the type, not the amount."""
        income = Transaction(description="In", amount=5, type="INCOME")
        expense = Transaction(description="Out", amount=5, type="EXPENSE")
        assert income.signed_amount == Decimal("5")
        assert expense.signed_amount == Decimal("-5")


class TestSummaryModel:
    """Tests for FinancialSummary."""

    def test_summary_defaults_to_zero(self):
        summary = FinancialSummary()
        assert summary.total_balance == 0

    def test_summary_rejects_inconsistent_balance(self):
        """Test that balance must equal income minus expense."""
        with pytest.raises(ValueError, match="Balance must equal"):
            FinancialSummary(
                total_income=Decimal("100"),
                total_expense=Decimal("30"),
                total_balance=Decimal("100"),
            )


class TestRateModels:
    """Tests for rate lookup models."""

    def test_empty_result_has_no_rate(self):
        result = RateLookupResult()
        assert result.rate is None
        assert result.has_rate is False
        assert result.sources == []

    def test_result_rejects_non_positive_rate(self):
        with pytest.raises(ValueError):
            RateLookupResult(rate=Decimal("0"))

    def test_source_requires_uri(self):
        with pytest.raises(ValueError):
            RateSource(title="Somewhere", uri="")


class TestLedgerEvents:
    """Tests for audit event models."""

    def test_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = LedgerEventBuilder.transaction_added(
            transaction_id="abc",
            transaction_type="INCOME",
            amount="100",
            category="Work",
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "transaction_added"
        assert log_dict["entity_id"] == "abc"
        assert log_dict["details"]["amount"] == "100"

    def test_event_defaults_to_info(self):
        event = LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_DELETED,
            description="Deleted",
        )
        assert event.severity == AuditSeverity.INFO

    def test_failures_are_warnings(self):
        """Test that silently absorbed failures are logged as warnings."""
        from uuid import uuid4

        failed = LedgerEventBuilder.rate_refresh_failed("timeout", uuid4())
        load_failed = LedgerEventBuilder.state_load_failed("transactions", "bad json")
        assert failed.severity == AuditSeverity.WARNING
        assert load_failed.severity == AuditSeverity.WARNING
        assert load_failed.error_message == "bad json"


class TestAuditLogger:
    """Tests for the audit logger."""

    def test_sink_receives_events(self):
        received = []
        logger = AuditLogger(sink=received.append)
        event = LedgerEventBuilder.rate_refresh_skipped()

        assert logger.log(event) is True
        assert received == [event]

    def test_failing_sink_does_not_raise(self):
        """Test that a broken sink never breaks the ledger."""
        def broken(event):
            raise RuntimeError("sink down")

        logger = AuditLogger(sink=broken)
        assert logger.log(LedgerEventBuilder.rate_refresh_skipped()) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
