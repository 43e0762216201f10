"""
Audit Models for Crypto Ledger

Every ledger mutation and every rate refresh is recorded as a structured
event. This provides:
1. Traceability of all changes to the ledger
2. Debugging information when a rate lookup goes wrong
3. Visibility into silently absorbed failures (bad persisted state,
   failed lookups) that are never shown to the user

DESIGN DECISION: Events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LedgerEventType(str, Enum):
    """Types of events we audit."""
    # Ledger mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTION_DELETE_MISSED = "transaction_delete_missed"

    # Exchange rate
    EXCHANGE_RATE_SET = "exchange_rate_set"
    RATE_REFRESH_STARTED = "rate_refresh_started"
    RATE_REFRESH_COMPLETED = "rate_refresh_completed"
    RATE_REFRESH_FAILED = "rate_refresh_failed"
    RATE_REFRESH_SKIPPED = "rate_refresh_skipped"

    # Persistence
    STATE_LOAD_FAILED = "state_load_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LedgerEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: LedgerEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # What the event is about (transaction id, storage key, ...)
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Ties the started/completed/failed events of one refresh together
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class LedgerEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = LedgerEventBuilder.transaction_added(transaction)
        event = LedgerEventBuilder.rate_refresh_failed(reason, correlation_id)
    """

    @staticmethod
    def transaction_added(
        transaction_id: str,
        transaction_type: str,
        amount: str,
        category: str,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_ADDED,
            entity_id=transaction_id,
            description=f"Transaction added: {transaction_type} {amount}",
            details={
                "type": transaction_type,
                "amount": amount,
                "category": category,
            },
        )

    @staticmethod
    def transaction_deleted(transaction_id: str, remaining: int) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_DELETED,
            entity_id=transaction_id,
            description="Transaction deleted",
            details={"remaining": remaining},
        )

    @staticmethod
    def transaction_delete_missed(transaction_id: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.TRANSACTION_DELETE_MISSED,
            severity=AuditSeverity.DEBUG,
            entity_id=transaction_id,
            description="Delete requested for unknown transaction",
        )

    @staticmethod
    def exchange_rate_set(
        rate: str,
        previous_rate: str,
        source_count: int = 0,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.EXCHANGE_RATE_SET,
            correlation_id=correlation_id,
            description=f"Exchange rate changed from {previous_rate} to {rate}",
            details={
                "rate": rate,
                "previous_rate": previous_rate,
                "source_count": source_count,
            },
        )

    @staticmethod
    def rate_refresh_started(correlation_id: UUID) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RATE_REFRESH_STARTED,
            correlation_id=correlation_id,
            description="Exchange rate refresh started",
        )

    @staticmethod
    def rate_refresh_completed(
        rate: str,
        source_count: int,
        correlation_id: UUID,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RATE_REFRESH_COMPLETED,
            correlation_id=correlation_id,
            description=f"Exchange rate refreshed: {rate}",
            details={
                "rate": rate,
                "source_count": source_count,
            },
        )

    @staticmethod
    def rate_refresh_failed(
        reason: str,
        correlation_id: UUID,
        error_message: Optional[str] = None,
    ) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RATE_REFRESH_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Exchange rate refresh failed: {reason}",
            details={"reason": reason},
            error_message=error_message,
        )

    @staticmethod
    def rate_refresh_skipped() -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.RATE_REFRESH_SKIPPED,
            severity=AuditSeverity.DEBUG,
            description="Exchange rate refresh already in progress",
        )

    @staticmethod
    def state_load_failed(key: str, error_message: str) -> LedgerEvent:
        return LedgerEvent(
            event_type=LedgerEventType.STATE_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_id=key,
            description=f"Could not load persisted {key}; using default",
            error_message=error_message,
        )
