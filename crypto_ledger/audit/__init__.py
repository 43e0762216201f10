"""Audit logging package."""

from crypto_ledger.audit.logger import AuditLogger, EventSink, create_correlation_id

__all__ = ["AuditLogger", "EventSink", "create_correlation_id"]
