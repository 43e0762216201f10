"""Shared fixtures: no test touches the network or the real filesystem."""

import pytest

from crypto_ledger.audit import AuditLogger
from crypto_ledger.ledger import LedgerStore
from crypto_ledger.services.storage import InMemoryLedgerStorage


class RecordingSink:
    """Collects audit events so tests can assert on them."""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)

    @property
    def types(self):
        return [event.event_type.value for event in self.events]


@pytest.fixture
def storage():
    return InMemoryLedgerStorage()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def audit_logger(sink):
    return AuditLogger(sink=sink)


@pytest.fixture
def store(storage, audit_logger):
    return LedgerStore(storage, audit_logger=audit_logger)
