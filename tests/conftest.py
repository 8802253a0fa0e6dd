"""
Pytest fixtures for the status recorder test suite.

Provides:
- In-memory SQLite engine + session per test (tables and triggers installed,
  ORM immutability listeners registered)
- An ``Order`` model that owns a status lifecycle, for ORM-level tests
- Deterministic clock, recording notification sink, in-memory history store
- Captured structured logs
"""

import json
import logging
from io import StringIO
from typing import ClassVar, Generator

import pytest
from sqlalchemy import String
from sqlalchemy.orm import Mapped, Session, mapped_column

from status_recorder.db.base import Base
from status_recorder.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from status_recorder.db.immutability import register_immutability_listeners
from status_recorder.domain.clock import DeterministicClock
from status_recorder.domain.history import InMemoryHistoryStore
from status_recorder.domain.hooks import HookRegistry
from status_recorder.domain.notifications import RecordingNotificationSink
from status_recorder.domain.vocabulary import StatusVocabulary
from status_recorder.lifecycle import StatusLifecycle
from status_recorder.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# =============================================================================
# Vocabularies and models shared by the suite
# =============================================================================

# A: from anywhere; B: only from A; C: from anything except A and B
ABC_STATUSES = {
    "A": {},
    "B": {"from": "A"},
    "C": {"not-from": ["A", "B"]},
}

ORDER_STATUSES = {
    "placed": None,
    "paid": {"from": "placed"},
    "shipped": {"from": ["paid"]},
    "delivered": {"from": "shipped"},
    "cancelled": {"not-from": ["shipped", "delivered"]},
}

ORDER_HOOKS = HookRegistry()
ORDER_HOOK_CALLS: list[tuple[str, object]] = []


@ORDER_HOOKS.on("shipped")
def _record_shipment(order):
    ORDER_HOOK_CALLS.append(("shipped", order))


class Order(Base):
    """Test entity with a status lifecycle."""

    __tablename__ = "test_orders"

    reference: Mapped[str] = mapped_column(String(50), nullable=False)

    lifecycle: ClassVar[StatusLifecycle] = StatusLifecycle(ORDER_STATUSES, hooks=ORDER_HOOKS)


class Shipment(Base):
    """Test entity overriding its timeline type name."""

    __tablename__ = "test_shipments"
    __status_entity_type__ = "logistics.Shipment"

    carrier: Mapped[str] = mapped_column(String(50), nullable=False)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture status_recorder logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, recorder):
            recorder.change_status_to(ref, "A")
            logs = captured_logs()
            assert any(r["message"] == "status_changed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("status_recorder")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = init_engine_from_url("sqlite:///:memory:")
    create_tables(install_triggers=True)
    register_immutability_listeners()
    yield engine
    reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    session = get_session()
    yield session
    session.rollback()
    session.close()


# =============================================================================
# Domain fixtures
# =============================================================================


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def sink() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest.fixture
def memory_store() -> InMemoryHistoryStore:
    return InMemoryHistoryStore()


@pytest.fixture
def abc_vocabulary() -> StatusVocabulary:
    return StatusVocabulary.from_mapping(ABC_STATUSES)


@pytest.fixture
def order_model() -> type[Order]:
    ORDER_HOOK_CALLS.clear()
    return Order


@pytest.fixture
def order_hook_calls() -> list[tuple[str, object]]:
    ORDER_HOOK_CALLS.clear()
    return ORDER_HOOK_CALLS


@pytest.fixture
def shipment_model() -> type[Shipment]:
    return Shipment
