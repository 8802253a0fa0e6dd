"""
Tests for SqlHistoryStore and HistorySelector against SQLite.

Covers position assignment, the optimistic-append conflict (unique timeline
position) and timezone handling of ``created_at``.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import BigInteger, select

from status_recorder.db.types import UTCDateTime
from status_recorder.domain.dtos import EntityRef
from status_recorder.domain.history import HistoryStore
from status_recorder.exceptions import StatusConflictError
from status_recorder.models.status import StatusHistoryEntry
from status_recorder.selectors.history_selector import HistorySelector
from status_recorder.services.history_store import SqlHistoryStore
from status_recorder.services.transition_service import StatusTransitionService

ORDER_1 = EntityRef("Order", "order-1")
ORDER_2 = EntityRef("Order", "order-2")
INVOICE_1 = EntityRef("Invoice", "order-1")


@pytest.fixture
def store(session):
    return SqlHistoryStore(session)


@pytest.fixture
def selector(session):
    return HistorySelector(session)


class TestAppend:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, HistoryStore)

    def test_append_and_read_back(self, store, clock):
        first = store.append(ORDER_1, "A", clock.now())
        second = store.append(ORDER_1, "B", clock.tick(), after=first)

        assert (first.position, second.position) == (1, 2)
        assert store.most_recent(ORDER_1) == second
        assert store.timeline(ORDER_1) == (second, first)

    def test_append_only_flushes(self, store, session, clock):
        store.append(ORDER_1, "A", clock.now())

        assert session.in_transaction()
        rows = session.execute(select(StatusHistoryEntry)).scalars().all()
        assert [row.name for row in rows] == ["A"]

    def test_timelines_keyed_by_type_and_id(self, store, clock):
        store.append(ORDER_1, "A", clock.now())

        assert store.most_recent(ORDER_2) is None
        assert store.most_recent(INVOICE_1) is None
        assert store.timeline(ORDER_2) == ()

    def test_created_at_round_trips_as_utc(self, store, session, clock):
        entry = store.append(ORDER_1, "A", clock.now())
        session.expire_all()

        loaded = store.most_recent(ORDER_1)
        assert loaded.created_at == entry.created_at
        assert loaded.created_at.tzinfo is not None

    def test_naive_timestamp_rejected(self, store):
        with pytest.raises(Exception) as exc_info:
            store.append(ORDER_1, "A", datetime(2024, 1, 1, 12, 0))
        assert "Naive datetime" in str(exc_info.value)

    def test_unsaved_entity_rejected(self, store, clock):
        with pytest.raises(ValueError):
            store.append(EntityRef("Order"), "A", clock.now())

    def test_offset_timestamp_stored_as_utc(self, store, session):
        at = datetime(2024, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        store.append(ORDER_1, "A", at)
        session.expire_all()

        loaded = store.most_recent(ORDER_1)
        assert loaded.created_at == at
        assert loaded.created_at.tzinfo == timezone.utc

    def test_recorded_entry_equals_current_entry(self, session, abc_vocabulary, clock):
        recorder = StatusTransitionService(SqlHistoryStore(session), abc_vocabulary, clock=clock)

        entry = recorder.change_status_to(ORDER_1, "A")
        session.expire_all()

        assert recorder.current_entry(ORDER_1) == entry


class TestColumnTypes:
    def test_created_at_uses_utc_type(self):
        assert isinstance(StatusHistoryEntry.__table__.c.created_at.type, UTCDateTime)

    def test_string_lengths(self):
        columns = StatusHistoryEntry.__table__.c
        assert columns.name.type.length == 100
        assert columns.entity_type.type.length == 100
        assert columns.entity_id.type.length == 255

    def test_position_is_big_integer(self):
        assert isinstance(StatusHistoryEntry.__table__.c.position.type, BigInteger)


class TestConflict:
    def test_duplicate_position_raises_conflict(self, store, clock):
        store.append(ORDER_1, "A", clock.now())

        with pytest.raises(StatusConflictError) as exc_info:
            store.append(ORDER_1, "C", clock.tick())

        assert exc_info.value.expected_position == 1
        assert exc_info.value.entity_id == "order-1"

    def test_session_usable_after_conflict(self, store, clock):
        first = store.append(ORDER_1, "A", clock.now())
        with pytest.raises(StatusConflictError):
            store.append(ORDER_1, "C", clock.tick())

        second = store.append(ORDER_1, "B", clock.tick(), after=first)

        assert store.timeline(ORDER_1) == (second, first)

    def test_conflict_logged(self, store, clock, captured_logs):
        store.append(ORDER_1, "A", clock.now())
        with pytest.raises(StatusConflictError):
            store.append(ORDER_1, "C", clock.tick())

        records = [r for r in captured_logs() if r["message"] == "status_append_conflict"]
        assert len(records) == 1
        assert records[0]["position"] == 1


class TestHistorySelector:
    def test_count_and_limit(self, store, selector, clock):
        entry = None
        for name in ("A", "B", "A"):
            entry = store.append(ORDER_1, name, clock.tick(), after=entry)

        assert selector.count(ORDER_1) == 3
        assert [e.name for e in selector.timeline(ORDER_1, limit=2)] == ["A", "B"]
        assert selector.count(EntityRef("Order")) == 0

    def test_entries_named(self, store, selector, clock):
        store.append(ORDER_1, "A", clock.tick())
        store.append(ORDER_2, "A", clock.tick())
        store.append(INVOICE_1, "A", clock.tick())

        entries = selector.entries_named("Order", "A")
        assert [e.entity_id for e in entries] == ["order-1", "order-2"]

    def test_unsaved_entity_reads_empty(self, selector):
        unsaved = EntityRef("Order")
        assert selector.most_recent(unsaved) is None
        assert selector.timeline(unsaved) == ()

    def test_returns_frozen_dtos(self, store, selector, clock):
        store.append(ORDER_1, "A", clock.now())
        entry = selector.most_recent(ORDER_1)

        with pytest.raises(AttributeError):
            entry.name = "B"

    def test_model_repr_and_entity(self, store, session, clock):
        store.append(ORDER_1, "A", clock.now())
        row = session.execute(select(StatusHistoryEntry)).scalar_one()

        assert row.entity == ORDER_1
        assert "A on Order:order-1 #1" in repr(row)
        assert row.created_at == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
