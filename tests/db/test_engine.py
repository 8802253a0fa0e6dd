"""Tests for engine and session management (status_recorder/db/engine.py)."""

import pytest
from sqlalchemy import inspect, select
from sqlalchemy.pool import StaticPool

from status_recorder.db.engine import (
    create_engine_from_url,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    reset_engine,
    session_scope,
)
from status_recorder.domain.dtos import EntityRef
from status_recorder.exceptions import StatusConflictError
from status_recorder.models.status import StatusHistoryEntry
from status_recorder.services.history_store import SqlHistoryStore

ORDER = EntityRef("Order", "order-1")


class TestUninitialized:
    @pytest.fixture(autouse=True)
    def _no_engine(self):
        reset_engine()
        yield
        reset_engine()

    @pytest.mark.parametrize("accessor", [get_engine, get_session, get_session_factory])
    def test_raises_before_init(self, accessor):
        with pytest.raises(RuntimeError, match="Engine not initialized"):
            accessor()


class TestCreateEngineFromUrl:
    def test_in_memory_sqlite_uses_static_pool(self):
        engine = create_engine_from_url("sqlite:///:memory:")
        try:
            assert isinstance(engine.pool, StaticPool)
            assert engine.dialect.name == "sqlite"
        finally:
            engine.dispose()

    def test_file_sqlite(self, tmp_path):
        engine = create_engine_from_url(f"sqlite:///{tmp_path / 'history.db'}")
        try:
            assert not isinstance(engine.pool, StaticPool)
        finally:
            engine.dispose()


class TestSessionScope:
    def test_commits_on_success(self, engine, clock):
        with session_scope() as session:
            SqlHistoryStore(session).append(ORDER, "A", clock.now())

        with session_scope() as session:
            assert SqlHistoryStore(session).most_recent(ORDER).name == "A"

    def test_rolls_back_on_error(self, engine, clock):
        with pytest.raises(RuntimeError):
            with session_scope() as session:
                SqlHistoryStore(session).append(ORDER, "A", clock.now())
                raise RuntimeError("business update failed")

        with session_scope() as session:
            assert session.execute(select(StatusHistoryEntry)).first() is None

    def test_savepoint_conflict_keeps_outer_transaction(self, engine, clock):
        with session_scope() as session:
            store = SqlHistoryStore(session)
            first = store.append(ORDER, "A", clock.now())
            with pytest.raises(StatusConflictError):
                store.append(ORDER, "B", clock.tick())
            store.append(ORDER, "B", clock.tick(), after=first)

        with session_scope() as session:
            assert [e.name for e in SqlHistoryStore(session).timeline(ORDER)] == ["B", "A"]


class TestTables:
    def test_create_and_drop(self, engine):
        assert "status_history" in inspect(engine).get_table_names()

        drop_tables()

        assert "status_history" not in inspect(engine).get_table_names()
