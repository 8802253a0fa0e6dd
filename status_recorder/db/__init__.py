"""Database layer - engine, base classes, types, identity and immutability."""

from status_recorder.db.base import UUID, Base, UUIDString
from status_recorder.db.engine import (
    create_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    session_scope,
)
from status_recorder.db.identity import entity_ref_for
from status_recorder.db.types import UTCDateTime

__all__ = [
    "Base",
    "UUID",
    "UUIDString",
    "UTCDateTime",
    "create_tables",
    "entity_ref_for",
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "session_scope",
]
