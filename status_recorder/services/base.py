"""
BaseService -- abstract base for services that write through a Session.

Responsibility:
    Common constructor and session-handling contract.  Services receive a
    SQLAlchemy ``Session`` and persist with ``session.flush()``, never
    ``session.commit()``.

Invariants enforced:
    Transaction boundaries belong to the caller.  A status change and the
    business update that triggered it commit or roll back together.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from status_recorder.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for session-backed services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide query methods; those belong in ``selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
