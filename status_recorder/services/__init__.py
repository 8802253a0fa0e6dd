"""Services for the status recorder (write side)."""

from status_recorder.services.history_store import SqlHistoryStore
from status_recorder.services.status_resolver import CurrentStatusResolver
from status_recorder.services.transition_service import StatusTransitionService

__all__ = [
    "CurrentStatusResolver",
    "SqlHistoryStore",
    "StatusTransitionService",
]
