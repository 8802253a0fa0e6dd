"""ORM models for the status recorder."""

from status_recorder.models.status import StatusHistoryEntry

__all__ = [
    "StatusHistoryEntry",
]
