"""
Pure domain layer.

Vocabulary, rule evaluation, value objects and the collaborator contracts of
the transition executor, with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- Wall-clock time (except SystemClock)
"""

from status_recorder.domain.clock import Clock, DeterministicClock, SystemClock
from status_recorder.domain.dtos import EMPTY_STATUS, CurrentStatus, EntityRef, StatusEntry
from status_recorder.domain.history import HistoryStore, InMemoryHistoryStore
from status_recorder.domain.hooks import HookRegistry, HookResolver, StatusHook
from status_recorder.domain.notifications import (
    NotificationSink,
    NullNotificationSink,
    RecordingNotificationSink,
    StatusNotification,
    SubscriberNotificationSink,
    TransitionKind,
)
from status_recorder.domain.rules import is_admissible, next_available_statuses
from status_recorder.domain.vocabulary import StatusRule, StatusVocabulary

__all__ = [
    "Clock",
    "CurrentStatus",
    "DeterministicClock",
    "EMPTY_STATUS",
    "EntityRef",
    "HistoryStore",
    "HookRegistry",
    "HookResolver",
    "InMemoryHistoryStore",
    "NotificationSink",
    "NullNotificationSink",
    "RecordingNotificationSink",
    "StatusEntry",
    "StatusHook",
    "StatusNotification",
    "StatusRule",
    "StatusVocabulary",
    "SubscriberNotificationSink",
    "SystemClock",
    "TransitionKind",
    "is_admissible",
    "next_available_statuses",
]
