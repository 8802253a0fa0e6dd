"""
Status Recorder

Constrained, auditable status lifecycles for domain entities:
- A closed status vocabulary per entity type with from / not-from rules
- Validated transitions with pre/post notifications and per-status hooks
- Append-only status history; the current status is always derived from it
"""

from status_recorder.domain.dtos import EMPTY_STATUS, CurrentStatus, EntityRef, StatusEntry
from status_recorder.domain.hooks import HookRegistry
from status_recorder.domain.notifications import TransitionKind
from status_recorder.domain.vocabulary import StatusRule, StatusVocabulary
from status_recorder.exceptions import (
    InvalidStatusChangeError,
    StatusConflictError,
    StatusRecorderError,
    UndefinedStatusError,
    VocabularyError,
)
from status_recorder.lifecycle import StatusLifecycle
from status_recorder.services.transition_service import StatusTransitionService

__version__ = "0.1.0"

__all__ = [
    "EMPTY_STATUS",
    "CurrentStatus",
    "EntityRef",
    "HookRegistry",
    "InvalidStatusChangeError",
    "StatusConflictError",
    "StatusEntry",
    "StatusLifecycle",
    "StatusRecorderError",
    "StatusRule",
    "StatusTransitionService",
    "StatusVocabulary",
    "TransitionKind",
    "UndefinedStatusError",
    "VocabularyError",
]
