"""
CurrentStatusResolver -- derives an entity's present status.

The current status is the most recent history entry, or the empty status when
the entity has no history (or no identity to key history on).  It is read
from the store on every call and never stored on the entity.
"""

from status_recorder.domain.dtos import CurrentStatus, EntityRef
from status_recorder.domain.history import HistoryStore


class CurrentStatusResolver:
    def __init__(self, store: HistoryStore):
        self._store = store

    def resolve(self, entity: EntityRef) -> CurrentStatus:
        if not entity.is_persisted:
            return CurrentStatus()
        return CurrentStatus.of(self._store.most_recent(entity))
