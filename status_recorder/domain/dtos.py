"""
Frozen value objects shared by every layer.

Services and selectors return these, never ORM instances, so callers cannot
mutate history through a returned object.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

EMPTY_STATUS = ""


@dataclass(frozen=True)
class EntityRef:
    """Identity of the entity owning a status timeline.

    ``entity_id`` is None while the entity has no durable identity; such an
    entity can be validated against but nothing is recorded for it.
    """

    entity_type: str
    entity_id: str | None = None

    @property
    def is_persisted(self) -> bool:
        return self.entity_id is not None

    def __str__(self) -> str:
        return f"{self.entity_type}:{self.entity_id or '<unsaved>'}"


@dataclass(frozen=True)
class StatusEntry:
    """One immutable, timestamped status record of an entity.

    ``position`` is the 1-based append index within the entity's timeline.
    """

    id: UUID
    name: str
    entity_type: str
    entity_id: str
    position: int
    created_at: datetime

    @property
    def entity(self) -> EntityRef:
        return EntityRef(self.entity_type, self.entity_id)


@dataclass(frozen=True)
class CurrentStatus:
    """Derived present status: the latest entry, or the empty status."""

    name: str = EMPTY_STATUS
    entry: StatusEntry | None = None

    @property
    def is_empty(self) -> bool:
        return self.entry is None

    @classmethod
    def of(cls, entry: StatusEntry | None) -> CurrentStatus:
        if entry is None:
            return cls()
        return cls(name=entry.name, entry=entry)
