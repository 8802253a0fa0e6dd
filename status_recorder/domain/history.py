"""
History store contract and the in-process implementation.

Responsibility:
    Defines what the transition executor needs from a status log: append one
    entry, read the most recent one.  ``InMemoryHistoryStore`` implements the
    same contract with plain lists for embedding and tests; the relational
    implementation lives in ``services.history_store``.

Invariants enforced:
    - Append-only: no method updates or removes an entry.
    - Optimistic append: an entry is appended at ``after.position + 1`` (1 for
      an empty timeline) and only if that slot is still free; otherwise
      ``StatusConflictError`` and nothing is written.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable
from uuid import uuid4

from status_recorder.domain.dtos import EntityRef, StatusEntry
from status_recorder.exceptions import StatusConflictError


def next_position(after: StatusEntry | None) -> int:
    """Timeline slot for an entry appended after ``after``."""
    return 1 if after is None else after.position + 1


@runtime_checkable
class HistoryStore(Protocol):
    """Append + most-recent access to an external status log."""

    def append(
        self,
        entity: EntityRef,
        name: str,
        created_at: datetime,
        *,
        after: StatusEntry | None = None,
    ) -> StatusEntry:
        """Append ``name`` to the timeline of ``entity``.

        ``after`` is the entry the caller last saw as most recent (None for
        an empty timeline).

        Raises:
            StatusConflictError: the timeline moved past ``after``.
        """
        ...

    def most_recent(self, entity: EntityRef) -> StatusEntry | None:
        """Latest entry of ``entity``, or None when it has no history."""
        ...

    def timeline(self, entity: EntityRef) -> tuple[StatusEntry, ...]:
        """Every entry of ``entity``, newest first."""
        ...


class InMemoryHistoryStore:
    """List-backed ``HistoryStore``.  Not shared across processes."""

    def __init__(self) -> None:
        self._timelines: dict[tuple[str, str], list[StatusEntry]] = {}

    @staticmethod
    def _key(entity: EntityRef) -> tuple[str, str]:
        if entity.entity_id is None:
            raise ValueError(f"Cannot record status history for unsaved entity {entity}")
        return (entity.entity_type, entity.entity_id)

    def append(
        self,
        entity: EntityRef,
        name: str,
        created_at: datetime,
        *,
        after: StatusEntry | None = None,
    ) -> StatusEntry:
        entries = self._timelines.setdefault(self._key(entity), [])
        position = next_position(after)
        if position != len(entries) + 1:
            raise StatusConflictError(
                entity_type=entity.entity_type,
                entity_id=str(entity.entity_id),
                expected_position=position,
            )
        entry = StatusEntry(
            id=uuid4(),
            name=name,
            entity_type=entity.entity_type,
            entity_id=str(entity.entity_id),
            position=position,
            created_at=created_at,
        )
        entries.append(entry)
        return entry

    def most_recent(self, entity: EntityRef) -> StatusEntry | None:
        if not entity.is_persisted:
            return None
        entries = self._timelines.get(self._key(entity))
        return entries[-1] if entries else None

    def timeline(self, entity: EntityRef) -> tuple[StatusEntry, ...]:
        if not entity.is_persisted:
            return ()
        return tuple(reversed(self._timelines.get(self._key(entity), ())))
