"""
HistorySelector -- read side of the relational status log.

Responsibility:
    Queries over ``status_history`` keyed by entity type + identity, returning
    frozen ``StatusEntry`` DTOs.  Every call re-reads the database; nothing is
    cached, so a resolved current status is never staler than the session's
    view.

Architecture position:
    Selectors -- read-only.  Used directly by callers and by SqlHistoryStore.
"""

from collections.abc import Sequence

from sqlalchemy import func, select

from status_recorder.domain.dtos import EntityRef, StatusEntry
from status_recorder.models.status import StatusHistoryEntry
from status_recorder.selectors.base import BaseSelector


class HistorySelector(BaseSelector[StatusHistoryEntry]):
    """Timeline queries.  Entities without identity have an empty timeline."""

    def _where_entity(self, stmt, entity: EntityRef):
        return stmt.where(
            StatusHistoryEntry.entity_type == entity.entity_type,
            StatusHistoryEntry.entity_id == entity.entity_id,
        )

    def most_recent(self, entity: EntityRef) -> StatusEntry | None:
        """Latest entry of ``entity``; None when it has none."""
        if not entity.is_persisted:
            return None
        stmt = (
            self._where_entity(select(StatusHistoryEntry), entity)
            .order_by(StatusHistoryEntry.position.desc())
            .limit(1)
        )
        row = self.session.execute(stmt).scalar_one_or_none()
        return row.to_dto() if row is not None else None

    def timeline(self, entity: EntityRef, limit: int | None = None) -> tuple[StatusEntry, ...]:
        """Entries of ``entity``, newest first, optionally capped at ``limit``."""
        if not entity.is_persisted:
            return ()
        stmt = self._where_entity(select(StatusHistoryEntry), entity).order_by(
            StatusHistoryEntry.position.desc()
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return tuple(row.to_dto() for row in self.session.execute(stmt).scalars())

    def count(self, entity: EntityRef) -> int:
        if not entity.is_persisted:
            return 0
        stmt = self._where_entity(
            select(func.count()).select_from(StatusHistoryEntry), entity
        )
        return self.session.execute(stmt).scalar_one()

    def entries_named(self, entity_type: str, name: str) -> Sequence[StatusEntry]:
        """Every entry ever recorded with ``name`` for ``entity_type``, oldest first."""
        stmt = (
            select(StatusHistoryEntry)
            .where(
                StatusHistoryEntry.entity_type == entity_type,
                StatusHistoryEntry.name == name,
            )
            .order_by(StatusHistoryEntry.created_at, StatusHistoryEntry.position)
        )
        return [row.to_dto() for row in self.session.execute(stmt).scalars()]
