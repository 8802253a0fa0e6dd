"""
SqlHistoryStore -- relational implementation of the history store contract.

Responsibility:
    Appends ``StatusHistoryEntry`` rows and answers most-recent / timeline
    queries through ``HistorySelector``.

Architecture position:
    Services -- imperative shell.  Flush-only; the caller commits.

Invariants enforced:
    - Append-only: the store only ever INSERTs.
    - Optimistic append: the row takes ``after.position + 1``; the unique
      (entity_type, entity_id, position) constraint rejects a second writer
      that read the same latest entry.  The insert runs in a SAVEPOINT so a
      conflict leaves the caller's transaction usable.

Failure modes:
    - StatusConflictError: the position was taken by a concurrent append.
    - ValueError: entity has no durable identity.
    - Any other database error propagates unchanged.
"""

from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from status_recorder.domain.dtos import EntityRef, StatusEntry
from status_recorder.domain.history import next_position
from status_recorder.exceptions import StatusConflictError
from status_recorder.logging_config import get_logger
from status_recorder.models.status import StatusHistoryEntry
from status_recorder.selectors.history_selector import HistorySelector
from status_recorder.services.base import BaseService

logger = get_logger("services.history_store")


class SqlHistoryStore(BaseService[StatusHistoryEntry]):
    """
    ``HistoryStore`` over the ``status_history`` table.

    Non-goals:
        - Does NOT validate status names; the transition service does.
        - Does NOT call ``session.commit()``.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._selector = HistorySelector(session)

    def append(
        self,
        entity: EntityRef,
        name: str,
        created_at: datetime,
        *,
        after: StatusEntry | None = None,
    ) -> StatusEntry:
        if entity.entity_id is None:
            raise ValueError(f"Cannot record status history for unsaved entity {entity}")

        position = next_position(after)
        row = StatusHistoryEntry(
            name=name,
            entity_type=entity.entity_type,
            entity_id=entity.entity_id,
            position=position,
            created_at=created_at,
        )

        try:
            with self.session.begin_nested():
                self.session.add(row)
                self.session.flush()
        except IntegrityError:
            logger.warning(
                "status_append_conflict",
                extra={
                    "status": name,
                    "position": position,
                },
            )
            raise StatusConflictError(
                entity_type=entity.entity_type,
                entity_id=entity.entity_id,
                expected_position=position,
            ) from None

        logger.debug(
            "status_entry_appended",
            extra={
                "status": name,
                "position": position,
                "entry_id": str(row.id),
            },
        )
        return row.to_dto()

    def most_recent(self, entity: EntityRef) -> StatusEntry | None:
        return self._selector.most_recent(entity)

    def timeline(self, entity: EntityRef) -> tuple[StatusEntry, ...]:
        return self._selector.timeline(entity)
