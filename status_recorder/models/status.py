"""
Module: status_recorder.models.status
Responsibility: ORM persistence for status history entries.
Architecture position: Models.  May import from db/ only (and domain DTOs for
    conversion).

Invariants enforced:
    - Entries are append-only; no UPDATE or DELETE (ORM listeners in
      db/immutability.py plus database triggers in db/triggers.py).
    - (entity_type, entity_id, position) is unique, so two writers that read
      the same latest entry cannot both append after it.

Failure modes:
    - ImmutabilityViolationError on any UPDATE/DELETE through the ORM.
    - IntegrityError on a duplicate timeline position (translated to
      StatusConflictError by SqlHistoryStore).
"""

from sqlalchemy import Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from status_recorder.db.base import Base
from status_recorder.db.types import EntityKey, EntityType, Position, StatusName, Timestamp
from status_recorder.domain.dtos import EntityRef, StatusEntry


class StatusHistoryEntry(Base):
    """
    One status applied to one entity.

    The owning entity is referenced polymorphically by ``entity_type`` and
    ``entity_id`` so a single table serves every entity type.  The newest
    entry of a timeline is the one with the highest ``position``.
    """

    __tablename__ = "status_history"

    __table_args__ = (
        UniqueConstraint(
            "entity_type", "entity_id", "position", name="uq_status_history_position"
        ),
        Index("idx_status_history_entity", "entity_type", "entity_id"),
        Index("idx_status_history_name", "name"),
    )

    name: Mapped[StatusName] = mapped_column(nullable=False)

    entity_type: Mapped[EntityType] = mapped_column(nullable=False)

    # Stringified identity key of the owning entity
    entity_id: Mapped[EntityKey] = mapped_column(nullable=False)

    position: Mapped[Position] = mapped_column(nullable=False)

    created_at: Mapped[Timestamp] = mapped_column(nullable=False)

    def __repr__(self) -> str:
        return (
            f"<StatusHistoryEntry {self.name} on {self.entity_type}:{self.entity_id} "
            f"#{self.position}>"
        )

    @property
    def entity(self) -> EntityRef:
        return EntityRef(self.entity_type, self.entity_id)

    def to_dto(self) -> StatusEntry:
        return StatusEntry(
            id=self.id,
            name=self.name,
            entity_type=self.entity_type,
            entity_id=self.entity_id,
            position=self.position,
            created_at=self.created_at,
        )
