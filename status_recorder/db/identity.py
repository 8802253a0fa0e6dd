"""
Module: status_recorder.db.identity
Responsibility: Derive the ``EntityRef`` (type + durable identity) under which
    an entity's status timeline is keyed.
Architecture position: DB.  Imports domain DTOs and SQLAlchemy inspection
    only.

Accepted entities, checked in order:
    1. An ``EntityRef`` (used as is).
    2. Any object with a ``status_entity_ref()`` method returning an EntityRef.
    3. A SQLAlchemy-mapped instance.  Its type is ``__status_entity_type__``
       when the class sets one, else the class name.  Its id is the identity
       key, which exists only once the row has been flushed: transient and
       pending instances have no identity and get ``entity_id=None``.
"""

from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import InstanceState

from status_recorder.domain.dtos import EntityRef


def entity_type_of(entity: Any) -> str:
    """Timeline type name for ``entity`` (an instance)."""
    if isinstance(entity, EntityRef):
        return entity.entity_type
    return getattr(entity, "__status_entity_type__", None) or type(entity).__name__


def entity_ref_for(entity: Any) -> EntityRef:
    """
    Resolve the timeline key of ``entity``.

    Raises:
        TypeError: ``entity`` is none of the accepted kinds.
    """
    if isinstance(entity, EntityRef):
        return entity

    provider = getattr(entity, "status_entity_ref", None)
    if callable(provider):
        ref = provider()
        if not isinstance(ref, EntityRef):
            raise TypeError(
                f"{type(entity).__name__}.status_entity_ref() must return an EntityRef, "
                f"got {ref!r}"
            )
        return ref

    state = inspect(entity, raiseerr=False)
    if not isinstance(state, InstanceState):
        raise TypeError(
            f"Cannot derive a status timeline key for {type(entity).__name__}: "
            "pass an EntityRef, a mapped instance, or an object with status_entity_ref()"
        )

    identity = state.identity
    entity_id = None if identity is None else "/".join(str(part) for part in identity)
    return EntityRef(entity_type=entity_type_of(entity), entity_id=entity_id)
