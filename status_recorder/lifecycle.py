"""
StatusLifecycle -- per-entity-type composition of vocabulary and hooks.

An entity type opts into status tracking by owning a lifecycle, not by
inheriting from a mixin:

    ORDER_HOOKS = HookRegistry()

    @ORDER_HOOKS.on("shipped")
    def reserve_courier(order): ...

    class Order(Base):
        __tablename__ = "orders"
        lifecycle: ClassVar[StatusLifecycle] = StatusLifecycle(
            {"placed": {}, "paid": {"from": "placed"}, "shipped": {"from": "paid"}},
            hooks=ORDER_HOOKS,
        )

    with session_scope() as session:
        recorder = Order.lifecycle.for_session(session)
        recorder.change_status_to(order, "paid")

Hooks are validated against the vocabulary here, when the lifecycle is
built, so a misspelt status fails at import time instead of at the first
transition.
"""

from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy.orm import Session

from status_recorder.db.identity import entity_ref_for
from status_recorder.domain.clock import Clock
from status_recorder.domain.dtos import EntityRef
from status_recorder.domain.history import HistoryStore
from status_recorder.domain.hooks import HookRegistry, StatusHook
from status_recorder.domain.notifications import NotificationSink
from status_recorder.domain.vocabulary import StatusVocabulary
from status_recorder.services.history_store import SqlHistoryStore
from status_recorder.services.transition_service import StatusTransitionService


class StatusLifecycle:
    """Vocabulary + hooks of one entity type; builds transition services."""

    def __init__(
        self,
        vocabulary: StatusVocabulary | Mapping[str, Mapping[str, Any] | None],
        hooks: HookRegistry | Mapping[str, StatusHook] | None = None,
    ):
        if not isinstance(vocabulary, StatusVocabulary):
            vocabulary = StatusVocabulary.from_mapping(vocabulary)
        if not isinstance(hooks, HookRegistry):
            hooks = HookRegistry(hooks)
        hooks.validate_against(vocabulary)
        self._vocabulary = vocabulary
        self._hooks = hooks

    @property
    def vocabulary(self) -> StatusVocabulary:
        return self._vocabulary

    @property
    def hooks(self) -> HookRegistry:
        return self._hooks

    def statuses(self) -> tuple[str, ...]:
        return self._vocabulary.names()

    def recorder(
        self,
        store: HistoryStore,
        *,
        sink: NotificationSink | None = None,
        clock: Clock | None = None,
        identify: Callable[[Any], EntityRef] = entity_ref_for,
    ) -> StatusTransitionService:
        """Transition service for this lifecycle over ``store``."""
        return StatusTransitionService(
            store,
            self._vocabulary,
            hooks=self._hooks,
            sink=sink,
            clock=clock,
            identify=identify,
        )

    def for_session(
        self,
        session: Session,
        *,
        sink: NotificationSink | None = None,
        clock: Clock | None = None,
    ) -> StatusTransitionService:
        """Transition service writing to ``status_history`` through ``session``."""
        return self.recorder(SqlHistoryStore(session), sink=sink, clock=clock)

    def __repr__(self) -> str:
        return f"StatusLifecycle({list(self._vocabulary)!r}, hooks={list(self._hooks.statuses())!r})"
