"""
StatusTransitionService -- the status state machine of one entity type.

Responsibility:
    Validates and applies status transitions, and answers the read questions
    around them (current status, reachable statuses, full history).

Architecture position:
    Services -- thin coordinator.  Rule evaluation is delegated to
    ``domain.rules``, current-status derivation to ``CurrentStatusResolver``,
    persistence to a ``HistoryStore``, side effects to the hook resolver and
    notification sink.  Works with any store implementation.

change_status_to() sequence
---------------------------
    1. existence       candidate must be in the vocabulary       UndefinedStatusError
    2. resolve         current status from the store
    3. same status     candidate == current: return None, no side effects
    4. rule            rule of candidate must admit current      InvalidStatusChangeError
    5. CHANGING        publish (candidate, entity)
    6. hook            run the hook registered for candidate
    7. identity        unsaved entity: return None, nothing appended
    8. append          entry keyed on the entry read in step 2    StatusConflictError
    9. CHANGED         publish (candidate, entity)
   10. return the new entry

Failure modes:
    - UndefinedStatusError / InvalidStatusChangeError: rejected before any
      side effect.  Logged at WARNING.
    - Hook, sink and store errors propagate unchanged.  Because the append is
      the last write, a failure in steps 5-8 records nothing.
"""

from collections.abc import Callable
from typing import Any

from status_recorder.db.identity import entity_ref_for
from status_recorder.domain.clock import Clock, SystemClock
from status_recorder.domain.dtos import CurrentStatus, EntityRef, StatusEntry
from status_recorder.domain.history import HistoryStore
from status_recorder.domain.hooks import HookResolver
from status_recorder.domain.notifications import (
    NotificationSink,
    NullNotificationSink,
    TransitionKind,
)
from status_recorder.domain.rules import next_available_statuses, require_defined
from status_recorder.domain.vocabulary import StatusVocabulary
from status_recorder.exceptions import InvalidStatusChangeError, UndefinedStatusError
from status_recorder.logging_config import LogContext, get_logger
from status_recorder.services.status_resolver import CurrentStatusResolver

logger = get_logger("services.transition")


class StatusTransitionService:
    """
    Transition executor bound to one vocabulary and one history store.

    Contract:
        ``entity`` arguments are anything ``identify`` can key a timeline on
        (by default an EntityRef, a mapped instance, or an object with
        ``status_entity_ref()``).  Hooks and notifications receive the entity
        exactly as passed in.

    Guarantees:
        - Within one call: CHANGING -> hook -> append -> CHANGED, each step
          only after the previous one succeeded.
        - A rejected or failed transition leaves the timeline untouched.
        - No state is cached between calls; every call re-reads the store.
    """

    def __init__(
        self,
        store: HistoryStore,
        vocabulary: StatusVocabulary,
        *,
        hooks: HookResolver | None = None,
        sink: NotificationSink | None = None,
        clock: Clock | None = None,
        identify: Callable[[Any], EntityRef] = entity_ref_for,
    ):
        self._store = store
        self._vocabulary = vocabulary
        self._hooks = hooks
        self._sink = sink or NullNotificationSink()
        self._clock = clock or SystemClock()
        self._identify = identify
        self._resolver = CurrentStatusResolver(store)

    @property
    def vocabulary(self) -> StatusVocabulary:
        return self._vocabulary

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def all_statuses(self) -> tuple[str, ...]:
        """Every status of the vocabulary, in declaration order."""
        return self._vocabulary.names()

    def current(self, entity: Any) -> CurrentStatus:
        return self._resolver.resolve(self._identify(entity))

    def current_status(self, entity: Any) -> str:
        """Name of the current status; ``""`` when there is none."""
        return self.current(entity).name

    def current_entry(self, entity: Any) -> StatusEntry | None:
        return self.current(entity).entry

    def status_history(self, entity: Any) -> tuple[StatusEntry, ...]:
        """Full timeline, newest first."""
        ref = self._identify(entity)
        if not ref.is_persisted:
            return ()
        return self._store.timeline(ref)

    def next_available_statuses(self, entity: Any) -> tuple[str, ...]:
        return next_available_statuses(self.current_status(entity), self._vocabulary)

    def can_be(self, entity: Any, status: str) -> bool:
        """Whether ``status`` is admissible from the current status.

        Raises:
            UndefinedStatusError: ``status`` is not in the vocabulary.
        """
        ref = self._identify(entity)
        rule = require_defined(status, self._vocabulary, ref.entity_type)
        return rule.permits(self._resolver.resolve(ref).name)

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def change_status_to(self, entity: Any, status: str) -> StatusEntry | None:
        """
        Move ``entity`` to ``status``.

        Returns:
            The appended entry; None when ``status`` already is the current
            status or when the entity has no identity yet.

        Raises:
            UndefinedStatusError: ``status`` is not in the vocabulary.
            InvalidStatusChangeError: the rule of ``status`` does not admit
                the current status.
            StatusConflictError: another writer appended first.
        """
        ref = self._identify(entity)

        with LogContext.bind(entity_type=ref.entity_type, entity_id=ref.entity_id):
            try:
                rule = require_defined(status, self._vocabulary, ref.entity_type)
            except UndefinedStatusError as exc:
                logger.warning(
                    "status_change_rejected",
                    extra={"status": status, "reason": exc.code},
                )
                raise

            current = self._resolver.resolve(ref)
            if status == current.name:
                logger.debug("status_change_skipped", extra={"status": status})
                return None

            if not rule.permits(current.name):
                logger.warning(
                    "status_change_rejected",
                    extra={
                        "status": status,
                        "from_status": current.name,
                        "reason": InvalidStatusChangeError.code,
                    },
                )
                raise InvalidStatusChangeError(
                    entity_type=ref.entity_type,
                    current_status=current.name,
                    status=status,
                )

            self._sink.publish(TransitionKind.CHANGING, status, entity)

            hook = self._hooks.lookup(status) if self._hooks is not None else None
            if hook is not None:
                hook(entity)

            if not ref.is_persisted:
                logger.info(
                    "status_change_unpersisted",
                    extra={"status": status, "from_status": current.name},
                )
                return None

            entry = self._store.append(ref, status, self._clock.now(), after=current.entry)

            self._sink.publish(TransitionKind.CHANGED, status, entity)

            logger.info(
                "status_changed",
                extra={
                    "status": status,
                    "from_status": current.name,
                    "position": entry.position,
                    "entry_id": str(entry.id),
                },
            )
            return entry
