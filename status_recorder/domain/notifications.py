"""
Transition notifications.

The executor publishes exactly one ``CHANGING`` before the hook runs and one
``CHANGED`` after the entry is appended, per accepted transition.  Neither is
a veto point.  The sink is an explicit dependency of the executor; there is
no process-wide bus.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class TransitionKind(str, Enum):
    """Which side of the append a notification is published on."""

    CHANGING = "changing"
    CHANGED = "changed"


@dataclass(frozen=True)
class StatusNotification:
    kind: TransitionKind
    status: str
    entity: Any


@runtime_checkable
class NotificationSink(Protocol):
    def publish(self, kind: TransitionKind, status: str, entity: Any) -> None:
        ...


class NullNotificationSink:
    """Sink that drops every notification."""

    def publish(self, kind: TransitionKind, status: str, entity: Any) -> None:
        return None


class SubscriberNotificationSink:
    """
    Fans each notification out to subscribed callbacks, in subscription order.

    Subscriber exceptions are not caught: a failing ``CHANGING`` subscriber
    aborts the transition before anything is appended.
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[Callable[[StatusNotification], None], frozenset[TransitionKind]]] = []

    def subscribe(
        self,
        callback: Callable[[StatusNotification], None],
        kinds: Iterable[TransitionKind] | None = None,
    ) -> None:
        selected = frozenset(kinds) if kinds is not None else frozenset(TransitionKind)
        self._subscribers.append((callback, selected))

    def unsubscribe(self, callback: Callable[[StatusNotification], None]) -> None:
        self._subscribers = [(cb, k) for cb, k in self._subscribers if cb != callback]

    def publish(self, kind: TransitionKind, status: str, entity: Any) -> None:
        notification = StatusNotification(kind=kind, status=status, entity=entity)
        for callback, kinds in list(self._subscribers):
            if kind in kinds:
                callback(notification)


class RecordingNotificationSink:
    """Keeps every published notification in ``notifications``."""

    def __init__(self) -> None:
        self.notifications: list[StatusNotification] = []

    def publish(self, kind: TransitionKind, status: str, entity: Any) -> None:
        self.notifications.append(StatusNotification(kind=kind, status=status, entity=entity))

    def kinds(self) -> list[tuple[TransitionKind, str]]:
        return [(n.kind, n.status) for n in self.notifications]

    def clear(self) -> None:
        self.notifications.clear()
