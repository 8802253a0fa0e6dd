"""
Per-status hooks.

A hook is a callable registered for one status name and run synchronously,
with the entity as its only argument, just before an entry for that status is
appended.  Wiring is explicit: names are checked against the vocabulary when
the lifecycle is assembled, not discovered by naming convention.

A hook that raises aborts the transition; nothing is appended.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

from status_recorder.domain.vocabulary import StatusVocabulary
from status_recorder.exceptions import VocabularyError

StatusHook = Callable[[Any], None]


class HookResolver(Protocol):
    def lookup(self, status: str) -> StatusHook | None:
        """Hook registered for ``status``, if any."""
        ...


class HookRegistry:
    """Explicit status name -> hook mapping.  At most one hook per status."""

    def __init__(self, hooks: Mapping[str, StatusHook] | None = None):
        self._hooks: dict[str, StatusHook] = {}
        for status, hook in (hooks or {}).items():
            self.register(status, hook)

    def register(self, status: str, hook: StatusHook) -> None:
        if not callable(hook):
            raise VocabularyError(status, f"hook must be callable, got {hook!r}")
        if status in self._hooks:
            raise VocabularyError(status, "a hook is already registered for this status")
        self._hooks[status] = hook

    def on(self, status: str) -> Callable[[StatusHook], StatusHook]:
        """Decorator form of ``register``.

        ::

            hooks = HookRegistry()

            @hooks.on("shipped")
            def notify_warehouse(order): ...
        """

        def decorator(hook: StatusHook) -> StatusHook:
            self.register(status, hook)
            return hook

        return decorator

    def lookup(self, status: str) -> StatusHook | None:
        return self._hooks.get(status)

    def validate_against(self, vocabulary: StatusVocabulary) -> None:
        """Raise ``VocabularyError`` for hooks on statuses ``vocabulary`` lacks."""
        for status in self._hooks:
            if status not in vocabulary:
                raise VocabularyError(
                    status, "hook registered for a status outside the vocabulary"
                )

    def statuses(self) -> tuple[str, ...]:
        return tuple(self._hooks)

    def __contains__(self, status: object) -> bool:
        return status in self._hooks

    def __len__(self) -> int:
        return len(self._hooks)
