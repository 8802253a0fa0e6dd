"""
Status vocabulary -- the closed set of status names of one entity type.

Responsibility
--------------
Holds, per entity type, the status names that may ever be recorded and the
rule attached to each of them.  A rule describes the INCOMING edge: which
current statuses may move to this one.  Built once from configuration and
never mutated afterwards.

Architecture position
---------------------
**Domain layer** -- pure value objects.  ZERO I/O.  No imports from ``db/``,
``services/`` or ``selectors/``.

Configuration shape
-------------------
::

    {
        "draft": {},                                # from anywhere
        "submitted": {"from": "draft"},
        "approved": {"from": ["submitted"]},
        "cancelled": {"not-from": ["approved", "cancelled"]},
    }

Invariants enforced
-------------------
* Status names are non-empty strings.
* A rule only uses the keys ``from`` and ``not-from``; each takes a single
  name or a collection of names.
* Declaration order is preserved; listings follow it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from status_recorder.exceptions import VocabularyError
from status_recorder.logging_config import get_logger

logger = get_logger("domain.vocabulary")

FROM_KEY = "from"
NOT_FROM_KEY = "not-from"
_RULE_KEYS = frozenset({FROM_KEY, NOT_FROM_KEY})


@dataclass(frozen=True)
class StatusRule:
    """Admissibility rule for entering one status.

    ``allowed_from`` / ``denied_from`` are ``None`` when the rule does not
    carry that constraint.  An empty frozenset is a real constraint: empty
    ``allowed_from`` admits nothing, empty ``denied_from`` admits everything.
    """

    allowed_from: frozenset[str] | None = None
    denied_from: frozenset[str] | None = None

    @property
    def is_unconstrained(self) -> bool:
        return self.allowed_from is None and self.denied_from is None

    def permits(self, current: str) -> bool:
        """Whether ``current`` may move to the status this rule guards.

        Both constraints are checked independently and AND-combined.
        """
        if self.allowed_from is not None and current not in self.allowed_from:
            return False
        if self.denied_from is not None and current in self.denied_from:
            return False
        return True


def _as_name_set(status: str, key: str, value: Any) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset({value})
    if isinstance(value, Iterable) and not isinstance(value, Mapping):
        names = tuple(value)
        for name in names:
            if not isinstance(name, str):
                raise VocabularyError(
                    status, f"'{key}' members must be strings, got {name!r}"
                )
        return frozenset(names)
    raise VocabularyError(
        status, f"'{key}' must be a status name or a list of names, got {value!r}"
    )


def parse_rule(status: str, definition: Mapping[str, Any] | None) -> StatusRule:
    """Parse one ``{"from": ..., "not-from": ...}`` rule definition."""
    if definition is None:
        return StatusRule()
    if not isinstance(definition, Mapping):
        raise VocabularyError(status, f"rule must be a mapping, got {definition!r}")

    unknown = set(definition) - _RULE_KEYS
    if unknown:
        raise VocabularyError(status, f"unknown rule keys {sorted(unknown)}")

    allowed = _as_name_set(status, FROM_KEY, definition[FROM_KEY]) if FROM_KEY in definition else None
    denied = (
        _as_name_set(status, NOT_FROM_KEY, definition[NOT_FROM_KEY])
        if NOT_FROM_KEY in definition
        else None
    )
    return StatusRule(allowed_from=allowed, denied_from=denied)


class StatusVocabulary(Mapping[str, StatusRule]):
    """
    Ordered, read-only mapping of status name to ``StatusRule``.

    Contract:
        Pure lookup.  The set of names is fixed at construction.

    Guarantees:
        - Every key is a non-empty string.
        - Iteration and ``names()`` follow declaration order.
    """

    def __init__(self, rules: Mapping[str, StatusRule] | Iterable[tuple[str, StatusRule]]):
        items = rules.items() if isinstance(rules, Mapping) else rules
        self._rules: dict[str, StatusRule] = {}
        for name, rule in items:
            if not isinstance(name, str) or not name:
                raise VocabularyError(str(name), "status names must be non-empty strings")
            if name in self._rules:
                raise VocabularyError(name, "status declared more than once")
            if rule.allowed_from is not None and rule.denied_from is not None:
                logger.warning(
                    "status_rule_has_both_constraints",
                    extra={
                        "status": name,
                        "allowed_from": rule.allowed_from,
                        "denied_from": rule.denied_from,
                    },
                )
            self._rules[name] = rule

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Mapping[str, Any] | None]) -> StatusVocabulary:
        """Build a vocabulary from its configuration shape."""
        if not isinstance(mapping, Mapping):
            raise VocabularyError("<root>", f"vocabulary must be a mapping, got {mapping!r}")
        return cls((name, parse_rule(name, definition)) for name, definition in mapping.items())

    def rules_for(self, name: str) -> StatusRule | None:
        """Rule guarding ``name``, or None when it is not a known status."""
        return self._rules.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(self._rules)

    def __getitem__(self, name: str) -> StatusRule:
        return self._rules[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"StatusVocabulary({list(self._rules)!r})"
