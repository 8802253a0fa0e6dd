"""
Rule evaluator -- which statuses are reachable from the current one.

Architecture position:
    Domain -- pure functions over a ``StatusVocabulary``.  ZERO I/O.

Evaluation order for ``is_admissible``:
    1. Existence: the candidate must be a vocabulary key, even when it equals
       the current status.
    2. ``from``: current must be one of the listed names.
    3. ``not-from``: current must not be one of the listed names.
    4. Neither present: admissible.
"""

from __future__ import annotations

from status_recorder.domain.vocabulary import StatusRule, StatusVocabulary
from status_recorder.exceptions import UndefinedStatusError


def require_defined(candidate: str, vocabulary: StatusVocabulary, entity_type: str = "") -> StatusRule:
    """Return the rule for ``candidate`` or raise ``UndefinedStatusError``."""
    rule = vocabulary.rules_for(candidate)
    if rule is None:
        raise UndefinedStatusError(entity_type=entity_type, status=candidate)
    return rule


def is_admissible(
    current: str,
    candidate: str,
    vocabulary: StatusVocabulary,
    entity_type: str = "",
) -> bool:
    """Whether ``current`` may move to ``candidate``.

    Raises:
        UndefinedStatusError: ``candidate`` is not in ``vocabulary``.
    """
    return require_defined(candidate, vocabulary, entity_type).permits(current)


def next_available_statuses(current: str, vocabulary: StatusVocabulary) -> tuple[str, ...]:
    """Statuses reachable from ``current``, in declaration order.

    ``current`` itself is never listed.
    """
    return tuple(
        name
        for name, rule in vocabulary.items()
        if name != current and rule.permits(current)
    )
