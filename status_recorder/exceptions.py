"""
Typed exception hierarchy for the status recorder.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers decide what to do with a rejected transition by exception TYPE and by
the structured attributes it carries, never by parsing the message.

    try:
        recorder.change_status_to(order, "shipped")
    except InvalidStatusChangeError as e:
        api_response(code=e.code, current=e.current_status, wanted=e.status)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StatusRecorderError (base)
    |
    +-- VocabularyError
    |
    +-- StatusError
    |   +-- UndefinedStatusError
    |   +-- InvalidStatusChangeError
    |
    +-- ConcurrencyError
    |   +-- StatusConflictError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES
===============================================================================

Category        | Code                     | When Raised
----------------|--------------------------|------------------------------------
Vocabulary      | VOCABULARY_ERROR         | Malformed status vocabulary or hook
----------------|--------------------------|------------------------------------
Status          | UNDEFINED_STATUS         | Status name not in the vocabulary
                | INVALID_STATUS_CHANGE    | Rule forbids current -> candidate
----------------|--------------------------|------------------------------------
Concurrency     | STATUS_CONFLICT          | Timeline moved since it was read
----------------|--------------------------|------------------------------------
Immutability    | IMMUTABILITY_VIOLATION   | UPDATE/DELETE of a history entry

UndefinedStatusError and InvalidStatusChangeError are caller-correctable and
never retried automatically.  StatusConflictError is the only retriable one:
re-read the current status and decide again.
"""


class StatusRecorderError(Exception):
    """
    Base exception for all status recorder errors.

    Every subclass carries a ``code`` class attribute for machine-readable
    identification.
    """

    code: str = "STATUS_RECORDER_ERROR"


# Vocabulary-related exceptions


class VocabularyError(StatusRecorderError):
    """A status vocabulary (or something wired against it) is malformed."""

    code: str = "VOCABULARY_ERROR"

    def __init__(self, status: str, reason: str):
        self.status = status
        self.reason = reason
        super().__init__(f"Invalid vocabulary entry {status!r}: {reason}")


# Status-related exceptions


class StatusError(StatusRecorderError):
    """Base exception for rejected status transitions."""

    code: str = "STATUS_ERROR"


class UndefinedStatusError(StatusError):
    """The requested status is not part of the entity type's vocabulary."""

    code: str = "UNDEFINED_STATUS"

    def __init__(self, entity_type: str, status: str):
        self.entity_type = entity_type
        self.status = status
        super().__init__(f"Undefined status {status} was set for {entity_type}")


class InvalidStatusChangeError(StatusError):
    """
    The requested status exists but its rule does not admit the current one.

    Carries both names so the rejection can be reported without a re-read.
    """

    code: str = "INVALID_STATUS_CHANGE"

    def __init__(self, entity_type: str, current_status: str, status: str):
        self.entity_type = entity_type
        self.current_status = current_status
        self.status = status
        super().__init__(
            f"Status of {current_status or '<none>'} cannot be changed to "
            f"{status} in {entity_type}"
        )


# Concurrency-related exceptions


class ConcurrencyError(StatusRecorderError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class StatusConflictError(ConcurrencyError):
    """
    Another writer appended to the entity's timeline after it was read.

    The append was computed against ``expected_position`` but that slot is
    already taken.  Nothing was written.
    """

    code: str = "STATUS_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str, expected_position: int):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_position = expected_position
        super().__init__(
            f"Status conflict on {entity_type} {entity_id}: position "
            f"{expected_position} was appended by another transaction"
        )


# Immutability-related exceptions


class ImmutabilityError(StatusRecorderError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted to modify or delete a status history entry."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
