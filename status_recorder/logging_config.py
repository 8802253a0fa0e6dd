"""
Structured JSON logging for the status recorder.

Every record under the ``status_recorder`` logger is written as one JSON
object per line.  The message is the event name (``status_changed``,
``status_append_conflict``, ...) and ``extra=`` fields become top-level keys.

The transition service binds the entity whose timeline it is writing::

    with LogContext.bind(entity_type="Order", entity_id="42"):
        logger.info("status_changed", extra={"status": "paid"})

    {"ts": "...", "level": "INFO", "logger": "status_recorder.services.transition",
     "message": "status_changed", "entity_type": "Order", "entity_id": "42",
     "status": "paid"}

Exceptions logged with ``exc_info`` are reported under ``error``, including
the ``code`` and structured attributes of ``StatusRecorderError`` subclasses.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from typing import Any

_LOGGER_PREFIX = "status_recorder"

# ---------------------------------------------------------------------------
# Entity context
# ---------------------------------------------------------------------------

_entity_context: ContextVar[dict[str, str] | None] = ContextVar(
    "status_recorder_entity_context", default=None
)


class LogContext:
    """Entity fields attached to every record logged inside ``bind()``."""

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_entity_context.get() or {})

    @staticmethod
    def clear() -> None:
        _entity_context.set(None)

    @staticmethod
    @contextmanager
    def bind(
        *, entity_type: str | None = None, entity_id: str | None = None
    ) -> Iterator[None]:
        """Add the given fields for the duration of the block.

        None values are skipped, so an unsaved entity logs its type only.
        Fields bound by an enclosing block are restored on exit.
        """
        fields = LogContext.get_all()
        if entity_type is not None:
            fields["entity_type"] = entity_type
        if entity_id is not None:
            fields["entity_id"] = entity_id
        token = _entity_context.set(fields)
        try:
            yield
        finally:
            _entity_context.reset(token)


# ---------------------------------------------------------------------------
# JSON formatting
# ---------------------------------------------------------------------------

_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    """Sets log as sorted lists; values with no JSON form fall back to str."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (set, frozenset)):
            return sorted(obj, key=str)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return str(obj)


def _describe_error(exc: BaseException) -> dict[str, Any]:
    error: dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
    code = getattr(exc, "code", None)
    if code is not None:
        error["code"] = code
    error.update(
        (name, value) for name, value in vars(exc).items() if not name.startswith("_")
    )
    return error


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED and key not in payload
        )

        if record.exc_info and record.exc_info[1] is not None:
            payload["error"] = _describe_error(record.exc_info[1])
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger ``status_recorder.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def _is_recorder_handler(handler: logging.Handler) -> bool:
    return getattr(handler, "_status_recorder_handler", False)


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach a JSON handler to the ``status_recorder`` logger.

    A second call is a no-op while the first handler is still attached.
    Unknown level names fall back to INFO.
    """
    root = logging.getLogger(_LOGGER_PREFIX)
    if any(_is_recorder_handler(h) for h in root.handlers):
        return

    if isinstance(level, str):
        level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    target._status_recorder_handler = True
    root.addHandler(target)
    root.setLevel(level)
    root.propagate = False


def reset_logging() -> None:
    """Detach handlers added by ``configure_logging``.  For tests."""
    root = logging.getLogger(_LOGGER_PREFIX)
    for handler in [h for h in root.handlers if _is_recorder_handler(h)]:
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
    root.propagate = True
