"""
Runtime settings.

``RecorderSettings.from_env()`` is the only place environment variables are
read:

    STATUS_RECORDER_DATABASE_URL       default sqlite:///:memory:
    STATUS_RECORDER_LOG_LEVEL          default INFO
    STATUS_RECORDER_VOCABULARY_PATH    optional YAML file or directory
    STATUS_RECORDER_INSTALL_TRIGGERS   default true
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "STATUS_RECORDER_"
DEFAULT_DATABASE_URL = "sqlite:///:memory:"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {value!r}")


@dataclass(frozen=True)
class RecorderSettings:
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    vocabulary_path: Path | None = None
    install_triggers: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RecorderSettings:
        env = os.environ if environ is None else environ

        vocabulary_path = env.get(f"{ENV_PREFIX}VOCABULARY_PATH")
        install_triggers = env.get(f"{ENV_PREFIX}INSTALL_TRIGGERS")

        return cls(
            database_url=env.get(f"{ENV_PREFIX}DATABASE_URL", DEFAULT_DATABASE_URL),
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
            vocabulary_path=Path(vocabulary_path) if vocabulary_path else None,
            install_triggers=(
                _parse_bool(f"{ENV_PREFIX}INSTALL_TRIGGERS", install_triggers)
                if install_triggers is not None
                else True
            ),
        )
