"""
status_recorder.config -- settings and YAML vocabularies.

Responsibility:
    ``get_settings()`` is the single runtime entrypoint for settings;
    ``load_lifecycles()`` turns a vocabulary file or directory into one
    ``StatusLifecycle`` per entity type, attaching hook registries by entity
    type name.

Audit relevance:
    Each ``load_lifecycles()`` call logs ``status_config_loaded`` with the
    entity types and their status counts, tying recorded history to the
    vocabulary in force when it was written.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from status_recorder.config.loader import (
    compute_checksum,
    load_vocabularies,
    load_yaml_file,
    parse_vocabularies,
)
from status_recorder.config.settings import RecorderSettings
from status_recorder.domain.hooks import HookRegistry
from status_recorder.exceptions import VocabularyError
from status_recorder.lifecycle import StatusLifecycle
from status_recorder.logging_config import get_logger

logger = get_logger("config")


def get_settings(environ: Mapping[str, str] | None = None) -> RecorderSettings:
    """Settings from the process environment (or ``environ`` when given)."""
    return RecorderSettings.from_env(environ)


def load_lifecycles(
    path: Path | str,
    hooks: Mapping[str, HookRegistry] | None = None,
) -> dict[str, StatusLifecycle]:
    """
    Build a lifecycle per entity type defined under ``path``.

    Raises:
        VocabularyError: ``hooks`` names an entity type with no vocabulary,
            or a registry hooks a status its vocabulary lacks.
    """
    hooks = hooks or {}
    vocabularies = load_vocabularies(path)

    unknown = sorted(set(hooks) - set(vocabularies))
    if unknown:
        raise VocabularyError(unknown[0], "hooks given for an entity type without a vocabulary")

    lifecycles = {
        entity_type: StatusLifecycle(vocabulary, hooks=hooks.get(entity_type))
        for entity_type, vocabulary in vocabularies.items()
    }
    logger.info(
        "status_config_loaded",
        extra={
            "path": str(path),
            "entity_types": {name: len(v) for name, v in vocabularies.items()},
        },
    )
    return lifecycles


__all__ = [
    "RecorderSettings",
    "compute_checksum",
    "get_settings",
    "load_lifecycles",
    "load_vocabularies",
    "load_yaml_file",
    "parse_vocabularies",
]
