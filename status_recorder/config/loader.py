"""
Vocabulary loader (``status_recorder.config.loader``).

Responsibility
--------------
Reads status vocabularies from YAML and turns them into ``StatusVocabulary``
objects, one per entity type.

Document shape
--------------
::

    entity_types:
      Order:
        statuses:
          placed:                  # no rule: reachable from anywhere
          paid:      {from: placed}
          shipped:   {from: [paid]}
          cancelled: {not-from: [shipped, cancelled]}

A path may be a single file or a directory; every ``*.yaml`` / ``*.yml`` file
of a directory is loaded in name order and merged.

Failure modes
-------------
* Missing file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong document shape, bad rule, or the same entity type defined in two
  files  -> ``VocabularyError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from status_recorder.domain.vocabulary import StatusVocabulary
from status_recorder.exceptions import VocabularyError
from status_recorder.logging_config import get_logger

logger = get_logger("config.loader")

_YAML_SUFFIXES = (".yaml", ".yml")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Postconditions:
        - Returns a ``dict`` (empty if the YAML document is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        VocabularyError: if the top level is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise VocabularyError(str(path), "top level of a vocabulary file must be a mapping")
    return data


def parse_vocabularies(data: dict[str, Any]) -> dict[str, StatusVocabulary]:
    """Parse an ``entity_types`` document into vocabularies by entity type."""
    entity_types = data.get("entity_types") or {}
    if not isinstance(entity_types, dict):
        raise VocabularyError("entity_types", "must be a mapping of entity type to definition")

    vocabularies: dict[str, StatusVocabulary] = {}
    for entity_type, definition in entity_types.items():
        if not isinstance(definition, dict) or "statuses" not in definition:
            raise VocabularyError(str(entity_type), "entity type needs a 'statuses' mapping")
        statuses = definition["statuses"] or {}
        vocabularies[str(entity_type)] = StatusVocabulary.from_mapping(statuses)
    return vocabularies


def _vocabulary_files(path: Path) -> list[Path]:
    if path.is_dir():
        return sorted(p for p in path.iterdir() if p.suffix in _YAML_SUFFIXES)
    return [path]


def load_vocabularies(path: Path | str) -> dict[str, StatusVocabulary]:
    """Load every vocabulary under ``path`` (file or directory)."""
    path = Path(path)
    merged: dict[str, StatusVocabulary] = {}
    sources: dict[str, Path] = {}

    for file in _vocabulary_files(path):
        data = load_yaml_file(file)
        for entity_type, vocabulary in parse_vocabularies(data).items():
            if entity_type in merged:
                raise VocabularyError(
                    entity_type,
                    f"defined in both {sources[entity_type].name} and {file.name}",
                )
            merged[entity_type] = vocabulary
            sources[entity_type] = file
        logger.debug(
            "vocabulary_file_loaded",
            extra={"path": str(file), "checksum": compute_checksum(data)},
        )

    return merged


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed document (key order independent)."""
    canonical = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
