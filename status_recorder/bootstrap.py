"""
One-call installation of the status recorder into a host application.

    runtime = bootstrap()                   # settings from the environment
    runtime = bootstrap(RecorderSettings(database_url="postgresql://..."))
    orders = runtime.lifecycles["Order"]

Order: logging -> engine -> tables -> ORM immutability listeners -> database
triggers (when enabled) -> vocabularies (when ``vocabulary_path`` is set).
Application models that should get tables too must be imported before calling.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

from sqlalchemy.engine import Engine

from status_recorder.config import get_settings, load_lifecycles
from status_recorder.config.settings import RecorderSettings
from status_recorder.db.engine import create_tables, init_engine_from_url
from status_recorder.db.immutability import register_immutability_listeners
from status_recorder.domain.hooks import HookRegistry
from status_recorder.lifecycle import StatusLifecycle
from status_recorder.logging_config import configure_logging, get_logger

logger = get_logger("bootstrap")


@dataclass(frozen=True)
class RecorderRuntime:
    """Engine plus the lifecycles loaded from ``vocabulary_path``."""

    engine: Engine
    lifecycles: dict[str, StatusLifecycle] = field(default_factory=dict)


def bootstrap(
    settings: RecorderSettings | None = None,
    hooks: Mapping[str, HookRegistry] | None = None,
) -> RecorderRuntime:
    """
    Raises:
        VocabularyError: the vocabulary at ``vocabulary_path`` is malformed,
            or ``hooks`` does not match it.
    """
    settings = settings or get_settings()

    configure_logging(level=settings.log_level)
    engine = init_engine_from_url(settings.database_url)
    create_tables(install_triggers=settings.install_triggers)
    register_immutability_listeners()

    lifecycles: dict[str, StatusLifecycle] = {}
    if settings.vocabulary_path is not None:
        lifecycles = load_lifecycles(settings.vocabulary_path, hooks=hooks)
    elif hooks:
        logger.warning("status_hooks_without_vocabulary", extra={"entity_types": sorted(hooks)})

    logger.info(
        "status_recorder_ready",
        extra={
            "dialect": engine.dialect.name,
            "install_triggers": settings.install_triggers,
            "entity_types": sorted(lifecycles),
        },
    )
    return RecorderRuntime(engine=engine, lifecycles=lifecycles)
