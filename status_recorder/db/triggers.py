"""
Module: status_recorder.db.triggers
Responsibility: Installing and removing database-level triggers that make the
    ``status_history`` table append-only.  Database complement to the ORM
    listeners in db/immutability.py: raw SQL, bulk UPDATE/DELETE and direct
    console access are blocked too.
Architecture position: DB.  MUST NOT import from models/, services/,
    selectors/ or domain/.

Supported backends: PostgreSQL (plpgsql function + two triggers) and SQLite
(two RAISE(ABORT) triggers).  Other dialects are skipped with a warning.

Failure modes:
    - A blocked statement surfaces as IntegrityError (SQLite) or
      InternalError / DBAPIError (PostgreSQL) from SQLAlchemy.
"""

from sqlalchemy import text
from sqlalchemy.engine import Engine

from status_recorder.logging_config import get_logger

logger = get_logger("db.triggers")

TABLE_NAME = "status_history"

ALL_TRIGGER_NAMES = [
    "trg_status_history_immutability_update",
    "trg_status_history_immutability_delete",
]

_SQLITE_INSTALL = [
    f"""
    CREATE TRIGGER IF NOT EXISTS trg_status_history_immutability_update
    BEFORE UPDATE ON {TABLE_NAME}
    BEGIN
        SELECT RAISE(ABORT, 'status history entries are immutable');
    END
    """,
    f"""
    CREATE TRIGGER IF NOT EXISTS trg_status_history_immutability_delete
    BEFORE DELETE ON {TABLE_NAME}
    BEGIN
        SELECT RAISE(ABORT, 'status history entries cannot be deleted');
    END
    """,
]

_SQLITE_DROP = [
    "DROP TRIGGER IF EXISTS trg_status_history_immutability_update",
    "DROP TRIGGER IF EXISTS trg_status_history_immutability_delete",
]

_POSTGRES_INSTALL = [
    """
    CREATE OR REPLACE FUNCTION prevent_status_history_mutation()
    RETURNS TRIGGER AS $$
    BEGIN
        RAISE EXCEPTION 'status history entries are append-only (% blocked on %)',
            TG_OP, OLD.id
            USING ERRCODE = 'restrict_violation';
    END;
    $$ LANGUAGE plpgsql
    """,
    f"DROP TRIGGER IF EXISTS trg_status_history_immutability_update ON {TABLE_NAME}",
    f"""
    CREATE TRIGGER trg_status_history_immutability_update
    BEFORE UPDATE ON {TABLE_NAME}
    FOR EACH ROW EXECUTE FUNCTION prevent_status_history_mutation()
    """,
    f"DROP TRIGGER IF EXISTS trg_status_history_immutability_delete ON {TABLE_NAME}",
    f"""
    CREATE TRIGGER trg_status_history_immutability_delete
    BEFORE DELETE ON {TABLE_NAME}
    FOR EACH ROW EXECUTE FUNCTION prevent_status_history_mutation()
    """,
]

_POSTGRES_DROP = [
    f"DROP TRIGGER IF EXISTS trg_status_history_immutability_update ON {TABLE_NAME}",
    f"DROP TRIGGER IF EXISTS trg_status_history_immutability_delete ON {TABLE_NAME}",
    "DROP FUNCTION IF EXISTS prevent_status_history_mutation()",
]

_STATEMENTS = {
    "sqlite": (_SQLITE_INSTALL, _SQLITE_DROP),
    "postgresql": (_POSTGRES_INSTALL, _POSTGRES_DROP),
}


def _run(engine: Engine, statements: list[str]) -> None:
    # One statement per execute: sqlite3 rejects multi-statement strings
    with engine.begin() as conn:
        for statement in statements:
            conn.execute(text(statement))


def install_immutability_triggers(engine: Engine) -> None:
    """
    Install the append-only triggers on ``status_history`` (idempotent).

    Preconditions: the table exists (call after create_all()).
    """
    dialect = engine.dialect.name
    if dialect not in _STATEMENTS:
        logger.warning("immutability_triggers_unsupported", extra={"dialect": dialect})
        return
    _run(engine, _STATEMENTS[dialect][0])
    logger.info(
        "immutability_triggers_installed",
        extra={"dialect": dialect, "triggers": ALL_TRIGGER_NAMES},
    )


def uninstall_immutability_triggers(engine: Engine) -> None:
    """
    Remove the append-only triggers.

    WARNING: only for maintenance that must rewrite history.  Re-install
    immediately afterwards.
    """
    dialect = engine.dialect.name
    if dialect not in _STATEMENTS:
        return
    _run(engine, _STATEMENTS[dialect][1])
    logger.info("immutability_triggers_uninstalled", extra={"dialect": dialect})


def triggers_installed(engine: Engine) -> bool:
    """Whether every trigger in ALL_TRIGGER_NAMES is present."""
    dialect = engine.dialect.name
    with engine.connect() as conn:
        if dialect == "sqlite":
            rows = conn.execute(
                text("SELECT name FROM sqlite_master WHERE type = 'trigger'")
            ).scalars()
        elif dialect == "postgresql":
            rows = conn.execute(
                text("SELECT tgname FROM pg_trigger WHERE NOT tgisinternal")
            ).scalars()
        else:
            return False
        present = set(rows)
    return all(name in present for name in ALL_TRIGGER_NAMES)
