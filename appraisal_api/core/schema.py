"""
Schema bootstrap for the appraisals table.

Checks the catalog first and only emits DDL when the table is absent, so it is
safe to run on every startup. There are no migrations: an existing table is
left exactly as found.
"""
import logging
from typing import Dict, List

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

TABLE_NAME = "appraisals"

# Pattern for employee ids: three uppercase letters, a literal 0, three digits (ABC0123)
EMPLOYEE_ID_REGEX = "^[A-Z]{3}0[0-9]{3}$"
EMPLOYEE_ID_GLOB = "[A-Z][A-Z][A-Z]0[0-9][0-9][0-9]"

_POSTGRES_DDL = [
    f"""
    CREATE TABLE {TABLE_NAME} (
        id              SERIAL PRIMARY KEY,
        employee_name   VARCHAR(40) NOT NULL,
        employee_id     VARCHAR(7) NOT NULL,
        task_name       VARCHAR(40) NOT NULL,
        feedback        TEXT NOT NULL,
        rating          INTEGER NOT NULL,
        created_at      TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        CONSTRAINT chk_employee_id_format CHECK (employee_id ~ '{EMPLOYEE_ID_REGEX}'),
        CONSTRAINT chk_rating_range CHECK (rating >= 1 AND rating <= 5)
    )
    """,
    f"CREATE INDEX idx_appraisals_employee_id ON {TABLE_NAME}(employee_id)",
    f"CREATE INDEX idx_appraisals_created_at ON {TABLE_NAME}(created_at)",
]

# SQLite ignores VARCHAR lengths and has no regex operator, so the same rules
# are spelled out with length() and GLOB. created_at keeps millisecond ISO-8601.
_SQLITE_DDL = [
    f"""
    CREATE TABLE {TABLE_NAME} (
        id              INTEGER PRIMARY KEY AUTOINCREMENT,
        employee_name   VARCHAR(40) NOT NULL CHECK (length(employee_name) <= 40),
        employee_id     VARCHAR(7) NOT NULL,
        task_name       VARCHAR(40) NOT NULL CHECK (length(task_name) <= 40),
        feedback        TEXT NOT NULL,
        rating          INTEGER NOT NULL,
        created_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
        CONSTRAINT chk_employee_id_format CHECK (employee_id GLOB '{EMPLOYEE_ID_GLOB}'),
        CONSTRAINT chk_rating_range CHECK (rating >= 1 AND rating <= 5)
    )
    """,
    f"CREATE INDEX idx_appraisals_employee_id ON {TABLE_NAME}(employee_id)",
    f"CREATE INDEX idx_appraisals_created_at ON {TABLE_NAME}(created_at)",
]

DDL_BY_DIALECT: Dict[str, List[str]] = {
    "postgresql": _POSTGRES_DDL,
    "sqlite": _SQLITE_DDL,
}


def table_exists(engine: Engine) -> bool:
    return inspect(engine).has_table(TABLE_NAME)


def initialize_database(engine: Engine) -> bool:
    """
    Create the appraisals table and its indexes if they do not exist.

    Returns:
        True if the table was created, False if it was already present.

    Raises:
        Any error from the catalog check or the DDL. Callers treat it as fatal.
    """
    try:
        if table_exists(engine):
            logger.info(f"Table '{TABLE_NAME}' already exists, skipping schema creation")
            return False

        statements = DDL_BY_DIALECT.get(engine.dialect.name)
        if statements is None:
            raise ValueError(f"Unsupported database dialect: {engine.dialect.name}")

        with engine.begin() as conn:
            for statement in statements:
                conn.execute(text(statement))
        logger.info(f"Created table '{TABLE_NAME}' with constraints and indexes")
        return True
    except Exception as e:
        logger.error(f"Failed to initialize schema: {e}", exc_info=True)
        raise
