"""SQLite connection and schema management.

Provides connection management and schema initialization for the SQLite
record store.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

from hifz.core.errors import StoreError
from hifz.core.models import LOO7_STATUSES, LOO7_TYPES, SCORES

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("data/hifz.db")


def init_db(db_path: Path | None = None) -> Path:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to data/hifz.db

    Returns:
        Path of the initialized database
    """
    db_path = db_path or DEFAULT_DB_PATH

    with connect(db_path) as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(db_path))
    return db_path


@contextmanager
def connect(db_path: Path) -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits on success, rolls back on error. SQLite failures are raised
    as StoreError.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with connect(path) as conn:
            rows = conn.execute("SELECT * FROM students").fetchall()
    """
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(db_path)
    except (OSError, sqlite3.Error) as e:
        raise StoreError(f"Cannot open database {db_path}: {e}") from e

    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        logger.error("database.error", path=str(db_path), error=str(e))
        raise StoreError(f"Database error: {e}") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _sql_in(values: tuple[str, ...]) -> str:
    return ", ".join(f"'{value}'" for value in values)


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency. The CHECK lists follow the tags
    declared in hifz.core.models.
    """
    conn.executescript(
        f"""
        -- students: owned by a sheikh (owner_id)
        CREATE TABLE IF NOT EXISTS students (
            id TEXT PRIMARY KEY,
            owner_id TEXT NOT NULL,
            name TEXT NOT NULL,
            age INTEGER,
            contact TEXT,
            notes TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- loo7s: deleted together with their student
        CREATE TABLE IF NOT EXISTS loo7s (
            id TEXT PRIMARY KEY,
            student_id TEXT NOT NULL,
            type TEXT NOT NULL CHECK(type IN ({_sql_in(LOO7_TYPES)})),
            recitation_date TEXT NOT NULL,
            surah_number INTEGER NOT NULL,
            surah_name TEXT NOT NULL,
            start_aya_number INTEGER NOT NULL,
            end_aya_number INTEGER NOT NULL,
            status TEXT NOT NULL DEFAULT 'pending' CHECK(status IN ({_sql_in(LOO7_STATUSES)})),
            score TEXT CHECK(score IN ({_sql_in(SCORES)})),
            score_notes TEXT,
            created_at TEXT NOT NULL,
            completed_at TEXT,
            FOREIGN KEY (student_id) REFERENCES students(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_students_owner ON students(owner_id);
        CREATE INDEX IF NOT EXISTS idx_loo7s_student_id ON loo7s(student_id);
        CREATE INDEX IF NOT EXISTS idx_loo7s_recitation_date ON loo7s(recitation_date);
        CREATE INDEX IF NOT EXISTS idx_loo7s_student_date ON loo7s(student_id, recitation_date);
        """
    )
