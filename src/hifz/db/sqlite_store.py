"""SQLite record store.

Persists students and loo7s in the tables created by hifz.db.database.
Each operation opens its own connection; cascade deletes are enforced by
the foreign key on loo7s.student_id.

The sqlite3 calls are blocking and run on the caller's event loop.
"""

from __future__ import annotations

import sqlite3
import uuid
from pathlib import Path
from typing import Any

import structlog

from hifz.core.errors import NotFoundError
from hifz.core.models import (
    LOO7_UPDATABLE_FIELDS,
    STUDENT_UPDATABLE_FIELDS,
    Loo7,
    NewLoo7,
    NewStudent,
    Student,
    utc_now_iso,
)
from hifz.db.database import DEFAULT_DB_PATH, connect, init_db
from hifz.db.store import RecordStore, filter_updates

logger = structlog.get_logger(__name__)

# loo7 rows joined to their student, restricted to one owner
_OWNED_LOO7_SELECT = """
    SELECT l.* FROM loo7s l
    JOIN students s ON s.id = l.student_id
    WHERE s.owner_id = ?
"""

_TYPE_ORDER_SQL = """
    CASE l.type WHEN 'new' THEN 1 WHEN 'near_past' THEN 2 WHEN 'far_past' THEN 3 END
"""


class SQLiteStore(RecordStore):
    """Record store backed by an SQLite file."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = init_db(db_path or DEFAULT_DB_PATH)

    # Student operations

    async def get_student(self, student_id: str, owner_id: str) -> Student | None:
        with connect(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM students WHERE id = ? AND owner_id = ?",
                (student_id, owner_id),
            ).fetchone()

        if row is None:
            return None
        return _row_to_student(row)

    async def get_all_students(self, owner_id: str) -> list[Student]:
        with connect(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM students WHERE owner_id = ? ORDER BY name COLLATE NOCASE",
                (owner_id,),
            ).fetchall()

        return [_row_to_student(row) for row in rows]

    async def create_student(self, data: NewStudent, owner_id: str) -> Student:
        now = utc_now_iso()
        student = Student(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            name=data.name,
            age=data.age,
            contact=data.contact,
            notes=data.notes,
            created_at=now,
            updated_at=now,
        )

        with connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO students (
                    id, owner_id, name, age, contact, notes, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    student.id,
                    student.owner_id,
                    student.name,
                    student.age,
                    student.contact,
                    student.notes,
                    student.created_at,
                    student.updated_at,
                ),
            )

        logger.debug("store.sqlite.student_created", student_id=student.id)
        return student

    async def update_student(
        self, student_id: str, updates: dict[str, Any], owner_id: str
    ) -> Student | None:
        changes = filter_updates(updates, STUDENT_UPDATABLE_FIELDS)
        changes["updated_at"] = utc_now_iso()
        assignments = ", ".join(f"{column} = ?" for column in changes)

        with connect(self.db_path) as conn:
            cursor = conn.execute(
                f"UPDATE students SET {assignments} WHERE id = ? AND owner_id = ?",
                (*changes.values(), student_id, owner_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                "SELECT * FROM students WHERE id = ?", (student_id,)
            ).fetchone()

        return _row_to_student(row)

    async def delete_student(self, student_id: str, owner_id: str) -> bool:
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM students WHERE id = ? AND owner_id = ?",
                (student_id, owner_id),
            )

        deleted = cursor.rowcount > 0
        if deleted:
            logger.debug("store.sqlite.student_deleted", student_id=student_id)
        return deleted

    # Loo7 operations

    async def get_loo7(self, loo7_id: str, owner_id: str) -> Loo7 | None:
        with connect(self.db_path) as conn:
            row = conn.execute(
                _OWNED_LOO7_SELECT + " AND l.id = ?", (owner_id, loo7_id)
            ).fetchone()

        if row is None:
            return None
        return _row_to_loo7(row)

    async def get_all_loo7(self, owner_id: str) -> list[Loo7]:
        with connect(self.db_path) as conn:
            rows = conn.execute(
                _OWNED_LOO7_SELECT + " ORDER BY l.rowid", (owner_id,)
            ).fetchall()

        return [_row_to_loo7(row) for row in rows]

    async def get_loo7_by_date(self, recitation_date: str, owner_id: str) -> list[Loo7]:
        with connect(self.db_path) as conn:
            rows = conn.execute(
                _OWNED_LOO7_SELECT + " AND l.recitation_date = ? ORDER BY l.rowid",
                (owner_id, recitation_date),
            ).fetchall()

        return [_row_to_loo7(row) for row in rows]

    async def get_loo7_by_student_and_date(
        self, student_id: str, recitation_date: str, owner_id: str
    ) -> list[Loo7]:
        with connect(self.db_path) as conn:
            rows = conn.execute(
                _OWNED_LOO7_SELECT
                + " AND l.student_id = ? AND l.recitation_date = ?"
                + f" ORDER BY {_TYPE_ORDER_SQL}, l.rowid",
                (owner_id, student_id, recitation_date),
            ).fetchall()

        return [_row_to_loo7(row) for row in rows]

    async def create_loo7(self, data: NewLoo7, owner_id: str) -> Loo7:
        loo7 = Loo7(
            id=str(uuid.uuid4()),
            student_id=data.student_id,
            type=data.type,
            recitation_date=data.recitation_date,
            surah_number=data.surah_number,
            surah_name=data.surah_name,
            start_aya_number=data.start_aya_number,
            end_aya_number=data.end_aya_number,
            created_at=utc_now_iso(),
        )

        with connect(self.db_path) as conn:
            owner_row = conn.execute(
                "SELECT 1 FROM students WHERE id = ? AND owner_id = ?",
                (data.student_id, owner_id),
            ).fetchone()
            if owner_row is None:
                raise NotFoundError(f"Student '{data.student_id}' not found")

            conn.execute(
                """
                INSERT INTO loo7s (
                    id, student_id, type, recitation_date,
                    surah_number, surah_name, start_aya_number, end_aya_number,
                    status, score, score_notes, created_at, completed_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    loo7.id,
                    loo7.student_id,
                    loo7.type,
                    loo7.recitation_date,
                    loo7.surah_number,
                    loo7.surah_name,
                    loo7.start_aya_number,
                    loo7.end_aya_number,
                    loo7.status,
                    loo7.score,
                    loo7.score_notes,
                    loo7.created_at,
                    loo7.completed_at,
                ),
            )

        return loo7

    async def update_loo7(
        self, loo7_id: str, updates: dict[str, Any], owner_id: str
    ) -> Loo7 | None:
        changes = filter_updates(updates, LOO7_UPDATABLE_FIELDS)
        if not changes:
            return await self.get_loo7(loo7_id, owner_id)
        assignments = ", ".join(f"{column} = ?" for column in changes)

        with connect(self.db_path) as conn:
            cursor = conn.execute(
                f"""
                UPDATE loo7s SET {assignments}
                WHERE id = ? AND student_id IN (
                    SELECT id FROM students WHERE owner_id = ?
                )
                """,
                (*changes.values(), loo7_id, owner_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM loo7s WHERE id = ?", (loo7_id,)).fetchone()

        return _row_to_loo7(row)

    async def delete_loo7(self, loo7_id: str, owner_id: str) -> bool:
        with connect(self.db_path) as conn:
            cursor = conn.execute(
                """
                DELETE FROM loo7s
                WHERE id = ? AND student_id IN (
                    SELECT id FROM students WHERE owner_id = ?
                )
                """,
                (loo7_id, owner_id),
            )

        return cursor.rowcount > 0


def _row_to_student(row: sqlite3.Row) -> Student:
    """Convert database row to Student."""
    return Student(
        id=row["id"],
        owner_id=row["owner_id"],
        name=row["name"],
        age=row["age"],
        contact=row["contact"],
        notes=row["notes"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_loo7(row: sqlite3.Row) -> Loo7:
    """Convert database row to Loo7."""
    return Loo7(
        id=row["id"],
        student_id=row["student_id"],
        type=row["type"],
        recitation_date=row["recitation_date"],
        surah_number=row["surah_number"],
        surah_name=row["surah_name"],
        start_aya_number=row["start_aya_number"],
        end_aya_number=row["end_aya_number"],
        status=row["status"],
        score=row["score"],
        score_notes=row["score_notes"],
        created_at=row["created_at"],
        completed_at=row["completed_at"],
    )
