"""In-memory record store.

Holds students and loo7s in dictionaries keyed by id. Data lives as long as
the process; used for tests and throwaway servers.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
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
    sort_by_type,
    sort_students,
    utc_now_iso,
)
from hifz.db.store import RecordStore, filter_updates

logger = structlog.get_logger(__name__)


class MemoryStore(RecordStore):
    """Record store backed by two dictionaries."""

    def __init__(self) -> None:
        self._students: dict[str, Student] = {}
        self._loo7s: dict[str, Loo7] = {}

    def _owned_student(self, student_id: str, owner_id: str) -> Student | None:
        student = self._students.get(student_id)
        if student is None or student.owner_id != owner_id:
            return None
        return student

    def _owned_loo7s(self, owner_id: str) -> list[Loo7]:
        return [
            loo7
            for loo7 in self._loo7s.values()
            if self._owned_student(loo7.student_id, owner_id) is not None
        ]

    # Student operations

    async def get_student(self, student_id: str, owner_id: str) -> Student | None:
        student = self._owned_student(student_id, owner_id)
        return replace(student) if student else None

    async def get_all_students(self, owner_id: str) -> list[Student]:
        return sort_students(
            replace(s) for s in self._students.values() if s.owner_id == owner_id
        )

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
        self._students[student.id] = student
        logger.debug("store.memory.student_created", student_id=student.id)
        return replace(student)

    async def update_student(
        self, student_id: str, updates: dict[str, Any], owner_id: str
    ) -> Student | None:
        student = self._owned_student(student_id, owner_id)
        if student is None:
            return None

        updated = replace(
            student,
            **filter_updates(updates, STUDENT_UPDATABLE_FIELDS),
            updated_at=utc_now_iso(),
        )
        self._students[student_id] = updated
        return replace(updated)

    async def delete_student(self, student_id: str, owner_id: str) -> bool:
        if self._owned_student(student_id, owner_id) is None:
            return False

        orphan_ids = [
            loo7.id for loo7 in self._loo7s.values() if loo7.student_id == student_id
        ]
        for loo7_id in orphan_ids:
            del self._loo7s[loo7_id]

        del self._students[student_id]
        logger.debug(
            "store.memory.student_deleted",
            student_id=student_id,
            loo7s_deleted=len(orphan_ids),
        )
        return True

    # Loo7 operations

    async def get_loo7(self, loo7_id: str, owner_id: str) -> Loo7 | None:
        loo7 = self._loo7s.get(loo7_id)
        if loo7 is None or self._owned_student(loo7.student_id, owner_id) is None:
            return None
        return replace(loo7)

    async def get_all_loo7(self, owner_id: str) -> list[Loo7]:
        return [replace(loo7) for loo7 in self._owned_loo7s(owner_id)]

    async def get_loo7_by_date(self, recitation_date: str, owner_id: str) -> list[Loo7]:
        return [
            replace(loo7)
            for loo7 in self._owned_loo7s(owner_id)
            if loo7.recitation_date == recitation_date
        ]

    async def get_loo7_by_student_and_date(
        self, student_id: str, recitation_date: str, owner_id: str
    ) -> list[Loo7]:
        if self._owned_student(student_id, owner_id) is None:
            return []
        return sort_by_type(
            replace(loo7)
            for loo7 in self._loo7s.values()
            if loo7.student_id == student_id and loo7.recitation_date == recitation_date
        )

    async def create_loo7(self, data: NewLoo7, owner_id: str) -> Loo7:
        if self._owned_student(data.student_id, owner_id) is None:
            raise NotFoundError(f"Student '{data.student_id}' not found")

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
        self._loo7s[loo7.id] = loo7
        return replace(loo7)

    async def update_loo7(
        self, loo7_id: str, updates: dict[str, Any], owner_id: str
    ) -> Loo7 | None:
        loo7 = self._loo7s.get(loo7_id)
        if loo7 is None or self._owned_student(loo7.student_id, owner_id) is None:
            return None

        updated = replace(loo7, **filter_updates(updates, LOO7_UPDATABLE_FIELDS))
        self._loo7s[loo7_id] = updated
        return replace(updated)

    async def delete_loo7(self, loo7_id: str, owner_id: str) -> bool:
        loo7 = self._loo7s.get(loo7_id)
        if loo7 is None or self._owned_student(loo7.student_id, owner_id) is None:
            return False
        del self._loo7s[loo7_id]
        return True
