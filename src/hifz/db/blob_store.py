"""Key/blob record store.

Stores each record as a JSON blob in a named namespace:

- students namespace, keys ``student:{id}``
- loo7s namespace, keys ``loo7:{id}``

Queries list a namespace and filter the decoded blobs, so every read is a
full scan. The namespace transport is pluggable; DirectoryBlobNamespace
keeps one JSON file per key under a root directory.
File reads and writes are blocking and run on the caller's event loop.
"""

from __future__ import annotations

import json
import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path
from typing import Any
from urllib.parse import quote, unquote

import structlog

from hifz.core.errors import NotFoundError, StoreError
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

DEFAULT_BLOBS_DIR = Path("data/blobs")

STUDENTS_NAMESPACE = "students"
LOO7S_NAMESPACE = "loo7s"


# =============================================================================
# NAMESPACES
# =============================================================================


class BlobNamespace(ABC):
    """A flat key -> JSON blob namespace."""

    @abstractmethod
    def get_json(self, key: str) -> dict[str, Any] | None:
        """Read and decode a blob; None if the key is absent."""

    @abstractmethod
    def set_json(self, key: str, value: dict[str, Any]) -> None:
        """Write a blob, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a blob; False if the key was absent."""

    @abstractmethod
    def list_keys(self) -> list[str]:
        """List all keys in the namespace."""


class DirectoryBlobNamespace(BlobNamespace):
    """Namespace stored as one ``<quoted key>.json`` file per blob."""

    def __init__(self, root: Path):
        self.root = root
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create blob directory {root}: {e}") from e

    def _path(self, key: str) -> Path:
        return self.root / f"{quote(key, safe='')}.json"

    def get_json(self, key: str) -> dict[str, Any] | None:
        path = self._path(key)
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, OSError) as e:
            raise StoreError(f"Cannot read blob '{key}': {e}") from e

    def set_json(self, key: str, value: dict[str, Any]) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
            tmp_path.replace(path)
        except OSError as e:
            raise StoreError(f"Cannot write blob '{key}': {e}") from e

    def delete(self, key: str) -> bool:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StoreError(f"Cannot delete blob '{key}': {e}") from e
        return True

    def list_keys(self) -> list[str]:
        try:
            paths = sorted(self.root.glob("*.json"), key=lambda p: p.stat().st_mtime_ns)
        except OSError as e:
            raise StoreError(f"Cannot list blobs in {self.root}: {e}") from e
        return [unquote(p.stem) for p in paths]


# =============================================================================
# STORE
# =============================================================================


class BlobStore(RecordStore):
    """Record store over two blob namespaces."""

    def __init__(self, students: BlobNamespace, loo7s: BlobNamespace) -> None:
        self.students = students
        self.loo7s = loo7s

    @classmethod
    def in_directory(cls, root: Path | None = None) -> BlobStore:
        """Build a store whose namespaces are subdirectories of ``root``."""
        root = root or DEFAULT_BLOBS_DIR
        logger.info("store.blobs.opened", path=str(root))
        return cls(
            students=DirectoryBlobNamespace(root / STUDENTS_NAMESPACE),
            loo7s=DirectoryBlobNamespace(root / LOO7S_NAMESPACE),
        )

    def _iter_students(self):
        for key in self.students.list_keys():
            data = self.students.get_json(key)
            if data is not None:
                yield Student.from_dict(data)

    def _iter_loo7s(self):
        for key in self.loo7s.list_keys():
            data = self.loo7s.get_json(key)
            if data is not None:
                yield Loo7.from_dict(data)

    # Student operations

    async def get_student(self, student_id: str, owner_id: str) -> Student | None:
        data = self.students.get_json(f"student:{student_id}")
        if data is None:
            return None
        student = Student.from_dict(data)
        if student.owner_id != owner_id:
            return None
        return student

    async def get_all_students(self, owner_id: str) -> list[Student]:
        return sort_students(s for s in self._iter_students() if s.owner_id == owner_id)

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
        self.students.set_json(f"student:{student.id}", student.to_dict())
        return student

    async def update_student(
        self, student_id: str, updates: dict[str, Any], owner_id: str
    ) -> Student | None:
        student = await self.get_student(student_id, owner_id)
        if student is None:
            return None

        updated = replace(
            student,
            **filter_updates(updates, STUDENT_UPDATABLE_FIELDS),
            updated_at=utc_now_iso(),
        )
        self.students.set_json(f"student:{student_id}", updated.to_dict())
        return updated

    async def delete_student(self, student_id: str, owner_id: str) -> bool:
        if await self.get_student(student_id, owner_id) is None:
            return False

        removed = 0
        for loo7 in list(self._iter_loo7s()):
            if loo7.student_id == student_id:
                self.loo7s.delete(f"loo7:{loo7.id}")
                removed += 1

        self.students.delete(f"student:{student_id}")
        logger.debug("store.blobs.student_deleted", student_id=student_id, loo7s_deleted=removed)
        return True

    # Loo7 operations

    async def get_loo7(self, loo7_id: str, owner_id: str) -> Loo7 | None:
        data = self.loo7s.get_json(f"loo7:{loo7_id}")
        if data is None:
            return None
        loo7 = Loo7.from_dict(data)
        if await self.get_student(loo7.student_id, owner_id) is None:
            return None
        return loo7

    async def get_all_loo7(self, owner_id: str) -> list[Loo7]:
        student_ids = {s.id for s in await self.get_all_students(owner_id)}
        return [loo7 for loo7 in self._iter_loo7s() if loo7.student_id in student_ids]

    async def get_loo7_by_date(self, recitation_date: str, owner_id: str) -> list[Loo7]:
        return [
            loo7
            for loo7 in await self.get_all_loo7(owner_id)
            if loo7.recitation_date == recitation_date
        ]

    async def get_loo7_by_student_and_date(
        self, student_id: str, recitation_date: str, owner_id: str
    ) -> list[Loo7]:
        if await self.get_student(student_id, owner_id) is None:
            return []
        return sort_by_type(
            loo7
            for loo7 in self._iter_loo7s()
            if loo7.student_id == student_id and loo7.recitation_date == recitation_date
        )

    async def create_loo7(self, data: NewLoo7, owner_id: str) -> Loo7:
        if await self.get_student(data.student_id, owner_id) is None:
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
        self.loo7s.set_json(f"loo7:{loo7.id}", loo7.to_dict())
        return loo7

    async def update_loo7(
        self, loo7_id: str, updates: dict[str, Any], owner_id: str
    ) -> Loo7 | None:
        loo7 = await self.get_loo7(loo7_id, owner_id)
        if loo7 is None:
            return None

        updated = replace(loo7, **filter_updates(updates, LOO7_UPDATABLE_FIELDS))
        self.loo7s.set_json(f"loo7:{loo7_id}", updated.to_dict())
        return updated

    async def delete_loo7(self, loo7_id: str, owner_id: str) -> bool:
        if await self.get_loo7(loo7_id, owner_id) is None:
            return False
        return self.loo7s.delete(f"loo7:{loo7_id}")
