"""Record store interface.

Every backend persists students and loo7s behind the same async contract,
scoped by ``owner_id`` (the sheikh). A record owned by another sheikh is
reported exactly like a missing one.

Backends:
- MemoryStore: process-local dictionaries
- SQLiteStore: embedded SQLite database
- BlobStore: key/JSON-blob namespaces
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from hifz.core.models import Loo7, NewLoo7, NewStudent, Student


class RecordStore(ABC):
    """Persistence contract consumed by the loo7 service."""

    # Student operations

    @abstractmethod
    async def get_student(self, student_id: str, owner_id: str) -> Student | None:
        """Get a student, or None if missing or owned by someone else."""

    @abstractmethod
    async def get_all_students(self, owner_id: str) -> list[Student]:
        """List the owner's students ordered by name."""

    @abstractmethod
    async def create_student(self, data: NewStudent, owner_id: str) -> Student:
        """Create a student with a fresh id."""

    @abstractmethod
    async def update_student(
        self, student_id: str, updates: dict[str, Any], owner_id: str
    ) -> Student | None:
        """Apply a partial update; returns None if the student is missing."""

    @abstractmethod
    async def delete_student(self, student_id: str, owner_id: str) -> bool:
        """Delete a student and all of its loo7s."""

    # Loo7 operations

    @abstractmethod
    async def get_loo7(self, loo7_id: str, owner_id: str) -> Loo7 | None:
        """Get a loo7, or None if missing or owned by someone else."""

    @abstractmethod
    async def get_all_loo7(self, owner_id: str) -> list[Loo7]:
        """List every loo7 of the owner's students."""

    @abstractmethod
    async def get_loo7_by_date(self, recitation_date: str, owner_id: str) -> list[Loo7]:
        """List the owner's loo7s due on a date."""

    @abstractmethod
    async def get_loo7_by_student_and_date(
        self, student_id: str, recitation_date: str, owner_id: str
    ) -> list[Loo7]:
        """List one student's loo7s for a date, ordered new/near_past/far_past."""

    @abstractmethod
    async def create_loo7(self, data: NewLoo7, owner_id: str) -> Loo7:
        """Create a pending loo7.

        Raises:
            NotFoundError: If the student does not exist for this owner
        """

    @abstractmethod
    async def update_loo7(
        self, loo7_id: str, updates: dict[str, Any], owner_id: str
    ) -> Loo7 | None:
        """Apply a partial update; returns None if the loo7 is missing."""

    @abstractmethod
    async def delete_loo7(self, loo7_id: str, owner_id: str) -> bool:
        """Delete a single loo7."""


def filter_updates(updates: dict[str, Any], allowed: frozenset[str]) -> dict[str, Any]:
    """Keep only the keys a partial update may change."""
    return {k: v for k, v in updates.items() if k in allowed}
