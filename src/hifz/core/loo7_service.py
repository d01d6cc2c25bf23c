"""Loo7 service module.

Responsibilities:
- Validate and create loo7s for a sheikh's students
- Evaluate a pending loo7 (pending -> completed) and, when the score is
  "repeat", schedule a follow-up loo7 on the next lesson day
- Answer the daily listing queries (by date, by student and date, roll-up)
- Pass student CRUD through to the record store with validation

The service holds no state of its own; everything lives in the injected
RecordStore. Evaluation and follow-up creation are two separate writes:
if the follow-up fails the evaluation stays recorded and the failure is
only logged. Two concurrent evaluations of the same loo7 are not
serialized here; the last write wins.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import structlog

from hifz.core.errors import InvalidStateError, Loo7Error, NotFoundError, ValidationError
from hifz.core.models import (
    LOO7_TYPES,
    SCORES,
    STUDENT_UPDATABLE_FIELDS,
    DailySummary,
    Loo7,
    NewLoo7,
    NewStudent,
    Student,
)
from hifz.core.schedule import format_date, next_scheduled_date, parse_date
from hifz.db.store import RecordStore

logger = structlog.get_logger(__name__)

SURAH_COUNT = 114
MAX_NAME_LENGTH = 100


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# VALIDATION
# =============================================================================


def validate_new_loo7(data: NewLoo7) -> NewLoo7:
    """Check a creation request and normalize its date.

    Raises:
        ValidationError: On unknown type, bad date, surah or verse range
    """
    if not data.student_id:
        raise ValidationError("student_id is required")
    if data.type not in LOO7_TYPES:
        raise ValidationError(
            f"Invalid type '{data.type}'. Expected one of: {', '.join(LOO7_TYPES)}"
        )
    if not 1 <= data.surah_number <= SURAH_COUNT:
        raise ValidationError(f"surah_number must be between 1 and {SURAH_COUNT}")
    if not data.surah_name or not data.surah_name.strip():
        raise ValidationError("surah_name is required")
    if data.start_aya_number < 1:
        raise ValidationError("start_aya_number must be at least 1")
    if data.end_aya_number < data.start_aya_number:
        raise ValidationError(
            f"end_aya_number ({data.end_aya_number}) must not be before "
            f"start_aya_number ({data.start_aya_number})"
        )

    data.recitation_date = format_date(parse_date(data.recitation_date))
    return data


def validate_score(score: str) -> str:
    """Check that a score tag is one of the recognized variants."""
    if score not in SCORES:
        raise ValidationError(
            f"Invalid score '{score}'. Expected one of: {', '.join(SCORES)}"
        )
    return score


def _validate_student_fields(fields: dict[str, Any]) -> None:
    if "name" in fields:
        name = fields["name"]
        if not name or not str(name).strip():
            raise ValidationError("name is required")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(f"name must be at most {MAX_NAME_LENGTH} characters")
    age = fields.get("age")
    if age is not None and age < 0:
        raise ValidationError("age must not be negative")


# =============================================================================
# SERVICE
# =============================================================================


class Loo7Service:
    """Business rules for students and loo7s on top of a RecordStore."""

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.store = store
        self.clock = clock

    # Students

    async def list_students(self, owner_id: str) -> list[Student]:
        return await self.store.get_all_students(owner_id)

    async def get_student(self, owner_id: str, student_id: str) -> Student:
        student = await self.store.get_student(student_id, owner_id)
        if student is None:
            raise NotFoundError(f"Student '{student_id}' not found")
        return student

    async def create_student(self, owner_id: str, data: NewStudent) -> Student:
        _validate_student_fields({"name": data.name, "age": data.age})
        student = await self.store.create_student(data, owner_id)
        logger.info("student.created", student_id=student.id, owner_id=owner_id)
        return student

    async def update_student(
        self, owner_id: str, student_id: str, updates: dict[str, Any]
    ) -> Student:
        unknown = set(updates) - STUDENT_UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        _validate_student_fields(updates)

        student = await self.store.update_student(student_id, updates, owner_id)
        if student is None:
            raise NotFoundError(f"Student '{student_id}' not found")
        return student

    async def delete_student(self, owner_id: str, student_id: str) -> None:
        """Delete a student together with all of its loo7s."""
        if not await self.store.delete_student(student_id, owner_id):
            raise NotFoundError(f"Student '{student_id}' not found")
        logger.info("student.deleted", student_id=student_id, owner_id=owner_id)

    # Loo7s

    async def get_loo7(self, owner_id: str, loo7_id: str) -> Loo7:
        loo7 = await self.store.get_loo7(loo7_id, owner_id)
        if loo7 is None:
            raise NotFoundError(f"Loo7 '{loo7_id}' not found")
        return loo7

    async def delete_loo7(self, owner_id: str, loo7_id: str) -> None:
        if not await self.store.delete_loo7(loo7_id, owner_id):
            raise NotFoundError(f"Loo7 '{loo7_id}' not found")

    async def create_loo7(self, owner_id: str, data: NewLoo7) -> Loo7:
        """Create a pending loo7.

        Args:
            owner_id: Sheikh owning the student
            data: Student, type, date and verse range

        Returns:
            The stored loo7 with status "pending" and no score

        Raises:
            ValidationError: If the request is malformed
            NotFoundError: If the student does not exist for this owner
        """
        data = validate_new_loo7(data)
        loo7 = await self.store.create_loo7(data, owner_id)
        logger.info(
            "loo7.created",
            loo7_id=loo7.id,
            student_id=loo7.student_id,
            type=loo7.type,
            recitation_date=loo7.recitation_date,
        )
        return loo7

    async def evaluate_loo7(
        self,
        owner_id: str,
        loo7_id: str,
        score: str,
        score_notes: str | None = None,
    ) -> Loo7:
        """Record the evaluation of a pending loo7.

        A "repeat" score leaves the evaluated loo7 as history and schedules
        a fresh pending copy on the next lesson day. The copy is not
        returned; it shows up in later listings. A repeated copy can itself
        be repeated, without limit.

        Args:
            owner_id: Sheikh owning the loo7's student
            loo7_id: Loo7 to evaluate
            score: One of excellent, good, weak, repeat
            score_notes: Optional free-text notes

        Returns:
            The evaluated loo7

        Raises:
            NotFoundError: If the loo7 does not exist for this owner
            InvalidStateError: If the loo7 was already evaluated
            ValidationError: If the score is not recognized, or a repeat
                has no lesson day left to be scheduled on
        """
        loo7 = await self.get_loo7(owner_id, loo7_id)

        if loo7.is_completed:
            raise InvalidStateError(f"Loo7 '{loo7_id}' already evaluated")

        validate_score(score)
        notes = score_notes.strip() if score_notes and score_notes.strip() else None
        next_date = next_scheduled_date(loo7.recitation_date) if score == "repeat" else None

        updated = await self.store.update_loo7(
            loo7_id,
            {
                "status": "completed",
                "score": score,
                "score_notes": notes,
                "completed_at": self.clock().isoformat(),
            },
            owner_id,
        )
        if updated is None:
            raise NotFoundError(f"Loo7 '{loo7_id}' not found")

        logger.info("loo7.evaluated", loo7_id=loo7_id, score=score)

        if next_date is not None:
            await self._schedule_repeat(owner_id, loo7, next_date)

        return updated

    async def _schedule_repeat(
        self, owner_id: str, loo7: Loo7, next_date: str
    ) -> Loo7 | None:
        try:
            follow_up = await self.store.create_loo7(
                NewLoo7.follow_up_of(loo7, next_date), owner_id
            )
        except Loo7Error as e:
            logger.error(
                "loo7.followup_failed",
                loo7_id=loo7.id,
                recitation_date=next_date,
                error_kind=e.kind,
                error=str(e),
            )
            return None

        logger.info(
            "loo7.rescheduled",
            loo7_id=loo7.id,
            follow_up_id=follow_up.id,
            recitation_date=next_date,
        )
        return follow_up

    # Listings

    async def list_by_date(self, owner_id: str, recitation_date: str) -> list[Loo7]:
        """All of the owner's loo7s due on a date."""
        day = format_date(parse_date(recitation_date))
        return await self.store.get_loo7_by_date(day, owner_id)

    async def list_for_student(
        self, owner_id: str, student_id: str, recitation_date: str
    ) -> list[Loo7]:
        """One student's loo7s for a date, ordered new, near_past, far_past."""
        day = format_date(parse_date(recitation_date))
        return await self.store.get_loo7_by_student_and_date(student_id, day, owner_id)

    async def daily_summary(self, owner_id: str, recitation_date: str) -> list[DailySummary]:
        """Per-student totals for a date.

        Only students with at least one loo7 on that date are included,
        ordered like the student list.
        """
        loo7s = await self.list_by_date(owner_id, recitation_date)

        counts: dict[str, list[int]] = {}
        for loo7 in loo7s:
            total_pending = counts.setdefault(loo7.student_id, [0, 0])
            total_pending[0] += 1
            if loo7.status == "pending":
                total_pending[1] += 1

        students = await self.store.get_all_students(owner_id)
        return [
            DailySummary(
                student=student,
                loo7_count=counts[student.id][0],
                pending_count=counts[student.id][1],
            )
            for student in students
            if student.id in counts
        ]
