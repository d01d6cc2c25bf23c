"""Student and Loo7 records.

A loo7 is a unit of recitation work assigned to a student for a given
date and verse range. Records are plain dataclasses; timestamps are ISO
strings and recitation dates are ``YYYY-MM-DD`` strings.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from typing import Any, Iterable, Literal, get_args

Loo7Type = Literal["new", "near_past", "far_past"]
Loo7Status = Literal["pending", "completed"]
Score = Literal["excellent", "good", "weak", "repeat"]

LOO7_TYPES: tuple[str, ...] = get_args(Loo7Type)
LOO7_STATUSES: tuple[str, ...] = get_args(Loo7Status)
SCORES: tuple[str, ...] = get_args(Score)

# Presentation order for a student's day: new before near_past before far_past
TYPE_ORDER = {"new": 1, "near_past": 2, "far_past": 3}

# Fields a partial update may touch
STUDENT_UPDATABLE_FIELDS = frozenset({"name", "age", "contact", "notes"})
LOO7_UPDATABLE_FIELDS = frozenset(
    {
        "type",
        "recitation_date",
        "surah_number",
        "surah_name",
        "start_aya_number",
        "end_aya_number",
        "status",
        "score",
        "score_notes",
        "completed_at",
    }
)


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Student:
    """A student owned by a sheikh."""

    id: str
    owner_id: str
    name: str
    age: int | None = None
    contact: str | None = None
    notes: str | None = None
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Student:
        """Build from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class NewStudent:
    """Input for creating a student."""

    name: str
    age: int | None = None
    contact: str | None = None
    notes: str | None = None


@dataclass
class Loo7:
    """A recitation assignment."""

    id: str
    student_id: str
    type: Loo7Type
    recitation_date: str
    surah_number: int
    surah_name: str
    start_aya_number: int
    end_aya_number: int
    status: Loo7Status = "pending"
    score: Score | None = None
    score_notes: str | None = None
    created_at: str = ""
    completed_at: str | None = None

    @property
    def is_completed(self) -> bool:
        """Whether the loo7 has been evaluated."""
        return self.status == "completed"

    @property
    def aya_count(self) -> int:
        """Number of verses in the range."""
        return self.end_aya_number - self.start_aya_number + 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Loo7:
        """Build from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class NewLoo7:
    """Input for creating a loo7."""

    student_id: str
    type: str
    recitation_date: str
    surah_number: int
    surah_name: str
    start_aya_number: int
    end_aya_number: int

    @classmethod
    def follow_up_of(cls, loo7: Loo7, recitation_date: str) -> NewLoo7:
        """Clone a loo7's student, type and verse range onto a new date."""
        return cls(
            student_id=loo7.student_id,
            type=loo7.type,
            recitation_date=recitation_date,
            surah_number=loo7.surah_number,
            surah_name=loo7.surah_name,
            start_aya_number=loo7.start_aya_number,
            end_aya_number=loo7.end_aya_number,
        )


@dataclass
class DailySummary:
    """Per-student roll-up of one day's loo7s."""

    student: Student
    loo7_count: int
    pending_count: int

    @property
    def completed(self) -> bool:
        """True when every loo7 of the day has been evaluated."""
        return self.loo7_count > 0 and self.pending_count == 0


def sort_by_type(loo7s: Iterable[Loo7]) -> list[Loo7]:
    """Order loo7s new, near_past, far_past; ties keep their input order."""
    return sorted(loo7s, key=lambda loo7: TYPE_ORDER.get(loo7.type, len(TYPE_ORDER) + 1))


def sort_students(students: Iterable[Student]) -> list[Student]:
    """Order students by name, case-insensitively."""
    return sorted(students, key=lambda s: s.name.casefold())
