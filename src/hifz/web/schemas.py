"""Pydantic schemas for Web API.

Serialization models for Student, Loo7, daily roll-ups and errors.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field


# =============================================================================
# STUDENT SCHEMAS
# =============================================================================


class StudentCreate(BaseModel):
    """Request body for creating a student."""

    name: str = Field(..., min_length=1, max_length=100)
    age: int | None = Field(default=None, ge=0, le=150)
    contact: str | None = Field(default=None, max_length=200)
    notes: str | None = Field(default=None, max_length=2000)


class StudentUpdate(BaseModel):
    """Request body for a partial student update."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    age: int | None = Field(default=None, ge=0, le=150)
    contact: str | None = Field(default=None, max_length=200)
    notes: str | None = Field(default=None, max_length=2000)


class StudentResponse(BaseModel):
    """Response for a student."""

    id: str
    name: str
    age: int | None = None
    contact: str | None = None
    notes: str | None = None
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


# =============================================================================
# LOO7 SCHEMAS
# =============================================================================


class Loo7Create(BaseModel):
    """Request body for creating a loo7.

    The verse range order is checked by the service so that a reversed
    range is answered with 400 like other rule violations.
    """

    student_id: str = Field(..., min_length=1)
    type: Literal["new", "near_past", "far_past"]
    recitation_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    surah_number: int = Field(..., ge=1, le=114)
    surah_name: str = Field(..., min_length=1, max_length=100)
    start_aya_number: int = Field(..., ge=1)
    end_aya_number: int = Field(..., ge=1)


class Loo7Evaluate(BaseModel):
    """Request body for evaluating a loo7.

    ``score`` is a plain string so unknown tags reach the service and get
    the same 400 answer as other evaluation errors.
    """

    score: str
    score_notes: str | None = Field(default=None, max_length=2000)


class Loo7Response(BaseModel):
    """Response for a loo7."""

    id: str
    student_id: str
    type: str
    recitation_date: str
    surah_number: int
    surah_name: str
    start_aya_number: int
    end_aya_number: int
    status: str
    score: str | None = None
    score_notes: str | None = None
    created_at: str
    completed_at: str | None = None

    model_config = {"from_attributes": True}


class DailySummaryResponse(BaseModel):
    """One student's totals for a day."""

    student: StudentResponse
    loo7_count: int
    pending_count: int
    completed: bool

    model_config = {"from_attributes": True}


class DefaultDateResponse(BaseModel):
    """Date pre-filled for a new loo7."""

    date: str


# =============================================================================
# ERROR / HEALTH SCHEMAS
# =============================================================================


class ErrorResponse(BaseModel):
    """Error body: machine-readable kind plus message."""

    error: str
    detail: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    storage: str = ""
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
