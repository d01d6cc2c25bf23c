"""Loo7 endpoints.

Static paths (default-date, daily, date, student) are declared before
``/{loo7_id}`` so they are matched first.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from hifz.core.errors import NotFoundError, ValidationError
from hifz.core.loo7_service import Loo7Service
from hifz.core.models import NewLoo7
from hifz.core.schedule import default_recitation_date, parse_date
from hifz.web.deps import get_owner_id, get_service
from hifz.web.schemas import (
    DailySummaryResponse,
    DefaultDateResponse,
    ErrorResponse,
    Loo7Create,
    Loo7Evaluate,
    Loo7Response,
    StudentResponse,
)

router = APIRouter(
    prefix="/api/loo7",
    tags=["loo7"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.get("/default-date", response_model=DefaultDateResponse)
async def get_default_date(
    today: str | None = Query(default=None, description="Reference day, YYYY-MM-DD"),
) -> DefaultDateResponse:
    """Date to pre-fill in the new loo7 form."""
    reference: date | None = parse_date(today) if today else None
    return DefaultDateResponse(date=default_recitation_date(reference))


@router.get("/daily/{recitation_date}", response_model=list[DailySummaryResponse])
async def get_daily_summary(
    recitation_date: str,
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> list[DailySummaryResponse]:
    """Students with loo7s on a date, with total and pending counts."""
    summaries = await service.daily_summary(owner_id, recitation_date)
    return [
        DailySummaryResponse(
            student=StudentResponse.model_validate(s.student),
            loo7_count=s.loo7_count,
            pending_count=s.pending_count,
            completed=s.completed,
        )
        for s in summaries
    ]


@router.get("/date/{recitation_date}", response_model=list[Loo7Response])
async def list_loo7_by_date(
    recitation_date: str,
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> list[Loo7Response]:
    """All loo7s due on a date."""
    loo7s = await service.list_by_date(owner_id, recitation_date)
    return [Loo7Response.model_validate(loo7) for loo7 in loo7s]


@router.get("/student/{student_id}/{recitation_date}", response_model=list[Loo7Response])
async def list_student_loo7(
    student_id: str,
    recitation_date: str,
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> list[Loo7Response]:
    """A student's loo7s for a date, ordered new, near_past, far_past."""
    loo7s = await service.list_for_student(owner_id, student_id, recitation_date)
    return [Loo7Response.model_validate(loo7) for loo7 in loo7s]


@router.get("/{loo7_id}", response_model=Loo7Response)
async def get_loo7(
    loo7_id: str,
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> Loo7Response:
    """Get a specific loo7 by ID."""
    return Loo7Response.model_validate(await service.get_loo7(owner_id, loo7_id))


@router.post("", response_model=Loo7Response, status_code=status.HTTP_201_CREATED)
async def create_loo7(
    loo7_data: Loo7Create,
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> Loo7Response:
    """Create a pending loo7.

    An unknown student is a bad request here, not a missing resource.
    """
    try:
        loo7 = await service.create_loo7(owner_id, NewLoo7(**loo7_data.model_dump()))
    except NotFoundError as e:
        raise ValidationError(e.message) from e
    return Loo7Response.model_validate(loo7)


@router.post("/{loo7_id}/evaluate", response_model=Loo7Response)
async def evaluate_loo7(
    loo7_id: str,
    evaluation: Loo7Evaluate,
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> Loo7Response:
    """Evaluate a pending loo7; a "repeat" score schedules a follow-up."""
    loo7 = await service.evaluate_loo7(
        owner_id, loo7_id, evaluation.score, evaluation.score_notes
    )
    return Loo7Response.model_validate(loo7)


@router.delete("/{loo7_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_loo7(
    loo7_id: str,
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> None:
    """Delete a single loo7."""
    await service.delete_loo7(owner_id, loo7_id)
