"""Student endpoints."""

from fastapi import APIRouter, Depends, status

from hifz.core.loo7_service import Loo7Service
from hifz.core.models import NewStudent
from hifz.web.deps import get_owner_id, get_service
from hifz.web.schemas import ErrorResponse, StudentCreate, StudentResponse, StudentUpdate

router = APIRouter(
    prefix="/api/students",
    tags=["students"],
    responses={404: {"model": ErrorResponse}},
)


@router.get("", response_model=list[StudentResponse])
async def list_students(
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> list[StudentResponse]:
    """List the sheikh's students ordered by name."""
    students = await service.list_students(owner_id)
    return [StudentResponse.model_validate(s) for s in students]


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: str,
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> StudentResponse:
    """Get a specific student by ID."""
    student = await service.get_student(owner_id, student_id)
    return StudentResponse.model_validate(student)


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    student_data: StudentCreate,
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> StudentResponse:
    """Create a new student."""
    student = await service.create_student(
        owner_id,
        NewStudent(
            name=student_data.name,
            age=student_data.age,
            contact=student_data.contact,
            notes=student_data.notes,
        ),
    )
    return StudentResponse.model_validate(student)


@router.patch("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: str,
    student_data: StudentUpdate,
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> StudentResponse:
    """Update only the fields present in the body."""
    student = await service.update_student(
        owner_id, student_id, student_data.model_dump(exclude_unset=True)
    )
    return StudentResponse.model_validate(student)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    student_id: str,
    owner_id: str = Depends(get_owner_id),
    service: Loo7Service = Depends(get_service),
) -> None:
    """Delete a student and all of its loo7s."""
    await service.delete_student(owner_id, student_id)
