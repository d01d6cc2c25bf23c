"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from hifz import __version__
from hifz.web.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Check API health status."""
    return HealthResponse(
        status="ok",
        version=__version__,
        storage=type(request.app.state.service.store).__name__,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
