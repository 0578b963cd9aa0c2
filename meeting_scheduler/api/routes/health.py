# meeting_scheduler/api/routes/health.py
from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel, Field

from meeting_scheduler.core.config import get_settings


router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """
    Response schema for the health check endpoint.
    """

    status: str = Field(..., description="Overall health status.", examples=["ok"])
    app_name: str = Field(
        ...,
        description="Human-friendly name of the running application.",
        examples=["Meeting Scheduler"],
    )
    environment: str = Field(
        ...,
        description="Current deployment environment (local/dev/stage/prod).",
        examples=["local"],
    )
    store_backend: str = Field(
        ...,
        description="Record store in use (sql or memory).",
        examples=["sql"],
    )
    timestamp_utc: datetime = Field(
        ...,
        description="Server-side timestamp (UTC) at which this health check was generated.",
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check for the scheduling service",
    description=(
        "Lightweight endpoint to verify that the backend is up and responding. "
        "It does not touch the record store."
    ),
)
async def health_check() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        status="ok",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        store_backend=settings.STORE_BACKEND.value,
        timestamp_utc=datetime.now(tz=timezone.utc),
    )
