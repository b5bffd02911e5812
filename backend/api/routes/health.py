"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from shared.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    debate_stream: str
    database: str
    tts: str


def _configured(value: str) -> str:
    return "configured" if value else "not_configured"


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=get_settings().app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """
    Readiness check endpoint.

    Reports which external collaborators are configured. The service is
    ready when the streaming debate endpoint is set; the database and
    text-to-speech endpoint are optional.
    """
    settings = get_settings()
    return ReadinessResponse(
        status="ready" if settings.debate_stream_url else "degraded",
        debate_stream=_configured(settings.debate_stream_url),
        database=_configured(settings.supabase_url),
        tts=_configured(settings.tts_url),
    )
