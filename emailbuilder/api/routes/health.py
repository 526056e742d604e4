"""Health check routes."""

from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    ready: bool
    checks: dict[str, bool]


@router.get("/")
def root():
    return {"msg": "Server is up and running!"}


@router.get("/health", response_model=HealthResponse)
def health_check(request: Request):
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow().isoformat(),
        version=request.app.state.settings.app_version,
    )


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check(request: Request):
    """Readiness check with dependency validation."""
    checks = {}

    try:
        checks["database"] = request.app.state.database.ping()
    except SQLAlchemyError:
        checks["database"] = False

    return ReadinessResponse(
        ready=all(checks.values()),
        checks=checks,
    )
