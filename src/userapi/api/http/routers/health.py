"""Health check endpoints for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from src.userapi.api.http.app_data import ApplicationDependencies
from src.userapi.api.http.deps import get_app_dependencies
from src.userapi.api.http.responses import ErrorResponse, MessageResponse

router = APIRouter(tags=["health"])


@router.get("/ping", response_model=MessageResponse)
def ping() -> dict[str, str]:
    """Liveness probe; returns pong as long as the process is serving."""
    return {"message": "pong"}


@router.get("/health/ready", responses={503: {"model": ErrorResponse}})
def readiness(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> dict[str, Any]:
    """Readiness probe; checks that the database answers."""
    if not app_deps.database_service.health_check():
        raise HTTPException(status_code=503, detail="database unavailable")
    return {
        "status": "ready",
        "database": "connected",
        "pool": app_deps.database_service.get_pool_status(),
    }
