"""Health check endpoint for monitoring service availability."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.mylibrary import __version__
from src.mylibrary.api.http.app_data import ApplicationDependencies
from src.mylibrary.api.http.deps import get_app_dependencies

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=None)
def health(
    app_deps: ApplicationDependencies = Depends(get_app_dependencies),
) -> JSONResponse:
    """Liveness plus database connectivity.

    Returns 200 when the database answers, 503 otherwise.
    """
    db_healthy = app_deps.database_service.health_check()
    body: dict[str, Any] = {
        "status": "healthy" if db_healthy else "unhealthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "database": "connected" if db_healthy else "disconnected",
        "environment": app_deps.config.app.environment,
        "version": __version__,
    }
    return JSONResponse(status_code=200 if db_healthy else 503, content=body)
