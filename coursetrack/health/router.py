"""Health check endpoints."""

from fastapi import APIRouter, Request, Response, status

from coursetrack.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAMES = ("course_service", "progress_service", "quiz_service")


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request, response: Response) -> dict[str, str | bool]:
    """Readiness probe - ready once every service is wired."""
    settings = get_settings()
    state = request.app.state
    ready = all(getattr(state, name, None) for name in SERVICE_NAMES)
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": "ready" if ready else "unavailable",
        "environment": settings.environment,
        "debug": settings.debug,
    }


@router.get("")
async def health() -> dict[str, str]:
    """General health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
