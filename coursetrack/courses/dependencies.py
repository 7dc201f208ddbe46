"""FastAPI dependencies for course structure."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from coursetrack.core.exceptions import DomainError
from coursetrack.progress.dependencies import PROGRESS_ERROR_STATUS

from .service import CourseService


async def get_course_service(request: Request) -> CourseService:
    """Get course service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "course_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Course service not available",
        )
    return app_state.course_service


CourseServiceDep = Annotated[CourseService, Depends(get_course_service)]


COURSE_ERROR_STATUS = {
    **PROGRESS_ERROR_STATUS,
    "module_exists": status.HTTP_409_CONFLICT,
    "material_exists": status.HTTP_409_CONFLICT,
}


def handle_course_error(error: DomainError) -> HTTPException:
    """Convert course errors to HTTP exceptions."""
    status_code = COURSE_ERROR_STATUS.get(
        error.code, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return HTTPException(status_code=status_code, detail=error.message)
