"""FastAPI dependencies for quizzes."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from coursetrack.core.exceptions import DomainError
from coursetrack.progress.dependencies import PROGRESS_ERROR_STATUS

from .service import QuizService


async def get_quiz_service(request: Request) -> QuizService:
    """Get quiz service from app state."""
    app_state = request.app.state
    if not getattr(app_state, "quiz_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Quiz service not available",
        )
    return app_state.quiz_service


QuizServiceDep = Annotated[QuizService, Depends(get_quiz_service)]


QUIZ_ERROR_STATUS = {
    **PROGRESS_ERROR_STATUS,
    "quiz_not_found": status.HTTP_404_NOT_FOUND,
    "quiz_inactive": status.HTTP_400_BAD_REQUEST,
    "no_active_attempt": status.HTTP_404_NOT_FOUND,
    "attempt_already_completed": status.HTTP_409_CONFLICT,
    "invalid_answer_set": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "quiz_locked": status.HTTP_400_BAD_REQUEST,
}


def handle_quiz_error(error: DomainError) -> HTTPException:
    """Convert quiz errors (and the course errors quizzes surface) to HTTP."""
    status_code = QUIZ_ERROR_STATUS.get(
        error.code, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return HTTPException(status_code=status_code, detail=error.message)
