"""Quiz API endpoints.

Provides routes for:
- Quiz authoring per course
- Attempt start and submission
- Instructor results and student attempt history
"""

from uuid import UUID

from fastapi import APIRouter, status

from coursetrack.auth.dependencies import CurrentActor, TeacherActor
from coursetrack.core.exceptions import DomainError

from .dependencies import QuizServiceDep, handle_quiz_error
from .schemas import (
    AttemptResponse,
    MessageResponse,
    QuizCreateRequest,
    QuizResponse,
    QuizResultsResponse,
    QuizStudentView,
    QuizUpdateRequest,
    StartAttemptResponse,
    StudentAttemptListResponse,
    SubmitAttemptRequest,
    SubmitAttemptResponse,
)


router = APIRouter(prefix="/v1/quizzes", tags=["quizzes"])
course_quizzes_router = APIRouter(prefix="/v1/courses", tags=["quizzes"])


# ==============================================================================
# Authoring Endpoints
# ==============================================================================


@course_quizzes_router.post(
    "/{course_id}/quizzes",
    response_model=QuizResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create quiz",
)
async def create_quiz(
    course_id: UUID,
    data: QuizCreateRequest,
    quiz_service: QuizServiceDep,
    actor: TeacherActor,
) -> QuizResponse:
    """Create a quiz; it becomes a required item for course completion."""
    try:
        quiz = await quiz_service.create_quiz(course_id, data, actor)
        return QuizResponse.from_entity(quiz)
    except DomainError as e:
        raise handle_quiz_error(e) from e


@course_quizzes_router.get(
    "/{course_id}/quizzes",
    response_model=list[QuizResponse | QuizStudentView],
    summary="List course quizzes",
)
async def list_course_quizzes(
    course_id: UUID,
    quiz_service: QuizServiceDep,
    actor: CurrentActor,
) -> list[QuizResponse | QuizStudentView]:
    try:
        return await quiz_service.list_course_quizzes(course_id, actor)
    except DomainError as e:
        raise handle_quiz_error(e) from e


@router.put(
    "/{quiz_id}",
    response_model=QuizResponse,
    summary="Update quiz",
)
async def update_quiz(
    quiz_id: UUID,
    data: QuizUpdateRequest,
    quiz_service: QuizServiceDep,
    actor: TeacherActor,
) -> QuizResponse:
    """Update a quiz. Refused once any student has attempted it."""
    try:
        quiz = await quiz_service.update_quiz(quiz_id, data, actor)
        return QuizResponse.from_entity(quiz)
    except DomainError as e:
        raise handle_quiz_error(e) from e


@router.delete(
    "/{quiz_id}",
    response_model=MessageResponse,
    summary="Delete quiz",
)
async def delete_quiz(
    quiz_id: UUID,
    quiz_service: QuizServiceDep,
    actor: TeacherActor,
) -> MessageResponse:
    """Delete a quiz. Refused once any student has attempted it."""
    try:
        await quiz_service.delete_quiz(quiz_id, actor)
    except DomainError as e:
        raise handle_quiz_error(e) from e
    return MessageResponse(message="Quiz deleted")


# ==============================================================================
# Student Endpoints
# ==============================================================================


@router.get(
    "/attempts/me",
    response_model=StudentAttemptListResponse,
    summary="Get my attempts",
)
async def get_my_attempts(
    quiz_service: QuizServiceDep,
    actor: CurrentActor,
) -> StudentAttemptListResponse:
    """Every attempt by the current user, newest first."""
    items = await quiz_service.list_student_attempts(actor)
    return StudentAttemptListResponse(items=items, total=len(items))


@router.get(
    "/{quiz_id}",
    response_model=QuizResponse | QuizStudentView,
    summary="Get quiz",
)
async def get_quiz(
    quiz_id: UUID,
    quiz_service: QuizServiceDep,
    actor: CurrentActor,
) -> QuizResponse | QuizStudentView:
    """Get a quiz.

    Correct answers are included only for instructors, admins and students
    who completed an attempt.
    """
    try:
        return await quiz_service.get_quiz(quiz_id, actor)
    except DomainError as e:
        raise handle_quiz_error(e) from e


@router.post(
    "/{quiz_id}/start",
    response_model=StartAttemptResponse,
    summary="Start quiz attempt",
)
async def start_attempt(
    quiz_id: UUID,
    quiz_service: QuizServiceDep,
    actor: CurrentActor,
) -> StartAttemptResponse:
    """Start an attempt, or resume the one already in progress."""
    try:
        quiz, attempt, resumed = await quiz_service.start_attempt(quiz_id, actor)
    except DomainError as e:
        raise handle_quiz_error(e) from e

    return StartAttemptResponse(
        quiz=QuizStudentView.from_entity(quiz),
        attempt=AttemptResponse.from_entity(attempt),
        resumed=resumed,
    )


@router.post(
    "/{quiz_id}/submit",
    response_model=SubmitAttemptResponse,
    summary="Submit quiz attempt",
)
async def submit_attempt(
    quiz_id: UUID,
    data: SubmitAttemptRequest,
    quiz_service: QuizServiceDep,
    actor: CurrentActor,
) -> SubmitAttemptResponse:
    """Grade the in-progress attempt. Null answers count as skipped."""
    try:
        result = await quiz_service.submit_attempt(quiz_id, actor, data.answers)
    except DomainError as e:
        raise handle_quiz_error(e) from e

    return SubmitAttemptResponse(
        attempt=AttemptResponse.from_entity(result.attempt),
        score=result.score,
        max_score=result.max_score,
        percentage=result.percentage,
        passed=result.passed,
        completion_percentage=result.completion_percentage,
    )


@router.get(
    "/{quiz_id}/results",
    response_model=QuizResultsResponse,
    summary="Get quiz results",
)
async def get_results(
    quiz_id: UUID,
    quiz_service: QuizServiceDep,
    actor: TeacherActor,
) -> QuizResultsResponse:
    """Statistics and completed attempts (instructor only)."""
    try:
        return await quiz_service.get_results(quiz_id, actor)
    except DomainError as e:
        raise handle_quiz_error(e) from e
