"""Enrollment and course progress API endpoints.

Provides routes for:
- Course enrollment and instructor approval
- Lesson and module completion
- Progress queries and course statistics
"""

from uuid import UUID

from fastapi import APIRouter, Query, status

from coursetrack.auth.dependencies import CurrentActor, TeacherActor

from .dependencies import ProgressServiceDep, handle_progress_error
from .exceptions import ProgressError
from .models import EnrollmentStatus
from .schemas import (
    CourseProgressStatsResponse,
    EnrollmentDecisionRequest,
    EnrollmentListResponse,
    EnrollmentResponse,
    ProgressResponse,
    UpdateProgressRequest,
)


router = APIRouter(prefix="/v1/courses", tags=["progress"])


# ==============================================================================
# Enrollment Endpoints
# ==============================================================================


@router.post(
    "/{course_id}/enroll",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in course",
)
async def enroll_in_course(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    actor: CurrentActor,
) -> EnrollmentResponse:
    """Enroll the current user in a published course.

    The enrollment stays pending when the course requires approval.
    """
    try:
        enrollment = await progress_service.enroll(course_id, actor)
        return EnrollmentResponse.from_entity(course_id, enrollment)
    except ProgressError as e:
        raise handle_progress_error(e) from e


@router.get(
    "/{course_id}/enrollments/pending",
    response_model=EnrollmentListResponse,
    summary="List pending enrollment requests",
)
async def list_pending_enrollments(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    actor: TeacherActor,
) -> EnrollmentListResponse:
    try:
        enrollments = await progress_service.list_pending_enrollments(course_id, actor)
    except ProgressError as e:
        raise handle_progress_error(e) from e

    return EnrollmentListResponse(
        items=[EnrollmentResponse.from_entity(course_id, e) for e in enrollments],
        total=len(enrollments),
    )


@router.put(
    "/{course_id}/enrollments/{student_id}",
    response_model=EnrollmentResponse,
    summary="Approve or reject an enrollment",
)
async def decide_enrollment(
    course_id: UUID,
    student_id: UUID,
    data: EnrollmentDecisionRequest,
    progress_service: ProgressServiceDep,
    actor: TeacherActor,
) -> EnrollmentResponse:
    """Approve or reject a student's enrollment (instructor only)."""
    try:
        enrollment = await progress_service.set_enrollment_status(
            course_id, student_id, EnrollmentStatus(data.status), actor
        )
        return EnrollmentResponse.from_entity(course_id, enrollment)
    except ProgressError as e:
        raise handle_progress_error(e) from e


# ==============================================================================
# Progress Endpoints
# ==============================================================================


@router.put(
    "/{course_id}/progress",
    response_model=ProgressResponse,
    summary="Update lesson or module completion",
)
async def update_progress(
    course_id: UUID,
    data: UpdateProgressRequest,
    progress_service: ProgressServiceDep,
    actor: CurrentActor,
) -> ProgressResponse:
    """Mark a lesson and/or module as complete or incomplete.

    Returns the recalculated progress record.
    """
    try:
        progress = await progress_service.update_progress(
            course_id,
            actor,
            lesson_id=data.lesson_id,
            module_order=data.module_order,
            completed=data.completed,
        )
        return ProgressResponse.from_entity(progress)
    except ProgressError as e:
        raise handle_progress_error(e) from e


@router.get(
    "/{course_id}/progress",
    response_model=EnrollmentResponse,
    summary="Get course progress",
)
async def get_progress(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    actor: CurrentActor,
    student_id: UUID | None = Query(None, description="Instructor only"),
) -> EnrollmentResponse:
    """Get the current user's progress, or a student's for instructors."""
    try:
        enrollment = await progress_service.get_progress(course_id, actor, student_id)
        return EnrollmentResponse.from_entity(course_id, enrollment)
    except ProgressError as e:
        raise handle_progress_error(e) from e


@router.get(
    "/{course_id}/students",
    response_model=EnrollmentListResponse,
    summary="List students' progress",
)
async def list_students_progress(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    actor: TeacherActor,
) -> EnrollmentListResponse:
    try:
        enrollments = await progress_service.list_students_progress(course_id, actor)
    except ProgressError as e:
        raise handle_progress_error(e) from e

    return EnrollmentListResponse(
        items=[EnrollmentResponse.from_entity(course_id, e) for e in enrollments],
        total=len(enrollments),
    )


@router.get(
    "/{course_id}/stats",
    response_model=CourseProgressStatsResponse,
    summary="Get course progress statistics",
)
async def get_course_progress_stats(
    course_id: UUID,
    progress_service: ProgressServiceDep,
    actor: TeacherActor,
) -> CourseProgressStatsResponse:
    try:
        return await progress_service.get_course_progress_stats(course_id, actor)
    except ProgressError as e:
        raise handle_progress_error(e) from e
