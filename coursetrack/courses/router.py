"""Course structure API endpoints.

Provides routes for:
- Course creation, reads and settings updates
- Module and material authoring
- Instructor course listing with enrollment statistics
"""

from uuid import UUID

from fastapi import APIRouter, status

from coursetrack.auth.dependencies import CurrentActor, TeacherActor
from coursetrack.core.exceptions import DomainError

from .dependencies import CourseServiceDep, handle_course_error
from .schemas import (
    CourseDetailResponse,
    CourseResponse,
    CreateCourseRequest,
    CreateMaterialRequest,
    CreateModuleRequest,
    InstructorCourseListResponse,
    InstructorCourseResponse,
    UpdateCourseRequest,
)


router = APIRouter(prefix="/v1/courses", tags=["courses"])


@router.post(
    "",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create new course",
)
async def create_course(
    data: CreateCourseRequest,
    course_service: CourseServiceDep,
    actor: TeacherActor,
) -> CourseResponse:
    """Create a new course (TEACHER or ADMIN only)."""
    course = await course_service.create_course(data, actor)
    return CourseResponse.from_entity(course)


@router.get(
    "/teaching",
    response_model=InstructorCourseListResponse,
    summary="List my courses",
)
async def list_instructor_courses(
    course_service: CourseServiceDep,
    actor: TeacherActor,
) -> InstructorCourseListResponse:
    """List courses owned by the current instructor, with statistics."""
    courses = await course_service.list_instructor_courses(actor)
    return InstructorCourseListResponse(
        items=[InstructorCourseResponse.from_entity(c) for c in courses],
        total=len(courses),
    )


@router.get(
    "/{course_id}",
    response_model=CourseDetailResponse,
    summary="Get course details",
)
async def get_course(
    course_id: UUID,
    course_service: CourseServiceDep,
    actor: CurrentActor,
) -> CourseDetailResponse:
    """Get course structure and the current user's enrollment, if any."""
    try:
        course = await course_service.get_course(course_id, actor)
    except DomainError as e:
        raise handle_course_error(e) from e
    return CourseDetailResponse.build(course, course.get_enrollment(actor.id))


@router.put(
    "/{course_id}",
    response_model=CourseResponse,
    summary="Update course",
)
async def update_course(
    course_id: UUID,
    data: UpdateCourseRequest,
    course_service: CourseServiceDep,
    actor: TeacherActor,
) -> CourseResponse:
    """Update course (owner or ADMIN only)."""
    try:
        course = await course_service.update_course(course_id, data, actor)
        return CourseResponse.from_entity(course)
    except DomainError as e:
        raise handle_course_error(e) from e


@router.post(
    "/{course_id}/modules",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add module",
)
async def add_module(
    course_id: UUID,
    data: CreateModuleRequest,
    course_service: CourseServiceDep,
    actor: TeacherActor,
) -> CourseResponse:
    try:
        course = await course_service.add_module(course_id, data, actor)
        return CourseResponse.from_entity(course)
    except DomainError as e:
        raise handle_course_error(e) from e


@router.post(
    "/{course_id}/materials",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add material",
)
async def add_material(
    course_id: UUID,
    data: CreateMaterialRequest,
    course_service: CourseServiceDep,
    actor: TeacherActor,
) -> CourseResponse:
    """Add a material; a missing module is created on the fly."""
    try:
        course = await course_service.add_material(course_id, data, actor)
        return CourseResponse.from_entity(course)
    except DomainError as e:
        raise handle_course_error(e) from e
