"""Course structure service layer.

Business logic for:
- Course creation and settings updates
- Module and material authoring
- Course reads with visibility rules
- Instructor course listing

Adding required materials changes every approved student's denominator,
so completion is recomputed before the aggregate is written back.
"""

from uuid import UUID

import structlog

from coursetrack.auth.schemas import Actor
from coursetrack.progress.exceptions import CourseNotFoundError, NotAuthorizedError
from coursetrack.progress.tracker import ProgressTracker

from .exceptions import MaterialExistsError, ModuleExistsError
from .models import Course, Material, Module
from .repository import CourseRepository
from .schemas import (
    CreateCourseRequest,
    CreateMaterialRequest,
    CreateModuleRequest,
    UpdateCourseRequest,
)


logger = structlog.get_logger(__name__)


class CourseService:
    """Service for course structure."""

    def __init__(self, courses: CourseRepository, tracker: ProgressTracker | None = None):
        self.courses = courses
        self.tracker = tracker or ProgressTracker()

    async def _get(self, course_id: UUID) -> Course:
        course = await self.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError
        return course

    def _require_instructor(self, course: Course, actor: Actor) -> None:
        if not (actor.is_admin or course.is_instructor(actor.id)):
            raise NotAuthorizedError("Not authorized to modify this course")

    # ==========================================================================
    # Course Operations
    # ==========================================================================

    async def create_course(self, data: CreateCourseRequest, actor: Actor) -> Course:
        """Create a course owned by the acting instructor."""
        course = Course(
            instructor_id=actor.id,
            title=data.title,
            status=data.status.value,
            enrollment_requires_approval=data.enrollment_requires_approval,
        )
        await self.courses.save(course)

        logger.info(
            "course_created",
            course_id=str(course.course_id),
            instructor_id=str(actor.id),
        )
        return course

    async def get_course(self, course_id: UUID, actor: Actor) -> Course:
        """Get a course.

        Unpublished courses are visible only to their instructor and admins.

        Raises:
            CourseNotFoundError: If the course does not exist
            NotAuthorizedError: If the course is unpublished and actor is not staff
        """
        course = await self._get(course_id)
        if not course.is_published and not (
            actor.is_admin or course.is_instructor(actor.id)
        ):
            raise NotAuthorizedError("Not authorized to access this course")
        return course

    async def update_course(
        self, course_id: UUID, data: UpdateCourseRequest, actor: Actor
    ) -> Course:
        """Update title, status or approval policy."""
        course = await self._get(course_id)
        self._require_instructor(course, actor)

        changes = data.model_dump(exclude_unset=True)
        if data.title is not None:
            course.title = data.title
        if data.status is not None:
            course.status = data.status.value
        if data.enrollment_requires_approval is not None:
            course.enrollment_requires_approval = data.enrollment_requires_approval

        await self.courses.save(course)

        logger.info("course_updated", course_id=str(course_id), fields=sorted(changes))
        return course

    async def list_instructor_courses(self, actor: Actor) -> list[Course]:
        """Courses owned by the acting instructor, newest first."""
        courses = await self.courses.list_by_instructor(actor.id)
        return sorted(courses, key=lambda c: c.created_at, reverse=True)

    # ==========================================================================
    # Structure Operations
    # ==========================================================================

    async def add_module(
        self, course_id: UUID, data: CreateModuleRequest, actor: Actor
    ) -> Course:
        """Add an empty module.

        Raises:
            ModuleExistsError: If the order is already used
        """
        course = await self._get(course_id)
        self._require_instructor(course, actor)

        if course.get_module(data.order) is not None:
            raise ModuleExistsError
        course.add_module(Module(order=data.order, title=data.title))

        await self.courses.save(course)

        logger.info("module_added", course_id=str(course_id), order=data.order)
        return course

    async def add_material(
        self, course_id: UUID, data: CreateMaterialRequest, actor: Actor
    ) -> Course:
        """Add a material, creating its module when the order is new.

        Raises:
            MaterialExistsError: If the material id is already used
        """
        course = await self._get(course_id)
        self._require_instructor(course, actor)

        if data.material_id and course.find_material(data.material_id) is not None:
            raise MaterialExistsError

        module = course.get_module(data.module_order)
        if module is None:
            module = Module(order=data.module_order, title=data.module_title)
            course.add_module(module)

        material = Material(
            material_id=data.material_id,
            title=data.title,
            file_type=data.file_type.value,
            is_required=data.is_required,
        )
        module.materials.append(material)

        if material.is_required:
            for enrollment in course.approved_enrollments():
                self.tracker.recompute_completion(course, enrollment.student_id)

        await self.courses.save(course)

        logger.info(
            "material_added",
            course_id=str(course_id),
            module_order=module.order,
            material_id=material.material_id,
            is_required=material.is_required,
        )
        return course
