"""Enrollment and progress service layer.

Business logic for:
- Course enrollment and instructor approval
- Lesson and module completion updates
- Progress queries for students and instructors
- Course-level progress statistics

Each operation loads the course aggregate, mutates it in memory and
writes it back whole.
"""

from uuid import UUID

import structlog

from coursetrack.auth.schemas import Actor
from coursetrack.courses.models import Course
from coursetrack.courses.repository import CourseRepository

from .exceptions import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    CourseNotPublishedError,
    NotAuthorizedError,
    NotEnrolledError,
)
from .models import Enrollment, EnrollmentStatus, ProgressRecord
from .schemas import CourseProgressStatsResponse
from .tracker import ProgressTracker


logger = structlog.get_logger(__name__)


class ProgressService:
    """Service for enrollment and course progress."""

    def __init__(self, courses: CourseRepository, tracker: ProgressTracker | None = None):
        self.courses = courses
        self.tracker = tracker or ProgressTracker()

    async def get_course(self, course_id: UUID) -> Course:
        course = await self.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError
        return course

    # ==========================================================================
    # Enrollment Operations
    # ==========================================================================

    async def enroll(self, course_id: UUID, actor: Actor) -> Enrollment:
        """Enroll the acting student.

        Courses requiring approval start the enrollment as pending.

        Raises:
            CourseNotFoundError: If the course does not exist
            CourseNotPublishedError: If the course is not published
            AlreadyEnrolledError: If the student already has an enrollment
        """
        course = await self.get_course(course_id)
        if not course.is_published:
            raise CourseNotPublishedError
        if course.get_enrollment(actor.id) is not None:
            raise AlreadyEnrolledError

        status = (
            EnrollmentStatus.PENDING
            if course.enrollment_requires_approval
            else EnrollmentStatus.APPROVED
        )
        enrollment = Enrollment(student_id=actor.id, status=status.value)
        course.students[actor.id] = enrollment

        if enrollment.is_approved:
            self.tracker.recompute_completion(course, actor.id)

        await self.courses.save(course)

        logger.info(
            "student_enrolled",
            course_id=str(course_id),
            student_id=str(actor.id),
            status=enrollment.status,
        )
        return enrollment

    async def set_enrollment_status(
        self,
        course_id: UUID,
        student_id: UUID,
        status: EnrollmentStatus,
        actor: Actor,
    ) -> Enrollment:
        """Approve or reject a student's enrollment.

        Raises:
            NotAuthorizedError: If actor is not the instructor or an admin
            NotEnrolledError: If the student has no enrollment at all
        """
        course = await self.get_course(course_id)
        self._require_instructor(course, actor)

        enrollment = course.get_enrollment(student_id)
        if enrollment is None:
            raise NotEnrolledError("Student has not requested enrollment")

        enrollment.status = status.value
        if enrollment.is_approved:
            self.tracker.recompute_completion(course, student_id)

        await self.courses.save(course)

        logger.info(
            "enrollment_status_changed",
            course_id=str(course_id),
            student_id=str(student_id),
            status=status.value,
        )
        return enrollment

    # ==========================================================================
    # Progress Updates
    # ==========================================================================

    async def update_progress(
        self,
        course_id: UUID,
        actor: Actor,
        lesson_id: str | None = None,
        module_order: int | None = None,
        completed: bool = True,
    ) -> ProgressRecord:
        """Record lesson and/or module completion for the acting student.

        Raises:
            NotEnrolledError: If the student has no approved enrollment
        """
        course = await self.get_course(course_id)

        progress = None
        if lesson_id is not None:
            progress = self.tracker.record_lesson_completion(
                course, actor.id, lesson_id, completed
            )
        if module_order is not None:
            progress = self.tracker.record_module_completion(
                course, actor.id, module_order, completed
            )
        if progress is None:
            # Nothing to toggle; still refresh the derived field
            self.tracker.recompute_completion(course, actor.id)
            progress = course.students[actor.id].progress

        await self.courses.save(course)

        logger.info(
            "lesson_progress_updated",
            course_id=str(course_id),
            student_id=str(actor.id),
            lesson_id=lesson_id,
            module_order=module_order,
            completed=completed,
            completion_percentage=progress.completion_percentage,
        )
        return progress

    # ==========================================================================
    # Progress Queries
    # ==========================================================================

    async def get_progress(
        self,
        course_id: UUID,
        actor: Actor,
        student_id: UUID | None = None,
    ) -> Enrollment:
        """Get a student's enrollment and progress.

        Students read their own record. The instructor or an admin may
        pass ``student_id`` to read any approved student's record.

        Raises:
            NotAuthorizedError: If a student asks for someone else's record
            NotEnrolledError: If the target has no approved enrollment
        """
        course = await self.get_course(course_id)

        target = student_id or actor.id
        if target != actor.id:
            self._require_instructor(course, actor)

        enrollment = course.get_approved_enrollment(target)
        if enrollment is None:
            raise NotEnrolledError
        return enrollment

    async def list_students_progress(self, course_id: UUID, actor: Actor) -> list[Enrollment]:
        """List approved enrollments with progress (instructor view)."""
        course = await self.get_course(course_id)
        self._require_instructor(course, actor)
        return course.approved_enrollments()

    async def list_pending_enrollments(self, course_id: UUID, actor: Actor) -> list[Enrollment]:
        """Enrollments waiting for an instructor decision, oldest first."""
        course = await self.get_course(course_id)
        self._require_instructor(course, actor)
        return sorted(course.pending_enrollments(), key=lambda e: e.enrolled_at)

    async def get_course_progress_stats(
        self, course_id: UUID, actor: Actor
    ) -> CourseProgressStatsResponse:
        """Enrollment counts and average completion for a course."""
        course = await self.get_course(course_id)
        self._require_instructor(course, actor)

        return CourseProgressStatsResponse(
            course_id=course.course_id,
            enrolled_students=len(course.approved_enrollments()),
            pending_enrollments=len(course.pending_enrollments()),
            average_progress=course.average_progress(),
        )

    def _require_instructor(self, course: Course, actor: Actor) -> None:
        if not (actor.is_admin or course.is_instructor(actor.id)):
            raise NotAuthorizedError
