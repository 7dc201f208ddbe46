"""Course completion tracking over an in-memory course aggregate.

The tracker mutates a student's ProgressRecord inside the course passed
in; persisting the course afterwards is the caller's job.

Completion formula:
    total     = required materials (all modules) + quizzes in the course
    completed = required materials listed in completed_lessons
                + course quizzes whose recorded score meets passing_score
    percent   = round_half_up(100 * completed / total), 0 when total == 0

completed_modules is tracked for module-level display only and does not
enter the formula, so a module and its lessons are not counted twice.
"""

from datetime import datetime
from uuid import UUID

import structlog

from coursetrack.courses.models import Course
from coursetrack.utils.dates import utcnow
from coursetrack.utils.percent import percentage

from .exceptions import NotEnrolledError
from .models import ProgressRecord, QuizScore


logger = structlog.get_logger(__name__)


class ProgressTracker:
    """Maintains completion state for enrollments of a course."""

    def record_lesson_completion(
        self,
        course: Course,
        student_id: UUID,
        material_id: str,
        completed: bool,
    ) -> ProgressRecord:
        """Mark a material done or not done, then recompute.

        Adding a present id or removing an absent one is a no-op.

        Raises:
            NotEnrolledError: If the student has no approved enrollment
        """
        progress = self._approved_progress(course, student_id)

        if completed and material_id not in progress.completed_lessons:
            progress.completed_lessons.append(material_id)
        elif not completed and material_id in progress.completed_lessons:
            progress.completed_lessons.remove(material_id)

        progress.touch()
        self.recompute_completion(course, student_id)

        logger.debug(
            "lesson_completion_recorded",
            course_id=str(course.course_id),
            student_id=str(student_id),
            material_id=material_id,
            completed=completed,
        )
        return progress

    def record_module_completion(
        self,
        course: Course,
        student_id: UUID,
        module_order: int,
        completed: bool,
    ) -> ProgressRecord:
        """Mark a module done or not done, then recompute.

        Raises:
            NotEnrolledError: If the student has no approved enrollment
        """
        progress = self._approved_progress(course, student_id)

        if completed and module_order not in progress.completed_modules:
            progress.completed_modules.append(module_order)
        elif not completed and module_order in progress.completed_modules:
            progress.completed_modules.remove(module_order)

        progress.touch()
        self.recompute_completion(course, student_id)
        return progress

    def record_quiz_score(
        self,
        course: Course,
        student_id: UUID,
        quiz_id: UUID,
        score: float,
        max_score: float,
        completed_at: datetime | None = None,
    ) -> int:
        """Store a quiz score (replacing any earlier one) and recompute.

        Returns:
            The new completion percentage

        Raises:
            NotEnrolledError: If the student has no approved enrollment
        """
        progress = self._approved_progress(course, student_id)
        completed_at = completed_at or utcnow()

        progress.quiz_scores[quiz_id] = QuizScore(
            quiz_id=quiz_id,
            score=score,
            max_score=max_score,
            completed_at=completed_at,
        )
        progress.touch(completed_at)
        return self.recompute_completion(course, student_id)

    def recompute_completion(self, course: Course, student_id: UUID) -> int:
        """Recalculate and store the student's completion percentage.

        Raises:
            NotEnrolledError: If the student has no approved enrollment
        """
        progress = self._approved_progress(course, student_id)
        completed_lessons = set(progress.completed_lessons)

        required_ids = course.required_material_ids()
        total = len(required_ids) + len(course.quizzes)
        done = sum(1 for material_id in required_ids if material_id in completed_lessons)

        for quiz in course.quizzes:
            score = progress.quiz_scores.get(quiz.quiz_id)
            if score is not None and score.meets(quiz.passing_score):
                done += 1

        progress.completion_percentage = percentage(done, total)
        return progress.completion_percentage

    def _approved_progress(self, course: Course, student_id: UUID) -> ProgressRecord:
        enrollment = course.get_approved_enrollment(student_id)
        if enrollment is None:
            raise NotEnrolledError
        return enrollment.progress
