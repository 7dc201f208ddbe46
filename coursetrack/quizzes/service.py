"""Quiz service layer.

Business logic for:
- Quiz authoring (locked once students attempt it)
- Attempt start and submission through the grading engine
- Answer-key visibility per viewer
- Instructor results and student attempt history
"""

from uuid import UUID

import structlog

from coursetrack.auth.schemas import Actor
from coursetrack.config.settings import Settings, get_settings
from coursetrack.courses.models import Course
from coursetrack.courses.repository import CourseRepository
from coursetrack.progress.exceptions import CourseNotFoundError, NotAuthorizedError

from .exceptions import QuizLockedError, QuizNotFoundError
from .grading import GradingResult, QuizGradingEngine
from .models import Quiz, QuizAttempt
from .repository import QuizRepository
from .schemas import (
    QuizCreateRequest,
    QuizResponse,
    QuizResultsResponse,
    QuizStudentView,
    QuizUpdateRequest,
    StudentAttemptSummary,
)
from .statistics import compute_quiz_statistics


logger = structlog.get_logger(__name__)


class QuizService:
    """Service for quizzes and attempts."""

    def __init__(
        self,
        quizzes: QuizRepository,
        courses: CourseRepository,
        engine: QuizGradingEngine | None = None,
        settings: Settings | None = None,
    ):
        self.quizzes = quizzes
        self.courses = courses
        self.engine = engine or QuizGradingEngine()
        self.settings = settings or get_settings()

    # ==========================================================================
    # Loading helpers
    # ==========================================================================

    async def _get_quiz(self, quiz_id: UUID) -> Quiz:
        quiz = await self.quizzes.get(quiz_id)
        if quiz is None:
            raise QuizNotFoundError
        return quiz

    async def _get_course(self, course_id: UUID) -> Course:
        course = await self.courses.get(course_id)
        if course is None:
            raise CourseNotFoundError("Associated course not found")
        return course

    def _require_instructor(self, course: Course, actor: Actor) -> None:
        if not (actor.is_admin or course.is_instructor(actor.id)):
            raise NotAuthorizedError

    # ==========================================================================
    # Authoring
    # ==========================================================================

    async def create_quiz(
        self, course_id: UUID, data: QuizCreateRequest, actor: Actor
    ) -> Quiz:
        """Create a quiz and register it as a required course item."""
        course = await self._get_course(course_id)
        self._require_instructor(course, actor)

        quiz = Quiz(
            course_id=course.course_id,
            title=data.title,
            description=data.description,
            module_index=data.module_index,
            time_limit=data.time_limit or self.settings.quiz_default_time_limit_minutes,
            passing_score=(
                data.passing_score
                if data.passing_score is not None
                else self.settings.quiz_default_passing_score
            ),
            is_active=data.is_active,
            questions=[q.to_entity() for q in data.questions],
        )
        course.attach_quiz(quiz.quiz_id, quiz.title, quiz.passing_score)
        self._recompute_all(course)

        await self.quizzes.save(quiz)
        await self.courses.save(course)

        logger.info(
            "quiz_created",
            quiz_id=str(quiz.quiz_id),
            course_id=str(course.course_id),
            questions=len(quiz.questions),
        )
        return quiz

    async def update_quiz(self, quiz_id: UUID, data: QuizUpdateRequest, actor: Actor) -> Quiz:
        """Update a quiz that nobody has attempted yet.

        Raises:
            QuizLockedError: If any attempt exists
        """
        quiz = await self._get_quiz(quiz_id)
        course = await self._get_course(quiz.course_id)
        self._require_instructor(course, actor)

        if quiz.attempts:
            raise QuizLockedError("Cannot update quiz after students have attempted it")

        changes = data.model_dump(exclude_unset=True, exclude={"questions"})
        for name, value in changes.items():
            if value is not None:
                setattr(quiz, name, value)
        if data.questions is not None:
            quiz.questions = [q.to_entity() for q in data.questions]

        course.attach_quiz(quiz.quiz_id, quiz.title, quiz.passing_score)
        self._recompute_all(course)

        await self.quizzes.save(quiz)
        await self.courses.save(course)

        logger.info("quiz_updated", quiz_id=str(quiz_id), fields=sorted(changes))
        return quiz

    async def delete_quiz(self, quiz_id: UUID, actor: Actor) -> None:
        """Delete a quiz that nobody has attempted yet.

        Raises:
            QuizLockedError: If any attempt exists
        """
        quiz = await self._get_quiz(quiz_id)
        course = await self._get_course(quiz.course_id)
        self._require_instructor(course, actor)

        if quiz.attempts:
            raise QuizLockedError("Cannot delete quiz after students have attempted it")

        course.detach_quiz(quiz.quiz_id)
        self._recompute_all(course)

        await self.quizzes.delete(quiz)
        await self.courses.save(course)

        logger.info("quiz_deleted", quiz_id=str(quiz_id))

    def _recompute_all(self, course: Course) -> None:
        # Quiz set changed: every approved student's denominator moved
        for enrollment in course.approved_enrollments():
            self.engine.tracker.recompute_completion(course, enrollment.student_id)

    # ==========================================================================
    # Viewing
    # ==========================================================================

    async def get_quiz(self, quiz_id: UUID, actor: Actor) -> QuizResponse | QuizStudentView:
        """Return the quiz, hiding the answer key when appropriate.

        Raises:
            NotAuthorizedError: If actor neither teaches nor is enrolled
        """
        quiz = await self._get_quiz(quiz_id)
        course = await self._get_course(quiz.course_id)

        if actor.is_admin or course.is_instructor(actor.id):
            return QuizResponse.from_entity(quiz)

        if course.get_approved_enrollment(actor.id) is None:
            raise NotAuthorizedError("Not authorized to access this quiz")

        if quiz.reveals_answers_to(actor.id):
            return QuizResponse.from_entity(quiz)
        return QuizStudentView.from_entity(quiz)

    async def list_course_quizzes(
        self, course_id: UUID, actor: Actor
    ) -> list[QuizResponse | QuizStudentView]:
        course = await self._get_course(course_id)
        is_staff = actor.is_admin or course.is_instructor(actor.id)
        if not is_staff and course.get_approved_enrollment(actor.id) is None:
            raise NotAuthorizedError("Not authorized to access quizzes for this course")

        quizzes = await self.quizzes.list_by_course(course_id)
        return [
            QuizResponse.from_entity(q)
            if is_staff or q.reveals_answers_to(actor.id)
            else QuizStudentView.from_entity(q)
            for q in quizzes
        ]

    # ==========================================================================
    # Attempts
    # ==========================================================================

    async def start_attempt(
        self, quiz_id: UUID, actor: Actor
    ) -> tuple[Quiz, QuizAttempt, bool]:
        """Start or resume the acting student's attempt.

        Returns:
            (quiz, attempt, resumed)
        """
        quiz = await self._get_quiz(quiz_id)
        course = await self._get_course(quiz.course_id)

        resumed = quiz.active_attempt_for(actor.id) is not None
        attempt = self.engine.start_attempt(quiz, course, actor.id)

        if not resumed:
            await self.quizzes.save(quiz)
        return quiz, attempt, resumed

    async def submit_attempt(
        self, quiz_id: UUID, actor: Actor, answers: list[int | str | None]
    ) -> GradingResult:
        """Grade the acting student's attempt and persist the outcome."""
        quiz = await self._get_quiz(quiz_id)
        course = await self._get_course(quiz.course_id)

        result = self.engine.submit_attempt(quiz, course, actor.id, answers)

        await self.quizzes.save(quiz)
        if result.passed:
            await self.courses.save(course)
        return result

    async def get_results(self, quiz_id: UUID, actor: Actor) -> QuizResultsResponse:
        """Statistics and completed attempts (instructor view)."""
        quiz = await self._get_quiz(quiz_id)
        course = await self._get_course(quiz.course_id)
        if not (actor.is_admin or course.is_instructor(actor.id)):
            raise NotAuthorizedError("Not authorized to view results for this quiz")

        return QuizResultsResponse.build(quiz, compute_quiz_statistics(quiz))

    async def list_student_attempts(self, actor: Actor) -> list[StudentAttemptSummary]:
        """Every attempt by the acting student, newest first."""
        quizzes = await self.quizzes.list_attempted_by(actor.id)

        items = [
            StudentAttemptSummary(
                quiz_id=quiz.quiz_id,
                quiz_title=quiz.title,
                course_id=quiz.course_id,
                attempt_id=attempt.attempt_id,
                state=attempt.state,
                score=attempt.score,
                max_score=attempt.max_score,
                percentage=attempt.percentage,
                passed=attempt.passed,
                started_at=attempt.started_at,
                completed_at=attempt.completed_at,
                time_spent=attempt.time_spent,
            )
            for quiz in quizzes
            for attempt in quiz.attempts_for(actor.id)
        ]
        items.sort(key=lambda item: item.started_at, reverse=True)
        return items
