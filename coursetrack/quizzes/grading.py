"""Quiz attempt lifecycle and auto-grading.

The engine works on loaded aggregates: it appends or completes attempts
on the quiz and, when an attempt passes, records the score on the
student's course progress. The caller persists both aggregates.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog

from coursetrack.courses.models import Course
from coursetrack.progress.exceptions import NotEnrolledError
from coursetrack.progress.tracker import ProgressTracker
from coursetrack.utils.dates import utcnow

from .exceptions import (
    AlreadyCompletedError,
    InvalidAnswerSetError,
    NoActiveAttemptError,
    QuizInactiveError,
)
from .models import GradedAnswer, Quiz, QuizAttempt


logger = structlog.get_logger(__name__)


@dataclass
class GradingResult:
    """Outcome of a submitted attempt.

    ``completion_percentage`` is the student's new course completion when
    the attempt passed, otherwise None.
    """

    attempt: QuizAttempt
    score: float
    max_score: float
    percentage: int
    passed: bool
    completion_percentage: int | None = None


class QuizGradingEngine:
    """Starts, grades and records quiz attempts."""

    def __init__(self, tracker: ProgressTracker | None = None):
        self.tracker = tracker or ProgressTracker()

    def start_attempt(self, quiz: Quiz, course: Course, student_id: UUID) -> QuizAttempt:
        """Start an attempt, or resume the student's in-progress one.

        Raises:
            NotEnrolledError: If the student has no approved enrollment
            QuizInactiveError: If the quiz does not accept attempts
        """
        if course.get_approved_enrollment(student_id) is None:
            raise NotEnrolledError

        if not quiz.is_active:
            raise QuizInactiveError

        existing = quiz.active_attempt_for(student_id)
        if existing is not None:
            return existing

        attempt = QuizAttempt(
            student_id=student_id,
            max_score=quiz.total_points,
            started_at=utcnow(),
        )
        quiz.attempts.append(attempt)

        logger.info(
            "quiz_attempt_started",
            quiz_id=str(quiz.quiz_id),
            student_id=str(student_id),
            attempt_id=str(attempt.attempt_id),
        )
        return attempt

    def submit_attempt(
        self,
        quiz: Quiz,
        course: Course,
        student_id: UUID,
        answers: Sequence[Any],
    ) -> GradingResult:
        """Grade the student's in-progress attempt.

        ``answers[i]`` answers ``quiz.questions[i]``; None skips a
        question. Unanswered questions still count toward max_score.

        Raises:
            NotEnrolledError: If the student lost their approved enrollment
            InvalidAnswerSetError: If answers do not fit the questions
            NoActiveAttemptError: If the student never started an attempt
            AlreadyCompletedError: If the student's attempt was already graded
        """
        if course.get_approved_enrollment(student_id) is None:
            raise NotEnrolledError

        self._validate_answers(quiz, answers)

        attempt = quiz.active_attempt_for(student_id)
        if attempt is None:
            if quiz.has_completed_attempt(student_id):
                raise AlreadyCompletedError
            raise NoActiveAttemptError

        graded: list[GradedAnswer] = []
        total_score: float = 0
        for index, given in enumerate(answers):
            if given is None:
                continue
            question = quiz.questions[index]
            is_correct = question.is_correct(given)
            points = question.points if is_correct else 0
            total_score += points
            graded.append(
                GradedAnswer(
                    question_index=index,
                    given_answer=given,
                    is_correct=is_correct,
                    points_earned=points,
                )
            )

        max_score = quiz.total_points
        attempt.complete(
            answers=graded,
            score=total_score,
            max_score=max_score,
            passing_score=quiz.passing_score,
            completed_at=utcnow(),
        )

        completion = None
        if attempt.passed:
            completion = self.tracker.record_quiz_score(
                course,
                student_id,
                quiz.quiz_id,
                score=total_score,
                max_score=max_score,
                completed_at=attempt.completed_at,
            )

        logger.info(
            "quiz_attempt_submitted",
            quiz_id=str(quiz.quiz_id),
            student_id=str(student_id),
            attempt_id=str(attempt.attempt_id),
            score=total_score,
            max_score=max_score,
            passed=attempt.passed,
        )

        return GradingResult(
            attempt=attempt,
            score=total_score,
            max_score=max_score,
            percentage=attempt.percentage,
            passed=attempt.passed,
            completion_percentage=completion,
        )

    def _validate_answers(self, quiz: Quiz, answers: Sequence[Any]) -> None:
        if isinstance(answers, str | bytes) or not isinstance(answers, Sequence):
            raise InvalidAnswerSetError("Answers must be a list")

        if len(answers) > len(quiz.questions):
            raise InvalidAnswerSetError(
                f"Got {len(answers)} answers for {len(quiz.questions)} questions"
            )

        for index, given in enumerate(answers):
            if given is None:
                continue
            if isinstance(given, bool) or not isinstance(given, int | str):
                raise InvalidAnswerSetError(f"Unsupported answer at index {index}")
