"""Tests for the quiz grading engine.

Covers:
- start_attempt (resume, inactive quiz, enrollment)
- submit_attempt (scoring, pass threshold, skipped answers)
- progress updates on a passing attempt
- rejected submissions
"""

from uuid import uuid4

import pytest

from coursetrack.progress.exceptions import NotEnrolledError
from coursetrack.progress.models import EnrollmentStatus
from coursetrack.quizzes.exceptions import (
    AlreadyCompletedError,
    InvalidAnswerSetError,
    NoActiveAttemptError,
    QuizInactiveError,
)
from coursetrack.quizzes.models import AttemptState, Question, QuestionType, Quiz


@pytest.fixture
def student_id(student, course, enroll_student):
    enroll_student(course, student.id)
    return student.id


@pytest.fixture
def quiz(course, quiz_factory):
    """Two 5-point questions; keys [0, 1]; registered on the course."""
    quiz = quiz_factory(course.course_id, passing_score=70, points=(5, 5))
    course.attach_quiz(quiz.quiz_id, quiz.title, quiz.passing_score)
    return quiz


class TestStartAttempt:
    """Starting and resuming attempts."""

    def test_creates_in_progress_attempt(self, engine, quiz, course, student_id):
        attempt = engine.start_attempt(quiz, course, student_id)

        assert attempt.state == AttemptState.IN_PROGRESS.value
        assert attempt.max_score == 10
        assert quiz.attempts == [attempt]

    def test_second_start_resumes_same_attempt(self, engine, quiz, course, student_id):
        """A second start while in progress returns the same attempt."""
        first = engine.start_attempt(quiz, course, student_id)
        second = engine.start_attempt(quiz, course, student_id)

        assert second is first
        assert second.started_at == first.started_at
        assert len(quiz.attempts) == 1

    def test_inactive_quiz_rejected(self, engine, quiz, course, student_id):
        quiz.is_active = False

        with pytest.raises(QuizInactiveError):
            engine.start_attempt(quiz, course, student_id)

    def test_pending_student_rejected(self, engine, quiz, course, student, enroll_student):
        enroll_student(course, student.id, status=EnrollmentStatus.PENDING.value)

        with pytest.raises(NotEnrolledError):
            engine.start_attempt(quiz, course, student.id)

    def test_new_attempt_after_completion(self, engine, quiz, course, student_id):
        first = engine.start_attempt(quiz, course, student_id)
        engine.submit_attempt(quiz, course, student_id, [0, 1])

        second = engine.start_attempt(quiz, course, student_id)

        assert second is not first
        assert len(quiz.attempts) == 2


class TestSubmitAttempt:
    """Scoring submitted answers."""

    def test_half_right_on_five_plus_five(self, engine, quiz, course, student_id):
        """[correct, wrong] on a 5+5 quiz scores 5 of 10, 50%."""
        engine.start_attempt(quiz, course, student_id)

        result = engine.submit_attempt(quiz, course, student_id, [0, 0])

        assert result.score == 5
        assert result.max_score == 10
        assert result.percentage == 50
        assert result.passed is False
        assert result.completion_percentage is None

    def test_answer_key_scenario_passes_at_threshold(
        self, engine, course, student_id
    ):
        """Keys [1, 0], answers [1, 1], passing 50: score 1 of 2 passes."""
        quiz = Quiz(
            course_id=course.course_id,
            title="Scenario",
            passing_score=50,
            questions=[
                Question("q0", correct_answer=1, options=["a", "b"]),
                Question("q1", correct_answer=0, options=["a", "b"]),
            ],
        )
        engine.start_attempt(quiz, course, student_id)

        result = engine.submit_attempt(quiz, course, student_id, [1, 1])

        assert result.score == 1
        assert result.max_score == 2
        assert result.percentage == 50
        assert result.passed is True

    def test_graded_answers_recorded(self, engine, quiz, course, student_id):
        engine.start_attempt(quiz, course, student_id)

        result = engine.submit_attempt(quiz, course, student_id, [0, 2])

        answers = result.attempt.answers
        assert [a.question_index for a in answers] == [0, 1]
        assert [a.is_correct for a in answers] == [True, False]
        assert [a.points_earned for a in answers] == [5, 0]
        assert result.attempt.state == AttemptState.COMPLETED.value
        assert result.attempt.completed_at is not None
        assert result.attempt.time_spent >= 0

    def test_skipped_and_missing_answers_score_zero(self, engine, quiz, course, student_id):
        """None skips a question; a short list leaves the rest unanswered."""
        engine.start_attempt(quiz, course, student_id)

        result = engine.submit_attempt(quiz, course, student_id, [None])

        assert result.score == 0
        assert result.max_score == 10
        assert result.attempt.answers == []

    def test_short_answer_exact_match(self, engine, course, student_id):
        quiz = Quiz(
            course_id=course.course_id,
            title="Words",
            passing_score=100,
            questions=[
                Question(
                    "Symbol for sodium?",
                    correct_answer="Na",
                    question_type=QuestionType.SHORT_ANSWER.value,
                ),
            ],
        )
        engine.start_attempt(quiz, course, student_id)

        result = engine.submit_attempt(quiz, course, student_id, ["na"])

        assert result.score == 0
        assert result.passed is False

    def test_string_digit_does_not_match_index(self, engine, quiz, course, student_id):
        """The string "0" is not the option index 0."""
        engine.start_attempt(quiz, course, student_id)

        result = engine.submit_attempt(quiz, course, student_id, ["0", 1])

        assert result.score == 5

    def test_passing_attempt_updates_progress(self, engine, quiz, course, student_id):
        """Passing records the score and returns the new completion."""
        engine.start_attempt(quiz, course, student_id)

        result = engine.submit_attempt(quiz, course, student_id, [0, 1])

        assert result.passed is True
        # 3 required materials + 1 quiz; only the quiz is done
        assert result.completion_percentage == 25
        progress = course.students[student_id].progress
        assert progress.quiz_scores[quiz.quiz_id].score == 10
        assert progress.completion_percentage == 25

    def test_failing_attempt_leaves_progress(self, engine, quiz, course, student_id):
        engine.start_attempt(quiz, course, student_id)

        engine.submit_attempt(quiz, course, student_id, [1, 0])

        assert course.students[student_id].progress.quiz_scores == {}


class TestRejectedSubmissions:
    """Submissions that must not change any state."""

    def test_no_active_attempt(self, engine, quiz, course, student_id):
        with pytest.raises(NoActiveAttemptError):
            engine.submit_attempt(quiz, course, student_id, [0, 1])

    def test_resubmit_after_completion(self, engine, quiz, course, student_id):
        engine.start_attempt(quiz, course, student_id)
        first = engine.submit_attempt(quiz, course, student_id, [0, 0])

        with pytest.raises(AlreadyCompletedError):
            engine.submit_attempt(quiz, course, student_id, [0, 1])

        assert first.attempt.score == 5

    def test_too_many_answers(self, engine, quiz, course, student_id):
        engine.start_attempt(quiz, course, student_id)

        with pytest.raises(InvalidAnswerSetError):
            engine.submit_attempt(quiz, course, student_id, [0, 1, 1])

        assert quiz.active_attempt_for(student_id) is not None

    @pytest.mark.parametrize("bad", [True, 1.0, [0], {"a": 1}])
    def test_unsupported_answer_values(self, engine, quiz, course, student_id, bad):
        engine.start_attempt(quiz, course, student_id)

        with pytest.raises(InvalidAnswerSetError):
            engine.submit_attempt(quiz, course, student_id, [bad])

    def test_answers_must_be_a_list(self, engine, quiz, course, student_id):
        engine.start_attempt(quiz, course, student_id)

        with pytest.raises(InvalidAnswerSetError):
            engine.submit_attempt(quiz, course, student_id, "01")

    def test_revoked_enrollment_keeps_attempt_open(self, engine, quiz, course, student_id):
        engine.start_attempt(quiz, course, student_id)
        course.students[student_id].status = EnrollmentStatus.REJECTED.value

        with pytest.raises(NotEnrolledError):
            engine.submit_attempt(quiz, course, student_id, [0, 1])

        assert quiz.active_attempt_for(student_id) is not None

    def test_other_students_attempt_is_not_used(self, engine, quiz, course, student_id, enroll_student):
        engine.start_attempt(quiz, course, student_id)
        other = uuid4()
        enroll_student(course, other)

        with pytest.raises(NoActiveAttemptError):
            engine.submit_attempt(quiz, course, other, [0, 1])
