"""Tests for QuizService.

Covers:
- authoring (defaults, course reference, locking)
- answer-key visibility
- attempt flow with persistence
- results and attempt history
"""

from uuid import uuid4

import pytest
import pytest_asyncio

from coursetrack.auth import Actor, UserRole
from coursetrack.progress.exceptions import NotAuthorizedError, NotEnrolledError
from coursetrack.quizzes.exceptions import QuizLockedError, QuizNotFoundError
from coursetrack.quizzes.schemas import (
    QuestionCreate,
    QuizCreateRequest,
    QuizResponse,
    QuizStudentView,
    QuizUpdateRequest,
)


def _create_request(**overrides) -> QuizCreateRequest:
    data = {
        "title": "Checkpoint",
        "questions": [
            QuestionCreate(question_text="Q0", options=["a", "b"], correct_answer=0, points=5),
            QuestionCreate(question_text="Q1", options=["a", "b"], correct_answer=1, points=5),
        ],
    }
    data.update(overrides)
    return QuizCreateRequest(**data)


@pytest_asyncio.fixture
async def setup(course, course_repo, student, enroll_student):
    """Stored course with one approved student."""
    enroll_student(course, student.id)
    await course_repo.save(course)
    return course


@pytest_asyncio.fixture
async def quiz(quiz_service, setup, instructor):
    return await quiz_service.create_quiz(setup.course_id, _create_request(), instructor)


class TestAuthoring:
    """Creating, updating and deleting quizzes."""

    @pytest.mark.asyncio
    async def test_create_applies_settings_defaults(self, quiz):
        assert quiz.passing_score == 70
        assert quiz.time_limit == 30
        assert quiz.total_points == 10

    @pytest.mark.asyncio
    async def test_create_attaches_course_reference(self, quiz, course_repo, setup, student):
        saved = await course_repo.get(setup.course_id)

        assert saved.find_quiz(quiz.quiz_id) is not None
        # denominator grew from 3 to 4 items; nothing done yet
        assert saved.students[student.id].progress.completion_percentage == 0

    @pytest.mark.asyncio
    async def test_create_requires_instructor(self, quiz_service, setup, student):
        with pytest.raises(NotAuthorizedError):
            await quiz_service.create_quiz(setup.course_id, _create_request(), student)

    @pytest.mark.asyncio
    async def test_update_before_attempts(self, quiz_service, quiz, instructor, course_repo):
        updated = await quiz_service.update_quiz(
            quiz.quiz_id, QuizUpdateRequest(title="Renamed", passing_score=50), instructor
        )

        assert updated.title == "Renamed"
        assert updated.passing_score == 50
        course = await course_repo.get(quiz.course_id)
        assert course.find_quiz(quiz.quiz_id).passing_score == 50

    @pytest.mark.asyncio
    async def test_update_locked_after_attempt(self, quiz_service, quiz, instructor, student):
        await quiz_service.start_attempt(quiz.quiz_id, student)

        with pytest.raises(QuizLockedError):
            await quiz_service.update_quiz(
                quiz.quiz_id, QuizUpdateRequest(title="Late"), instructor
            )

    @pytest.mark.asyncio
    async def test_delete_detaches(self, quiz_service, quiz, instructor, course_repo):
        await quiz_service.delete_quiz(quiz.quiz_id, instructor)

        course = await course_repo.get(quiz.course_id)
        assert course.find_quiz(quiz.quiz_id) is None
        with pytest.raises(QuizNotFoundError):
            await quiz_service.get_quiz(quiz.quiz_id, instructor)

    @pytest.mark.asyncio
    async def test_delete_locked_after_attempt(self, quiz_service, quiz, instructor, student):
        await quiz_service.start_attempt(quiz.quiz_id, student)

        with pytest.raises(QuizLockedError):
            await quiz_service.delete_quiz(quiz.quiz_id, instructor)


class TestVisibility:
    """Who sees the answer key."""

    @pytest.mark.asyncio
    async def test_instructor_sees_answers(self, quiz_service, quiz, instructor):
        view = await quiz_service.get_quiz(quiz.quiz_id, instructor)

        assert isinstance(view, QuizResponse)
        assert [q.correct_answer for q in view.questions] == [0, 1]

    @pytest.mark.asyncio
    async def test_student_hidden_until_completed(self, quiz_service, quiz, student):
        before = await quiz_service.get_quiz(quiz.quiz_id, student)
        await quiz_service.start_attempt(quiz.quiz_id, student)
        await quiz_service.submit_attempt(quiz.quiz_id, student, [0, 0])
        after = await quiz_service.get_quiz(quiz.quiz_id, student)

        assert isinstance(before, QuizStudentView)
        assert "correct_answer" not in before.model_dump()["questions"][0]
        assert isinstance(after, QuizResponse)

    @pytest.mark.asyncio
    async def test_retake_hides_answers_again(self, quiz_service, quiz, student):
        """A new in-progress attempt hides the key even after an earlier completion."""
        await quiz_service.start_attempt(quiz.quiz_id, student)
        await quiz_service.submit_attempt(quiz.quiz_id, student, [1, 0])
        _, attempt, resumed = await quiz_service.start_attempt(quiz.quiz_id, student)

        view = await quiz_service.get_quiz(quiz.quiz_id, student)
        listed = await quiz_service.list_course_quizzes(quiz.course_id, student)

        assert resumed is False
        assert not attempt.is_completed
        assert isinstance(view, QuizStudentView)
        assert [type(q) for q in listed] == [QuizStudentView]

    @pytest.mark.asyncio
    async def test_outsider_refused(self, quiz_service, quiz):
        outsider = Actor(id=uuid4(), role=UserRole.STUDENT)

        with pytest.raises(NotAuthorizedError):
            await quiz_service.get_quiz(quiz.quiz_id, outsider)


class TestAttemptFlow:
    """Attempts through the service persist both aggregates."""

    @pytest.mark.asyncio
    async def test_start_then_resume(self, quiz_service, quiz, student):
        _, first, resumed_first = await quiz_service.start_attempt(quiz.quiz_id, student)
        _, second, resumed_second = await quiz_service.start_attempt(quiz.quiz_id, student)

        assert resumed_first is False
        assert resumed_second is True
        assert second.attempt_id == first.attempt_id
        assert second.started_at == first.started_at

    @pytest.mark.asyncio
    async def test_passing_submit_updates_course(
        self, quiz_service, quiz, student, course_repo
    ):
        await quiz_service.start_attempt(quiz.quiz_id, student)

        result = await quiz_service.submit_attempt(quiz.quiz_id, student, [0, 1])

        assert result.passed is True
        assert result.completion_percentage == 25
        course = await course_repo.get(quiz.course_id)
        assert course.students[student.id].progress.completion_percentage == 25

    @pytest.mark.asyncio
    async def test_failing_submit_leaves_course(
        self, quiz_service, quiz, student, course_repo
    ):
        saves_before = course_repo.saves
        await quiz_service.start_attempt(quiz.quiz_id, student)

        result = await quiz_service.submit_attempt(quiz.quiz_id, student, [1, 0])

        assert result.passed is False
        assert course_repo.saves == saves_before

    @pytest.mark.asyncio
    async def test_unenrolled_student_cannot_start(self, quiz_service, quiz):
        outsider = Actor(id=uuid4(), role=UserRole.STUDENT)

        with pytest.raises(NotEnrolledError):
            await quiz_service.start_attempt(quiz.quiz_id, outsider)


class TestResults:
    """Instructor results and student history."""

    @pytest.mark.asyncio
    async def test_results(self, quiz_service, quiz, student, instructor):
        await quiz_service.start_attempt(quiz.quiz_id, student)
        await quiz_service.submit_attempt(quiz.quiz_id, student, [0, 0])

        results = await quiz_service.get_results(quiz.quiz_id, instructor)

        assert results.quiz_info.total_questions == 2
        assert results.stats.total_attempts == 1
        assert results.stats.average_score == 50
        assert results.attempts[0].student_id == student.id

    @pytest.mark.asyncio
    async def test_results_refused_for_students(self, quiz_service, quiz, student):
        with pytest.raises(NotAuthorizedError):
            await quiz_service.get_results(quiz.quiz_id, student)

    @pytest.mark.asyncio
    async def test_student_history(self, quiz_service, quiz, student):
        await quiz_service.start_attempt(quiz.quiz_id, student)
        await quiz_service.submit_attempt(quiz.quiz_id, student, [0, 1])
        await quiz_service.start_attempt(quiz.quiz_id, student)

        items = await quiz_service.list_student_attempts(student)

        assert len(items) == 2
        assert items[0].state == "in_progress"
        assert items[1].passed is True
        assert items[0].quiz_title == "Checkpoint"
