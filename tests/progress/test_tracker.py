"""Tests for ProgressTracker completion rules."""

from uuid import uuid4

import pytest

from coursetrack.courses.models import Course, CourseQuiz, Material, Module
from coursetrack.progress.exceptions import NotEnrolledError
from coursetrack.progress.models import EnrollmentStatus


@pytest.fixture
def student_id(student):
    return student.id


class TestRecomputeCompletion:
    """Completion percentage over required materials and quizzes."""

    def test_no_required_items_is_zero(self, tracker, instructor, student_id, enroll_student):
        """A course with nothing required reports 0, not 100."""
        course = Course(
            instructor_id=instructor.id,
            modules=[Module(1, materials=[Material("x", is_required=False)])],
        )
        enroll_student(course, student_id)

        assert tracker.recompute_completion(course, student_id) == 0

    def test_optional_materials_are_ignored(self, tracker, course, student_id, enroll_student):
        enroll_student(course, student_id)

        progress = tracker.record_lesson_completion(course, student_id, "opt", True)

        assert "opt" in progress.completed_lessons
        assert progress.completion_percentage == 0

    def test_lessons_count_across_modules(self, tracker, course, student_id, enroll_student):
        """Three required materials; one done is 33%."""
        enroll_student(course, student_id)

        progress = tracker.record_lesson_completion(course, student_id, "m3", True)

        assert progress.completion_percentage == 33

    def test_unknown_material_does_not_count(self, tracker, course, student_id, enroll_student):
        enroll_student(course, student_id)

        progress = tracker.record_lesson_completion(course, student_id, "ghost", True)

        assert progress.completion_percentage == 0

    def test_everything_done_is_exactly_100(self, tracker, course, student_id, enroll_student):
        """All required materials plus every passed quiz gives 100."""
        quiz_id = uuid4()
        course.quizzes.append(CourseQuiz(quiz_id, "Final", passing_score=50))
        enroll_student(course, student_id)

        for material_id in ("m1", "m2", "m3"):
            tracker.record_lesson_completion(course, student_id, material_id, True)
        result = tracker.record_quiz_score(course, student_id, quiz_id, 5, 10)

        assert result == 100

    def test_quiz_below_passing_does_not_count(self, tracker, course, student_id, enroll_student):
        quiz_id = uuid4()
        course.quizzes.append(CourseQuiz(quiz_id, passing_score=80))
        enroll_student(course, student_id)

        result = tracker.record_quiz_score(course, student_id, quiz_id, 7, 10)

        assert result == 0

    def test_modules_do_not_enter_the_formula(self, tracker, course, student_id, enroll_student):
        enroll_student(course, student_id)

        progress = tracker.record_module_completion(course, student_id, 1, True)

        assert progress.completed_modules == [1]
        assert progress.completion_percentage == 0

    def test_quiz_set_change_moves_the_denominator(
        self, tracker, course, student_id, enroll_student
    ):
        """Adding a quiz after lessons are done lowers completion."""
        enroll_student(course, student_id)
        for material_id in ("m1", "m2", "m3"):
            tracker.record_lesson_completion(course, student_id, material_id, True)

        course.quizzes.append(CourseQuiz(uuid4()))

        assert tracker.recompute_completion(course, student_id) == 75


class TestLessonToggles:
    """Membership follows the last toggle."""

    @pytest.mark.parametrize(
        "toggles",
        [
            [True],
            [False],
            [True, True],
            [True, False],
            [False, True],
            [True, False, True, False],
            [True, True, False, True],
        ],
    )
    def test_last_toggle_wins(self, tracker, course, student_id, enroll_student, toggles):
        enroll_student(course, student_id)

        for completed in toggles:
            progress = tracker.record_lesson_completion(course, student_id, "m1", completed)

        assert ("m1" in progress.completed_lessons) is toggles[-1]
        assert progress.completed_lessons.count("m1") <= 1

    def test_toggle_updates_last_accessed(self, tracker, course, student_id, enroll_student):
        enrollment = enroll_student(course, student_id)
        before = enrollment.progress.last_accessed_at

        tracker.record_lesson_completion(course, student_id, "m1", True)

        assert enrollment.progress.last_accessed_at >= before


class TestQuizScores:
    """Quiz score recording."""

    def test_later_score_replaces_earlier(self, tracker, course, student_id, enroll_student):
        quiz_id = uuid4()
        course.quizzes.append(CourseQuiz(quiz_id, passing_score=50))
        enrollment = enroll_student(course, student_id)

        tracker.record_quiz_score(course, student_id, quiz_id, 6, 10)
        tracker.record_quiz_score(course, student_id, quiz_id, 9, 10)

        assert len(enrollment.progress.quiz_scores) == 1
        assert enrollment.progress.quiz_scores[quiz_id].score == 9


class TestEnrollmentRequired:
    """Only approved students have progress."""

    @pytest.mark.parametrize(
        "status", [EnrollmentStatus.PENDING.value, EnrollmentStatus.REJECTED.value]
    )
    def test_unapproved_enrollment_rejected(
        self, tracker, course, student_id, enroll_student, status
    ):
        enroll_student(course, student_id, status=status)

        with pytest.raises(NotEnrolledError):
            tracker.record_lesson_completion(course, student_id, "m1", True)

    def test_unknown_student_rejected(self, tracker, course):
        with pytest.raises(NotEnrolledError) as exc_info:
            tracker.recompute_completion(course, uuid4())

        assert exc_info.value.code == "not_enrolled"
