"""Shared fixtures: in-memory repositories, sample aggregates, HTTP client."""

import os
import tempfile
from uuid import UUID, uuid4

import pytest


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="coursetrack-logs-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fastapi.testclient import TestClient  # noqa: E402

from coursetrack.auth import Actor, UserRole  # noqa: E402
from coursetrack.config import get_settings  # noqa: E402
from coursetrack.courses.models import (  # noqa: E402
    Course,
    CourseStatus,
    Material,
    Module,
)
from coursetrack.courses.service import CourseService  # noqa: E402
from coursetrack.progress.models import Enrollment, EnrollmentStatus  # noqa: E402
from coursetrack.progress.service import ProgressService  # noqa: E402
from coursetrack.progress.tracker import ProgressTracker  # noqa: E402
from coursetrack.quizzes.grading import QuizGradingEngine  # noqa: E402
from coursetrack.quizzes.models import Question, QuestionType, Quiz  # noqa: E402
from coursetrack.quizzes.service import QuizService  # noqa: E402


class InMemoryCourseRepository:
    """CourseRepository stand-in that stores documents, like Cassandra does."""

    def __init__(self):
        self.documents: dict[UUID, dict] = {}
        self.saves = 0

    async def get(self, course_id: UUID) -> Course | None:
        doc = self.documents.get(course_id)
        return Course.from_document(doc) if doc else None

    async def save(self, course: Course) -> None:
        self.documents[course.course_id] = course.to_document()
        self.saves += 1

    async def list_by_instructor(self, instructor_id: UUID) -> list[Course]:
        return [
            Course.from_document(doc)
            for doc in self.documents.values()
            if doc["instructor_id"] == str(instructor_id)
        ]


class InMemoryQuizRepository:
    """QuizRepository stand-in that stores documents."""

    def __init__(self):
        self.documents: dict[UUID, dict] = {}

    async def get(self, quiz_id: UUID) -> Quiz | None:
        doc = self.documents.get(quiz_id)
        return Quiz.from_document(doc) if doc else None

    async def save(self, quiz: Quiz) -> None:
        self.documents[quiz.quiz_id] = quiz.to_document()

    async def delete(self, quiz: Quiz) -> None:
        self.documents.pop(quiz.quiz_id, None)

    async def list_by_course(self, course_id: UUID) -> list[Quiz]:
        return [
            Quiz.from_document(doc)
            for doc in self.documents.values()
            if doc["course_id"] == str(course_id)
        ]

    async def list_attempted_by(self, student_id: UUID) -> list[Quiz]:
        return [
            Quiz.from_document(doc)
            for doc in self.documents.values()
            if any(a["student_id"] == str(student_id) for a in doc["attempts"])
        ]


# ==============================================================================
# Actors
# ==============================================================================


@pytest.fixture
def instructor() -> Actor:
    return Actor(id=uuid4(), role=UserRole.TEACHER)


@pytest.fixture
def student() -> Actor:
    return Actor(id=uuid4(), role=UserRole.STUDENT)


@pytest.fixture
def admin() -> Actor:
    return Actor(id=uuid4(), role=UserRole.ADMIN)


# ==============================================================================
# Aggregates
# ==============================================================================


def make_course(
    instructor_id: UUID,
    status: str = CourseStatus.PUBLISHED.value,
    requires_approval: bool = False,
) -> Course:
    """Published course with two modules: three required, one optional material."""
    return Course(
        instructor_id=instructor_id,
        title="Web Development 101",
        status=status,
        enrollment_requires_approval=requires_approval,
        modules=[
            Module(
                order=2,
                title="Layouts",
                materials=[Material("m3", "Grid basics")],
            ),
            Module(
                order=1,
                title="Basics",
                materials=[
                    Material("m1", "Intro"),
                    Material("m2", "HTML elements"),
                    Material("opt", "Further reading", is_required=False),
                ],
            ),
        ],
    )


def make_quiz(course_id: UUID, passing_score: float = 70, points=(5, 5)) -> Quiz:
    """Quiz with one multiple-choice question per entry in ``points``.

    The correct option for question i is ``i % 2``.
    """
    return Quiz(
        course_id=course_id,
        title="Checkpoint",
        passing_score=passing_score,
        questions=[
            Question(
                question_text=f"Question {i}",
                question_type=QuestionType.MULTIPLE_CHOICE.value,
                options=["a", "b", "c"],
                correct_answer=i % 2,
                points=p,
            )
            for i, p in enumerate(points)
        ],
    )


def enroll(course: Course, student_id: UUID, status: str = EnrollmentStatus.APPROVED.value):
    course.students[student_id] = Enrollment(student_id=student_id, status=status)
    return course.students[student_id]


@pytest.fixture
def course(instructor) -> Course:
    return make_course(instructor.id)


@pytest.fixture
def tracker() -> ProgressTracker:
    return ProgressTracker()


@pytest.fixture
def engine(tracker) -> QuizGradingEngine:
    return QuizGradingEngine(tracker=tracker)


# ==============================================================================
# Services
# ==============================================================================


@pytest.fixture
def course_repo() -> InMemoryCourseRepository:
    return InMemoryCourseRepository()


@pytest.fixture
def quiz_repo() -> InMemoryQuizRepository:
    return InMemoryQuizRepository()


@pytest.fixture
def course_service(course_repo, tracker) -> CourseService:
    return CourseService(courses=course_repo, tracker=tracker)


@pytest.fixture
def progress_service(course_repo, tracker) -> ProgressService:
    return ProgressService(courses=course_repo, tracker=tracker)


@pytest.fixture
def quiz_service(quiz_repo, course_repo, engine) -> QuizService:
    return QuizService(
        quizzes=quiz_repo,
        courses=course_repo,
        engine=engine,
        settings=get_settings(),
    )


# ==============================================================================
# HTTP
# ==============================================================================


@pytest.fixture
def client(course_service, progress_service, quiz_service):
    """Test client with services wired over in-memory repositories.

    The lifespan (and its Cassandra connection) is not entered.
    """
    from coursetrack.main import app

    app.state.course_service = course_service
    app.state.progress_service = progress_service
    app.state.quiz_service = quiz_service
    yield TestClient(app)
    app.state.course_service = None
    app.state.progress_service = None
    app.state.quiz_service = None


def headers_for(actor: Actor) -> dict[str, str]:
    return {"X-User-Id": str(actor.id), "X-User-Role": actor.role.value}


@pytest.fixture
def course_factory():
    return make_course


@pytest.fixture
def quiz_factory():
    return make_quiz


@pytest.fixture
def enroll_student():
    return enroll


@pytest.fixture
def auth_headers():
    return headers_for
