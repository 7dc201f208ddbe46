"""Quiz aggregate, answer keys and attempts.

A quiz document embeds its questions and every attempt made against it.
Lookup tables give per-course listing and per-student attempt history
without loading every quiz.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from coursetrack.utils.dates import ensure_utc_aware, from_iso, to_iso, utcnow
from coursetrack.utils.percent import meets_threshold, percentage

from .exceptions import AlreadyCompletedError


class QuestionType(str, Enum):
    """Question type."""

    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    SHORT_ANSWER = "short-answer"


class AttemptState(str, Enum):
    """Attempt lifecycle state."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

QUIZZES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quizzes (
    quiz_id UUID PRIMARY KEY,
    course_id UUID,
    document TEXT,
    updated_at TIMESTAMP
)
"""

# Lookup: quizzes per course
QUIZZES_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quizzes_by_course (
    course_id UUID,
    quiz_id UUID,
    title TEXT,
    PRIMARY KEY (course_id, quiz_id)
)
"""

# Lookup: which quizzes a student has attempted
QUIZ_ATTEMPTS_BY_STUDENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.quiz_attempts_by_student (
    student_id UUID,
    quiz_id UUID,
    course_id UUID,
    PRIMARY KEY (student_id, quiz_id)
)
"""

QUIZZES_TABLES_CQL = [
    QUIZZES_TABLE_CQL,
    QUIZZES_BY_COURSE_TABLE_CQL,
    QUIZ_ATTEMPTS_BY_STUDENT_TABLE_CQL,
]


# ==============================================================================
# Answer Keys
# ==============================================================================


@dataclass(frozen=True)
class IndexAnswer:
    """Correct option index (multiple-choice, true-false)."""

    index: int

    def matches(self, given: Any) -> bool:
        # bool is an int subclass; True must not match index 1
        return type(given) is int and given == self.index

    @property
    def value(self) -> int:
        return self.index


@dataclass(frozen=True)
class TextAnswer:
    """Exact expected text (short-answer)."""

    text: str

    def matches(self, given: Any) -> bool:
        return isinstance(given, str) and given == self.text

    @property
    def value(self) -> str:
        return self.text


AnswerKey = IndexAnswer | TextAnswer


def answer_key_from_value(value: Any) -> AnswerKey:
    """Build the tagged answer key from a raw stored value."""
    if isinstance(value, IndexAnswer | TextAnswer):
        return value
    if type(value) is int:
        return IndexAnswer(value)
    if isinstance(value, str):
        return TextAnswer(value)
    msg = f"Unsupported correct answer: {value!r}"
    raise ValueError(msg)


# ==============================================================================
# Entity Classes
# ==============================================================================


class Question:
    """Quiz question with its answer key.

    Attributes:
        question_text: Prompt shown to students
        question_type: multiple-choice, true-false or short-answer
        options: Choices for index-answered questions
        correct_answer: Tagged answer key
        points: Points awarded for a correct answer
        explanation: Shown after completion
    """

    def __init__(
        self,
        question_text: str,
        correct_answer: AnswerKey | int | str,
        question_type: str = QuestionType.MULTIPLE_CHOICE.value,
        options: list[str] | None = None,
        points: float = 1,
        explanation: str | None = None,
    ):
        self.question_text = question_text
        self.question_type = question_type
        self.options = list(options or [])
        self.correct_answer = answer_key_from_value(correct_answer)
        self.points = points
        self.explanation = explanation

    def is_correct(self, given: Any) -> bool:
        return self.correct_answer.matches(given)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Question":
        return cls(
            question_text=doc.get("question_text", ""),
            question_type=doc.get("question_type")
            or QuestionType.MULTIPLE_CHOICE.value,
            options=doc.get("options", []),
            correct_answer=doc["correct_answer"],
            points=doc.get("points", 1),
            explanation=doc.get("explanation"),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "question_text": self.question_text,
            "question_type": self.question_type,
            "options": list(self.options),
            "correct_answer": self.correct_answer.value,
            "points": self.points,
            "explanation": self.explanation,
        }


class GradedAnswer:
    """One graded answer within an attempt."""

    def __init__(
        self,
        question_index: int,
        given_answer: int | str,
        is_correct: bool,
        points_earned: float,
    ):
        self.question_index = question_index
        self.given_answer = given_answer
        self.is_correct = is_correct
        self.points_earned = points_earned

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "GradedAnswer":
        return cls(
            question_index=int(doc["question_index"]),
            given_answer=doc.get("given_answer"),
            is_correct=bool(doc.get("is_correct", False)),
            points_earned=doc.get("points_earned", 0),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "question_index": self.question_index,
            "given_answer": self.given_answer,
            "is_correct": self.is_correct,
            "points_earned": self.points_earned,
        }


class QuizAttempt:
    """One student's pass at a quiz.

    Created in_progress; ``complete`` moves it to completed exactly once.

    Attributes:
        attempt_id: Attempt UUID
        student_id: Student UUID
        state: in_progress or completed
        score: Points earned (0 until completed)
        max_score: Total points of the quiz
        answers: Graded answers (empty until completed)
        started_at: Start timestamp
        completed_at: Submission timestamp, None while in progress
        time_spent: Seconds between start and submission
        passed: Derived on completion
    """

    def __init__(
        self,
        student_id: UUID,
        max_score: float,
        attempt_id: UUID | None = None,
        state: str = AttemptState.IN_PROGRESS.value,
        score: float = 0,
        answers: list[GradedAnswer] | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        time_spent: int = 0,
        passed: bool = False,
    ):
        self.attempt_id = attempt_id or uuid4()
        self.student_id = student_id
        self.state = state
        self.score = score
        self.max_score = max_score
        self.answers = list(answers or [])
        self.started_at = ensure_utc_aware(started_at) or utcnow()
        self.completed_at = ensure_utc_aware(completed_at)
        self.time_spent = time_spent
        self.passed = passed

    @property
    def is_completed(self) -> bool:
        return self.state == AttemptState.COMPLETED.value

    @property
    def percentage(self) -> int:
        return percentage(self.score, self.max_score)

    def complete(
        self,
        answers: list[GradedAnswer],
        score: float,
        max_score: float,
        passing_score: float,
        completed_at: datetime | None = None,
    ) -> None:
        """Record the graded submission.

        Raises:
            AlreadyCompletedError: If the attempt was already submitted
        """
        if self.is_completed:
            raise AlreadyCompletedError

        completed_at = completed_at or utcnow()
        self.answers = list(answers)
        self.score = score
        self.max_score = max_score
        self.completed_at = completed_at
        self.time_spent = max(0, int((completed_at - self.started_at).total_seconds()))
        self.passed = meets_threshold(score, max_score, passing_score)
        self.state = AttemptState.COMPLETED.value

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "QuizAttempt":
        return cls(
            attempt_id=UUID(str(doc["attempt_id"])),
            student_id=UUID(str(doc["student_id"])),
            state=doc.get("state") or AttemptState.IN_PROGRESS.value,
            score=doc.get("score", 0),
            max_score=doc.get("max_score", 0),
            answers=[GradedAnswer.from_document(a) for a in doc.get("answers", [])],
            started_at=from_iso(doc.get("started_at")),
            completed_at=from_iso(doc.get("completed_at")),
            time_spent=int(doc.get("time_spent", 0)),
            passed=bool(doc.get("passed", False)),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "attempt_id": str(self.attempt_id),
            "student_id": str(self.student_id),
            "state": self.state,
            "score": self.score,
            "max_score": self.max_score,
            "answers": [a.to_document() for a in self.answers],
            "started_at": to_iso(self.started_at),
            "completed_at": to_iso(self.completed_at),
            "time_spent": self.time_spent,
            "passed": self.passed,
        }

    def __repr__(self) -> str:
        return (
            f"<QuizAttempt {self.attempt_id} student={self.student_id} "
            f"{self.state} {self.score}/{self.max_score}>"
        )


class Quiz:
    """Quiz aggregate root.

    Attributes:
        quiz_id: Quiz UUID
        course_id: Owning course UUID
        title: Quiz title
        description: Optional description
        module_index: Module the quiz belongs to
        time_limit: Advisory limit in minutes (not enforced)
        passing_score: Percentage required to pass (0-100)
        is_active: Whether attempts may be started
        questions: Ordered questions
        attempts: Every attempt, in start order
        created_at: Creation timestamp
    """

    def __init__(
        self,
        course_id: UUID,
        title: str,
        quiz_id: UUID | None = None,
        description: str | None = None,
        module_index: int = 0,
        time_limit: int = 30,
        passing_score: float = 70,
        is_active: bool = True,
        questions: list[Question] | None = None,
        attempts: list[QuizAttempt] | None = None,
        created_at: datetime | None = None,
    ):
        self.quiz_id = quiz_id or uuid4()
        self.course_id = course_id
        self.title = title
        self.description = description
        self.module_index = module_index
        self.time_limit = time_limit
        self.passing_score = passing_score
        self.is_active = is_active
        self.questions = list(questions or [])
        self.attempts = list(attempts or [])
        self.created_at = ensure_utc_aware(created_at) or utcnow()

    @property
    def total_points(self) -> float:
        return sum(q.points for q in self.questions)

    def active_attempt_for(self, student_id: UUID) -> QuizAttempt | None:
        return next(
            (
                a
                for a in self.attempts
                if a.student_id == student_id and not a.is_completed
            ),
            None,
        )

    def attempts_for(self, student_id: UUID) -> list[QuizAttempt]:
        return [a for a in self.attempts if a.student_id == student_id]

    def completed_attempts(self) -> list[QuizAttempt]:
        return [a for a in self.attempts if a.is_completed]

    def has_completed_attempt(self, student_id: UUID) -> bool:
        return any(a.is_completed for a in self.attempts_for(student_id))

    def reveals_answers_to(self, student_id: UUID) -> bool:
        """Answer key is shown after a completed attempt, never during a retake."""
        return (
            self.active_attempt_for(student_id) is None
            and self.has_completed_attempt(student_id)
        )

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Quiz":
        """Create Quiz from its stored JSON document."""
        return cls(
            quiz_id=UUID(str(doc["quiz_id"])),
            course_id=UUID(str(doc["course_id"])),
            title=doc.get("title", ""),
            description=doc.get("description"),
            module_index=int(doc.get("module_index", 0)),
            time_limit=int(doc.get("time_limit", 30)),
            passing_score=doc.get("passing_score", 70),
            is_active=doc.get("is_active", True),
            questions=[Question.from_document(q) for q in doc.get("questions", [])],
            attempts=[QuizAttempt.from_document(a) for a in doc.get("attempts", [])],
            created_at=from_iso(doc.get("created_at")),
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to a JSON-safe document."""
        return {
            "quiz_id": str(self.quiz_id),
            "course_id": str(self.course_id),
            "title": self.title,
            "description": self.description,
            "module_index": self.module_index,
            "time_limit": self.time_limit,
            "passing_score": self.passing_score,
            "is_active": self.is_active,
            "questions": [q.to_document() for q in self.questions],
            "attempts": [a.to_document() for a in self.attempts],
            "created_at": to_iso(self.created_at),
        }

    def __repr__(self) -> str:
        return (
            f"<Quiz {self.quiz_id} questions={len(self.questions)} "
            f"attempts={len(self.attempts)}>"
        )
