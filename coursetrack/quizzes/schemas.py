"""Pydantic schemas for quizzes, attempts and results.

Two quiz views exist: ``QuizResponse`` carries the answer key and is
only returned to instructors, admins and students who finished an
attempt; ``QuizStudentView`` never contains correct answers or
explanations.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, StrictInt, StrictStr, model_validator

from .models import GradedAnswer, Question, QuestionType, Quiz, QuizAttempt
from .statistics import QuizStatistics


# ==============================================================================
# Authoring Schemas
# ==============================================================================


class QuestionCreate(BaseModel):
    """Question definition with its answer key."""

    question_text: str = Field(..., min_length=1)
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: list[str] = Field(default_factory=list)
    correct_answer: StrictInt | StrictStr
    points: float = Field(1, gt=0)
    explanation: str | None = None

    @model_validator(mode="after")
    def check_answer_shape(self) -> "QuestionCreate":
        if self.question_type == QuestionType.SHORT_ANSWER:
            if not isinstance(self.correct_answer, str):
                msg = "short-answer questions need a text answer"
                raise ValueError(msg)
            return self

        if not isinstance(self.correct_answer, int):
            msg = f"{self.question_type.value} questions need an option index"
            raise ValueError(msg)
        if self.options and not 0 <= self.correct_answer < len(self.options):
            msg = "correct_answer is not a valid option index"
            raise ValueError(msg)
        return self

    def to_entity(self) -> Question:
        return Question(
            question_text=self.question_text,
            question_type=self.question_type.value,
            options=self.options,
            correct_answer=self.correct_answer,
            points=self.points,
            explanation=self.explanation,
        )


class QuizCreateRequest(BaseModel):
    """Create a quiz in a course."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    module_index: int = Field(0, ge=0)
    time_limit: int | None = Field(None, gt=0, description="Minutes, advisory")
    passing_score: float | None = Field(None, ge=0, le=100)
    is_active: bool = True
    questions: list[QuestionCreate] = Field(default_factory=list)


class QuizUpdateRequest(BaseModel):
    """Partial quiz update; only allowed before any attempt."""

    title: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    module_index: int | None = Field(None, ge=0)
    time_limit: int | None = Field(None, gt=0)
    passing_score: float | None = Field(None, ge=0, le=100)
    is_active: bool | None = None
    questions: list[QuestionCreate] | None = None


# ==============================================================================
# Quiz Views
# ==============================================================================


class QuestionStudentView(BaseModel):
    question_index: int
    question_text: str
    question_type: QuestionType
    options: list[str]
    points: float


class QuestionResponse(QuestionStudentView):
    correct_answer: int | str
    explanation: str | None = None


class QuizStudentView(BaseModel):
    """Quiz without its answer key."""

    quiz_id: UUID
    course_id: UUID
    title: str
    description: str | None = None
    module_index: int
    time_limit: int
    passing_score: float
    is_active: bool
    total_points: float
    questions: list[QuestionStudentView]

    @classmethod
    def from_entity(cls, quiz: Quiz) -> "QuizStudentView":
        return cls(
            **_quiz_fields(quiz),
            questions=[
                QuestionStudentView(
                    question_index=i,
                    question_text=q.question_text,
                    question_type=QuestionType(q.question_type),
                    options=q.options,
                    points=q.points,
                )
                for i, q in enumerate(quiz.questions)
            ],
        )


class QuizResponse(BaseModel):
    """Quiz with its answer key."""

    quiz_id: UUID
    course_id: UUID
    title: str
    description: str | None = None
    module_index: int
    time_limit: int
    passing_score: float
    is_active: bool
    total_points: float
    attempt_count: int
    questions: list[QuestionResponse]

    @classmethod
    def from_entity(cls, quiz: Quiz) -> "QuizResponse":
        return cls(
            **_quiz_fields(quiz),
            attempt_count=len(quiz.attempts),
            questions=[
                QuestionResponse(
                    question_index=i,
                    question_text=q.question_text,
                    question_type=QuestionType(q.question_type),
                    options=q.options,
                    points=q.points,
                    correct_answer=q.correct_answer.value,
                    explanation=q.explanation,
                )
                for i, q in enumerate(quiz.questions)
            ],
        )


def _quiz_fields(quiz: Quiz) -> dict:
    return {
        "quiz_id": quiz.quiz_id,
        "course_id": quiz.course_id,
        "title": quiz.title,
        "description": quiz.description,
        "module_index": quiz.module_index,
        "time_limit": quiz.time_limit,
        "passing_score": quiz.passing_score,
        "is_active": quiz.is_active,
        "total_points": quiz.total_points,
    }


# ==============================================================================
# Attempt Schemas
# ==============================================================================


class GradedAnswerResponse(BaseModel):
    question_index: int
    given_answer: int | str
    is_correct: bool
    points_earned: float

    @classmethod
    def from_entity(cls, entity: GradedAnswer) -> "GradedAnswerResponse":
        return cls(
            question_index=entity.question_index,
            given_answer=entity.given_answer,
            is_correct=entity.is_correct,
            points_earned=entity.points_earned,
        )


class AttemptResponse(BaseModel):
    attempt_id: UUID
    student_id: UUID
    state: str
    score: float
    max_score: float
    answers: list[GradedAnswerResponse]
    started_at: datetime
    completed_at: datetime | None = None
    time_spent: int
    passed: bool

    @classmethod
    def from_entity(cls, entity: QuizAttempt) -> "AttemptResponse":
        return cls(
            attempt_id=entity.attempt_id,
            student_id=entity.student_id,
            state=entity.state,
            score=entity.score,
            max_score=entity.max_score,
            answers=[GradedAnswerResponse.from_entity(a) for a in entity.answers],
            started_at=entity.started_at,
            completed_at=entity.completed_at,
            time_spent=entity.time_spent,
            passed=entity.passed,
        )


class StartAttemptResponse(BaseModel):
    quiz: QuizStudentView
    attempt: AttemptResponse
    resumed: bool = Field(description="True when an in-progress attempt was returned")


class SubmitAttemptRequest(BaseModel):
    """Answers in question order; null skips a question."""

    answers: list[StrictInt | StrictStr | None]


class SubmitAttemptResponse(BaseModel):
    attempt: AttemptResponse
    score: float
    max_score: float
    percentage: int
    passed: bool
    completion_percentage: int | None = Field(
        None, description="New course completion when the attempt passed"
    )


class StudentAttemptSummary(BaseModel):
    quiz_id: UUID
    quiz_title: str
    course_id: UUID
    attempt_id: UUID
    state: str
    score: float
    max_score: float
    percentage: int
    passed: bool
    started_at: datetime
    completed_at: datetime | None = None
    time_spent: int


class StudentAttemptListResponse(BaseModel):
    items: list[StudentAttemptSummary]
    total: int


# ==============================================================================
# Results Schemas
# ==============================================================================


class QuizInfo(BaseModel):
    title: str
    total_questions: int
    passing_score: float


class QuizStatsSummary(BaseModel):
    total_attempts: int
    passed_attempts: int
    pass_rate: int
    average_score: int


class QuestionStatsResponse(BaseModel):
    question_index: int
    question_text: str
    total_attempts: int
    correct_answers: int
    correct_percentage: int


class AttemptResultResponse(BaseModel):
    attempt_id: UUID
    student_id: UUID
    score: float
    max_score: float
    percentage: int
    passed: bool
    started_at: datetime
    completed_at: datetime | None = None
    time_spent: int


class QuizResultsResponse(BaseModel):
    """Instructor view of every completed attempt."""

    quiz_info: QuizInfo
    stats: QuizStatsSummary
    question_stats: list[QuestionStatsResponse]
    attempts: list[AttemptResultResponse]

    @classmethod
    def build(cls, quiz: Quiz, stats: QuizStatistics) -> "QuizResultsResponse":
        return cls(
            quiz_info=QuizInfo(
                title=quiz.title,
                total_questions=len(quiz.questions),
                passing_score=quiz.passing_score,
            ),
            stats=QuizStatsSummary(
                total_attempts=stats.total_attempts,
                passed_attempts=stats.passed_attempts,
                pass_rate=stats.pass_rate,
                average_score=stats.average_score,
            ),
            question_stats=[
                QuestionStatsResponse(**vars(q)) for q in stats.question_stats
            ],
            attempts=[AttemptResultResponse(**vars(a)) for a in stats.attempts],
        )


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
    success: bool = True
