"""Pydantic schemas for enrollment and course progress."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from .models import Enrollment, EnrollmentStatus, ProgressRecord


# ==============================================================================
# Progress Update Schemas
# ==============================================================================


class UpdateProgressRequest(BaseModel):
    """Mark a lesson (material) and/or a module as done or not done."""

    lesson_id: str | None = Field(None, min_length=1, description="Material id")
    module_order: int | None = Field(None, ge=0, description="Module order number")
    completed: bool = Field(True, description="False to unmark")

    @model_validator(mode="after")
    def require_target(self) -> "UpdateProgressRequest":
        if self.lesson_id is None and self.module_order is None:
            msg = "lesson_id or module_order is required"
            raise ValueError(msg)
        return self


class EnrollmentDecisionRequest(BaseModel):
    """Instructor decision on a pending enrollment."""

    status: EnrollmentStatus

    @model_validator(mode="after")
    def reject_pending(self) -> "EnrollmentDecisionRequest":
        if self.status == EnrollmentStatus.PENDING:
            msg = "status must be approved or rejected"
            raise ValueError(msg)
        return self


# ==============================================================================
# Progress Responses
# ==============================================================================


class QuizScoreResponse(BaseModel):
    quiz_id: UUID
    score: float
    max_score: float
    completed_at: datetime


class ProgressResponse(BaseModel):
    """A student's progress record."""

    completed_lessons: list[str]
    completed_modules: list[int]
    quiz_scores: list[QuizScoreResponse]
    completion_percentage: int = Field(ge=0, le=100)
    last_accessed_at: datetime

    @classmethod
    def from_entity(cls, entity: ProgressRecord) -> "ProgressResponse":
        """Create response from entity."""
        return cls(
            completed_lessons=list(entity.completed_lessons),
            completed_modules=list(entity.completed_modules),
            quiz_scores=[
                QuizScoreResponse(
                    quiz_id=s.quiz_id,
                    score=s.score,
                    max_score=s.max_score,
                    completed_at=s.completed_at,
                )
                for s in entity.quiz_scores.values()
            ],
            completion_percentage=entity.completion_percentage,
            last_accessed_at=entity.last_accessed_at,
        )


class EnrollmentResponse(BaseModel):
    """Enrollment with its progress."""

    course_id: UUID
    student_id: UUID
    status: EnrollmentStatus
    enrolled_at: datetime
    progress: ProgressResponse

    @classmethod
    def from_entity(cls, course_id: UUID, entity: Enrollment) -> "EnrollmentResponse":
        return cls(
            course_id=course_id,
            student_id=entity.student_id,
            status=EnrollmentStatus(entity.status),
            enrolled_at=entity.enrolled_at,
            progress=ProgressResponse.from_entity(entity.progress),
        )


class EnrollmentListResponse(BaseModel):
    items: list[EnrollmentResponse]
    total: int


class CourseProgressStatsResponse(BaseModel):
    """Instructor overview of a course's enrollments."""

    course_id: UUID
    enrolled_students: int
    pending_enrollments: int
    average_progress: int = Field(ge=0, le=100)
