"""Enrollment and progress entities embedded in a course document.

A course document carries one Enrollment per student, and each
Enrollment owns exactly one ProgressRecord. These entities are never
stored on their own; they are serialized as part of the course aggregate.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from coursetrack.utils.dates import ensure_utc_aware, from_iso, to_iso, utcnow
from coursetrack.utils.percent import meets_threshold


class EnrollmentStatus(str, Enum):
    """Course enrollment status."""

    PENDING = "pending"  # Waiting for instructor approval
    APPROVED = "approved"  # May track progress and attempt quizzes
    REJECTED = "rejected"


class QuizScore:
    """Best passing score a student recorded for one quiz.

    Attributes:
        quiz_id: Quiz UUID
        score: Points earned
        max_score: Points available
        completed_at: When the scoring attempt was submitted
    """

    def __init__(
        self,
        quiz_id: UUID,
        score: float,
        max_score: float,
        completed_at: datetime | None = None,
    ):
        self.quiz_id = quiz_id
        self.score = score
        self.max_score = max_score
        self.completed_at = ensure_utc_aware(completed_at) or utcnow()

    def meets(self, passing_score: float) -> bool:
        """Check whether this score reaches a percentage threshold."""
        return meets_threshold(self.score, self.max_score, passing_score)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "QuizScore":
        return cls(
            quiz_id=UUID(str(doc["quiz_id"])),
            score=doc.get("score", 0),
            max_score=doc.get("max_score", 0),
            completed_at=from_iso(doc.get("completed_at")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "quiz_id": str(self.quiz_id),
            "score": self.score,
            "max_score": self.max_score,
            "completed_at": to_iso(self.completed_at),
        }

    def __repr__(self) -> str:
        return f"<QuizScore quiz={self.quiz_id} {self.score}/{self.max_score}>"


class ProgressRecord:
    """A student's progress through one course.

    ``completion_percentage`` is derived state. It is written only by
    ``ProgressTracker.recompute_completion``; every other path treats it
    as read-only.

    Attributes:
        completed_lessons: Material identifiers marked done (unique, ordered)
        completed_modules: Module order numbers marked done (unique, ordered)
        quiz_scores: Passing score per quiz id
        completion_percentage: 0-100, derived
        last_accessed_at: Last progress-affecting interaction
    """

    def __init__(
        self,
        completed_lessons: list[str] | None = None,
        completed_modules: list[int] | None = None,
        quiz_scores: dict[UUID, QuizScore] | None = None,
        completion_percentage: int = 0,
        last_accessed_at: datetime | None = None,
    ):
        self.completed_lessons = list(dict.fromkeys(completed_lessons or []))
        self.completed_modules = list(dict.fromkeys(completed_modules or []))
        self.quiz_scores = dict(quiz_scores or {})
        self.completion_percentage = completion_percentage
        self.last_accessed_at = ensure_utc_aware(last_accessed_at) or utcnow()

    def touch(self, when: datetime | None = None) -> None:
        self.last_accessed_at = when or utcnow()

    @classmethod
    def from_document(cls, doc: dict[str, Any] | None) -> "ProgressRecord":
        doc = doc or {}
        scores = [QuizScore.from_document(s) for s in doc.get("quiz_scores", [])]
        return cls(
            completed_lessons=[str(x) for x in doc.get("completed_lessons", [])],
            completed_modules=[int(x) for x in doc.get("completed_modules", [])],
            quiz_scores={s.quiz_id: s for s in scores},
            completion_percentage=int(doc.get("completion_percentage", 0)),
            last_accessed_at=from_iso(doc.get("last_accessed_at")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "completed_lessons": list(self.completed_lessons),
            "completed_modules": list(self.completed_modules),
            "quiz_scores": [s.to_document() for s in self.quiz_scores.values()],
            "completion_percentage": self.completion_percentage,
            "last_accessed_at": to_iso(self.last_accessed_at),
        }

    def __repr__(self) -> str:
        return (
            f"<ProgressRecord lessons={len(self.completed_lessons)} "
            f"quizzes={len(self.quiz_scores)} {self.completion_percentage}%>"
        )


class Enrollment:
    """A student's enrollment in a course.

    Attributes:
        student_id: Student UUID
        status: pending, approved or rejected
        enrolled_at: Enrollment timestamp
        progress: Progress record owned by this enrollment
    """

    def __init__(
        self,
        student_id: UUID,
        status: str = EnrollmentStatus.APPROVED.value,
        enrolled_at: datetime | None = None,
        progress: ProgressRecord | None = None,
    ):
        self.student_id = student_id
        self.status = status
        self.enrolled_at = ensure_utc_aware(enrolled_at) or utcnow()
        self.progress = progress or ProgressRecord()

    @property
    def is_approved(self) -> bool:
        return self.status == EnrollmentStatus.APPROVED.value

    @property
    def is_pending(self) -> bool:
        return self.status == EnrollmentStatus.PENDING.value

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Enrollment":
        return cls(
            student_id=UUID(str(doc["student_id"])),
            status=doc.get("status") or EnrollmentStatus.APPROVED.value,
            enrolled_at=from_iso(doc.get("enrolled_at")),
            progress=ProgressRecord.from_document(doc.get("progress")),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "student_id": str(self.student_id),
            "status": self.status,
            "enrolled_at": to_iso(self.enrolled_at),
            "progress": self.progress.to_document(),
        }

    def __repr__(self) -> str:
        return (
            f"<Enrollment student={self.student_id} {self.status} "
            f"{self.progress.completion_percentage}%>"
        )
