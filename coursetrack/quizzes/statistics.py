"""Instructor-facing statistics over completed quiz attempts.

Each attempt's percentage is rounded half-up when it is computed; the
average score is the rounded mean of those integer percentages.
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from coursetrack.utils.percent import mean_percentage, percentage

from .models import Quiz


@dataclass
class QuestionStats:
    question_index: int
    question_text: str
    total_attempts: int = 0
    correct_answers: int = 0
    correct_percentage: int = 0


@dataclass
class AttemptSummary:
    attempt_id: UUID
    student_id: UUID
    score: float
    max_score: float
    percentage: int
    passed: bool
    started_at: datetime
    completed_at: datetime | None
    time_spent: int


@dataclass
class QuizStatistics:
    total_attempts: int = 0
    passed_attempts: int = 0
    pass_rate: int = 0
    average_score: int = 0
    question_stats: list[QuestionStats] = field(default_factory=list)
    attempts: list[AttemptSummary] = field(default_factory=list)


def compute_quiz_statistics(quiz: Quiz) -> QuizStatistics:
    """Aggregate pass rate, average score and per-question difficulty."""
    completed = quiz.completed_attempts()

    summaries = sorted(
        (
            AttemptSummary(
                attempt_id=a.attempt_id,
                student_id=a.student_id,
                score=a.score,
                max_score=a.max_score,
                percentage=a.percentage,
                passed=a.passed,
                started_at=a.started_at,
                completed_at=a.completed_at,
                time_spent=a.time_spent,
            )
            for a in completed
        ),
        key=lambda s: s.score,
        reverse=True,
    )

    total = len(completed)
    passed = sum(1 for a in completed if a.passed)

    question_stats = []
    for index, question in enumerate(quiz.questions):
        answered = 0
        correct = 0
        for attempt in completed:
            answer = next(
                (ans for ans in attempt.answers if ans.question_index == index), None
            )
            if answer is None:
                continue
            answered += 1
            if answer.is_correct:
                correct += 1

        question_stats.append(
            QuestionStats(
                question_index=index,
                question_text=question.question_text,
                total_attempts=answered,
                correct_answers=correct,
                correct_percentage=percentage(correct, answered),
            )
        )

    return QuizStatistics(
        total_attempts=total,
        passed_attempts=passed,
        pass_rate=percentage(passed, total),
        average_score=mean_percentage(s.percentage for s in summaries),
        question_stats=question_stats,
        attempts=summaries,
    )
