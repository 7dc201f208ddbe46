"""Quizzes, attempts, auto-grading and result statistics."""

from .models import (
    QUIZZES_TABLES_CQL,
    AttemptState,
    IndexAnswer,
    Question,
    QuestionType,
    Quiz,
    QuizAttempt,
    TextAnswer,
)


__all__ = [
    "QUIZZES_TABLES_CQL",
    "AttemptState",
    "IndexAnswer",
    "Question",
    "QuestionType",
    "Quiz",
    "QuizAttempt",
    "TextAnswer",
]
