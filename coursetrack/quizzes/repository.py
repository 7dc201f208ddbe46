"""Cassandra persistence for quiz aggregates."""

import json
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from coursetrack.utils.dates import utcnow

from .models import Quiz


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


class QuizRepository:
    """Loads and stores whole quiz documents plus lookup rows."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_quiz = self.session.prepare(f"""
            SELECT document FROM {self.keyspace}.quizzes WHERE quiz_id = ?
        """)

        self._upsert_quiz = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quizzes
            (quiz_id, course_id, document, updated_at)
            VALUES (?, ?, ?, ?)
        """)

        self._delete_quiz = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.quizzes WHERE quiz_id = ?
        """)

        self._upsert_quiz_by_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quizzes_by_course
            (course_id, quiz_id, title)
            VALUES (?, ?, ?)
        """)

        self._delete_quiz_by_course = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.quizzes_by_course
            WHERE course_id = ? AND quiz_id = ?
        """)

        self._get_course_quiz_ids = self.session.prepare(f"""
            SELECT quiz_id FROM {self.keyspace}.quizzes_by_course
            WHERE course_id = ?
        """)

        self._upsert_attempt_by_student = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.quiz_attempts_by_student
            (student_id, quiz_id, course_id)
            VALUES (?, ?, ?)
        """)

        self._get_student_quiz_ids = self.session.prepare(f"""
            SELECT quiz_id FROM {self.keyspace}.quiz_attempts_by_student
            WHERE student_id = ?
        """)

    async def get(self, quiz_id: UUID) -> Quiz | None:
        """Load a quiz aggregate, or None if it does not exist."""
        result = await self.session.aexecute(self._get_quiz, [quiz_id])
        row = result.one()
        if not row or not row.document:
            return None
        return Quiz.from_document(json.loads(row.document))

    async def save(self, quiz: Quiz) -> None:
        """Replace the stored aggregate and refresh lookup rows."""
        await self.session.aexecute(
            self._upsert_quiz,
            [quiz.quiz_id, quiz.course_id, json.dumps(quiz.to_document()), utcnow()],
        )
        await self.session.aexecute(
            self._upsert_quiz_by_course,
            [quiz.course_id, quiz.quiz_id, quiz.title],
        )

        for student_id in {a.student_id for a in quiz.attempts}:
            await self.session.aexecute(
                self._upsert_attempt_by_student,
                [student_id, quiz.quiz_id, quiz.course_id],
            )

        logger.debug(
            "quiz_saved",
            quiz_id=str(quiz.quiz_id),
            attempts=len(quiz.attempts),
        )

    async def delete(self, quiz: Quiz) -> None:
        await self.session.aexecute(self._delete_quiz, [quiz.quiz_id])
        await self.session.aexecute(
            self._delete_quiz_by_course, [quiz.course_id, quiz.quiz_id]
        )

    async def list_by_course(self, course_id: UUID) -> list[Quiz]:
        rows = await self.session.aexecute(self._get_course_quiz_ids, [course_id])
        return await self._load_many(row.quiz_id for row in rows)

    async def list_attempted_by(self, student_id: UUID) -> list[Quiz]:
        rows = await self.session.aexecute(self._get_student_quiz_ids, [student_id])
        return await self._load_many(row.quiz_id for row in rows)

    async def _load_many(self, quiz_ids) -> list[Quiz]:
        quizzes = []
        for quiz_id in quiz_ids:
            quiz = await self.get(quiz_id)
            if quiz:
                quizzes.append(quiz)
        return quizzes
