"""Cassandra persistence for course aggregates."""

import json
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from coursetrack.utils.dates import utcnow

from .models import Course


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


class CourseRepository:
    """Loads and stores whole course documents."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_course = self.session.prepare(f"""
            SELECT document FROM {self.keyspace}.courses WHERE course_id = ?
        """)

        self._upsert_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses
            (course_id, instructor_id, status, document, updated_at)
            VALUES (?, ?, ?, ?, ?)
        """)

        self._upsert_course_by_instructor = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.courses_by_instructor
            (instructor_id, course_id, title, status)
            VALUES (?, ?, ?, ?)
        """)

        self._get_instructor_course_ids = self.session.prepare(f"""
            SELECT course_id FROM {self.keyspace}.courses_by_instructor
            WHERE instructor_id = ?
        """)

    async def get(self, course_id: UUID) -> Course | None:
        """Load a course aggregate, or None if it does not exist."""
        result = await self.session.aexecute(self._get_course, [course_id])
        row = result.one()
        if not row or not row.document:
            return None
        return Course.from_document(json.loads(row.document))

    async def save(self, course: Course) -> None:
        """Replace the stored aggregate (dual-write with instructor lookup)."""
        course.updated_at = utcnow()
        document = json.dumps(course.to_document())

        await self.session.aexecute(
            self._upsert_course,
            [
                course.course_id,
                course.instructor_id,
                course.status,
                document,
                course.updated_at,
            ],
        )
        await self.session.aexecute(
            self._upsert_course_by_instructor,
            [course.instructor_id, course.course_id, course.title, course.status],
        )

        logger.debug(
            "course_saved",
            course_id=str(course.course_id),
            students=len(course.students),
        )

    async def list_by_instructor(self, instructor_id: UUID) -> list[Course]:
        rows = await self.session.aexecute(
            self._get_instructor_course_ids, [instructor_id]
        )
        courses = []
        for row in rows:
            course = await self.get(row.course_id)
            if course:
                courses.append(course)
        return courses
