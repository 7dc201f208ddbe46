"""Tests for CourseRepository against a mocked Cassandra session."""

import json
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest
from cassandra.cluster import Session

from coursetrack.courses.repository import CourseRepository


@pytest.fixture
def mock_session():
    """Mock Cassandra session."""
    session = Mock(spec=Session)
    session.prepare = Mock(side_effect=lambda cql: Mock(name="prepared", cql=cql))
    # cassandra-asyncio-driver exposes aexecute on the session
    session.aexecute = AsyncMock(return_value=Mock())
    return session


@pytest.fixture
def repository(mock_session):
    return CourseRepository(session=mock_session, keyspace="test_keyspace")


class TestCourseRepository:
    """Document persistence."""

    def test_statements_use_keyspace(self, mock_session, repository):
        cql = [call.args[0] for call in mock_session.prepare.call_args_list]

        assert cql
        assert all("test_keyspace." in statement for statement in cql)

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, mock_session, repository):
        result = Mock()
        result.one.return_value = None
        mock_session.aexecute.return_value = result

        assert await repository.get(uuid4()) is None

    @pytest.mark.asyncio
    async def test_get_parses_document(self, mock_session, repository, course):
        result = Mock()
        result.one.return_value = Mock(document=json.dumps(course.to_document()))
        mock_session.aexecute.return_value = result

        loaded = await repository.get(course.course_id)

        assert loaded.course_id == course.course_id
        assert loaded.title == course.title

    @pytest.mark.asyncio
    async def test_save_dual_writes(self, mock_session, repository, course):
        await repository.save(course)

        assert mock_session.aexecute.await_count == 2
        main_params = mock_session.aexecute.await_args_list[0].args[1]
        lookup_params = mock_session.aexecute.await_args_list[1].args[1]

        assert main_params[0] == course.course_id
        assert json.loads(main_params[3])["title"] == course.title
        assert lookup_params[:2] == [course.instructor_id, course.course_id]

    @pytest.mark.asyncio
    async def test_list_by_instructor_skips_missing(self, mock_session, repository, course):
        """Lookup rows whose document is gone are ignored."""
        lookup = [Mock(course_id=course.course_id), Mock(course_id=uuid4())]
        found = Mock()
        found.one.return_value = Mock(document=json.dumps(course.to_document()))
        missing = Mock()
        missing.one.return_value = None
        mock_session.aexecute.side_effect = [lookup, found, missing]

        courses = await repository.list_by_instructor(course.instructor_id)

        assert [c.course_id for c in courses] == [course.course_id]
