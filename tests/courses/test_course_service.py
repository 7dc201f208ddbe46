"""Tests for CourseService.

Covers:
- course creation, reads and updates
- module and material authoring
- instructor course listing
"""

from uuid import uuid4

import pytest
import pytest_asyncio

from coursetrack.auth import Actor, UserRole
from coursetrack.courses.exceptions import MaterialExistsError, ModuleExistsError
from coursetrack.courses.models import CourseStatus, MaterialType
from coursetrack.courses.schemas import (
    CreateCourseRequest,
    CreateMaterialRequest,
    CreateModuleRequest,
    UpdateCourseRequest,
)
from coursetrack.progress.exceptions import CourseNotFoundError, NotAuthorizedError


@pytest_asyncio.fixture
async def stored_course(course, course_repo, student, enroll_student):
    """Stored published course with one approved student."""
    enroll_student(course, student.id)
    await course_repo.save(course)
    return course


class TestCreateAndRead:
    """Course creation and visibility."""

    @pytest.mark.asyncio
    async def test_create_owned_by_actor(self, course_service, course_repo, instructor):
        course = await course_service.create_course(
            CreateCourseRequest(title="Intro to Python"), instructor
        )

        stored = await course_repo.get(course.course_id)
        assert stored.instructor_id == instructor.id
        assert stored.status == CourseStatus.DRAFT.value
        assert stored.modules == []

    @pytest.mark.asyncio
    async def test_draft_hidden_from_students(self, course_service, instructor, student):
        course = await course_service.create_course(
            CreateCourseRequest(title="Intro to Python"), instructor
        )

        with pytest.raises(NotAuthorizedError):
            await course_service.get_course(course.course_id, student)

        own = await course_service.get_course(course.course_id, instructor)
        assert own.title == "Intro to Python"

    @pytest.mark.asyncio
    async def test_published_visible_to_anyone(self, course_service, stored_course):
        outsider = Actor(id=uuid4(), role=UserRole.STUDENT)

        course = await course_service.get_course(stored_course.course_id, outsider)

        assert course.course_id == stored_course.course_id

    @pytest.mark.asyncio
    async def test_unknown_course(self, course_service, instructor):
        with pytest.raises(CourseNotFoundError):
            await course_service.get_course(uuid4(), instructor)


class TestUpdate:
    """Settings updates."""

    @pytest.mark.asyncio
    async def test_partial_update(self, course_service, stored_course, instructor):
        course = await course_service.update_course(
            stored_course.course_id,
            UpdateCourseRequest(enrollment_requires_approval=True),
            instructor,
        )

        assert course.enrollment_requires_approval is True
        assert course.title == stored_course.title
        assert course.status == CourseStatus.PUBLISHED.value

    @pytest.mark.asyncio
    async def test_other_teacher_refused(self, course_service, stored_course):
        other = Actor(id=uuid4(), role=UserRole.TEACHER)

        with pytest.raises(NotAuthorizedError):
            await course_service.update_course(
                stored_course.course_id, UpdateCourseRequest(title="Taken over"), other
            )


class TestStructure:
    """Modules and materials."""

    @pytest.mark.asyncio
    async def test_add_module(self, course_service, stored_course, instructor):
        course = await course_service.add_module(
            stored_course.course_id, CreateModuleRequest(order=3, title="Forms"), instructor
        )

        assert [m.order for m in course.modules] == [1, 2, 3]
        assert course.get_module(3).title == "Forms"

    @pytest.mark.asyncio
    async def test_duplicate_module_order(self, course_service, stored_course, instructor):
        with pytest.raises(ModuleExistsError):
            await course_service.add_module(
                stored_course.course_id, CreateModuleRequest(order=1, title="Again"), instructor
            )

    @pytest.mark.asyncio
    async def test_required_material_recomputes_progress(
        self, course_service, progress_service, stored_course, instructor, student
    ):
        """Three of four required items done: 100% drops to 75%."""
        for lesson in ("m1", "m2", "m3"):
            await progress_service.update_progress(
                stored_course.course_id, student, lesson_id=lesson
            )

        course = await course_service.add_material(
            stored_course.course_id,
            CreateMaterialRequest(
                module_order=2,
                material_id="m4",
                title="Flexbox",
                file_type=MaterialType.VIDEO,
            ),
            instructor,
        )

        assert course.required_material_ids() == ["m1", "m2", "m3", "m4"]
        assert course.students[student.id].progress.completion_percentage == 75

    @pytest.mark.asyncio
    async def test_material_creates_missing_module(
        self, course_service, stored_course, instructor
    ):
        course = await course_service.add_material(
            stored_course.course_id,
            CreateMaterialRequest(
                module_order=5, module_title="Extras", title="Cheatsheet", is_required=False
            ),
            instructor,
        )

        module = course.get_module(5)
        assert module.title == "Extras"
        assert module.materials[0].material_id
        assert module.materials[0].is_required is False

    @pytest.mark.asyncio
    async def test_duplicate_material_id(self, course_service, stored_course, instructor):
        with pytest.raises(MaterialExistsError):
            await course_service.add_material(
                stored_course.course_id,
                CreateMaterialRequest(module_order=1, material_id="m1", title="Copy"),
                instructor,
            )

    @pytest.mark.asyncio
    async def test_students_cannot_add(self, course_service, stored_course, student):
        with pytest.raises(NotAuthorizedError):
            await course_service.add_module(
                stored_course.course_id, CreateModuleRequest(order=9, title="Mine"), student
            )


class TestInstructorListing:
    """Courses per instructor."""

    @pytest.mark.asyncio
    async def test_only_own_courses(self, course_service, instructor):
        first = await course_service.create_course(CreateCourseRequest(title="First"), instructor)
        second = await course_service.create_course(
            CreateCourseRequest(title="Second"), instructor
        )
        other = Actor(id=uuid4(), role=UserRole.TEACHER)
        await course_service.create_course(CreateCourseRequest(title="Theirs"), other)

        courses = await course_service.list_instructor_courses(instructor)

        assert {c.course_id for c in courses} == {first.course_id, second.course_id}
