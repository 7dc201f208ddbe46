"""Pydantic schemas for course structure."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from coursetrack.progress.models import Enrollment
from coursetrack.progress.schemas import EnrollmentResponse

from .models import Course, CourseQuiz, CourseStatus, Material, MaterialType, Module


# ==============================================================================
# Course Schemas
# ==============================================================================


class CreateCourseRequest(BaseModel):
    """Course creation request."""

    title: str = Field(..., min_length=3, max_length=200, description="Course title")
    status: CourseStatus = Field(CourseStatus.DRAFT, description="Publication status")
    enrollment_requires_approval: bool = Field(
        False, description="New enrollments wait for instructor approval"
    )


class UpdateCourseRequest(BaseModel):
    """Course update request."""

    title: str | None = Field(None, min_length=3, max_length=200)
    status: CourseStatus | None = None
    enrollment_requires_approval: bool | None = None


class CreateModuleRequest(BaseModel):
    """Add an empty module at a position."""

    order: int = Field(..., ge=0, description="Position key, unique per course")
    title: str = Field(..., min_length=1, max_length=200)


class CreateMaterialRequest(BaseModel):
    """Add a material; the module is created when its order is new."""

    module_order: int = Field(..., ge=0)
    module_title: str = Field("", max_length=200, description="Used for a new module")
    material_id: str | None = Field(
        None, min_length=1, max_length=100, description="Generated when omitted"
    )
    title: str = Field(..., min_length=1, max_length=200)
    file_type: MaterialType = MaterialType.OTHER
    is_required: bool = Field(True, description="Counts toward completion")


# ==============================================================================
# Responses
# ==============================================================================


class MaterialResponse(BaseModel):
    material_id: str
    title: str
    file_type: MaterialType
    is_required: bool

    @classmethod
    def from_entity(cls, entity: Material) -> "MaterialResponse":
        return cls(
            material_id=entity.material_id,
            title=entity.title,
            file_type=MaterialType(entity.file_type),
            is_required=entity.is_required,
        )


class ModuleResponse(BaseModel):
    order: int
    title: str
    materials: list[MaterialResponse]

    @classmethod
    def from_entity(cls, entity: Module) -> "ModuleResponse":
        return cls(
            order=entity.order,
            title=entity.title,
            materials=[MaterialResponse.from_entity(m) for m in entity.materials],
        )


class CourseQuizResponse(BaseModel):
    quiz_id: UUID
    title: str
    passing_score: float

    @classmethod
    def from_entity(cls, entity: CourseQuiz) -> "CourseQuizResponse":
        return cls(
            quiz_id=entity.quiz_id,
            title=entity.title,
            passing_score=entity.passing_score,
        )


class CourseResponse(BaseModel):
    """Course structure without enrollments."""

    course_id: UUID
    title: str
    instructor_id: UUID
    status: CourseStatus
    enrollment_requires_approval: bool
    modules: list[ModuleResponse]
    quizzes: list[CourseQuizResponse]
    required_items: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, entity: Course) -> "CourseResponse":
        return cls(**_course_fields(entity))


class CourseDetailResponse(CourseResponse):
    """Course plus the viewer's own enrollment, if any."""

    enrollment: EnrollmentResponse | None = None

    @classmethod
    def build(cls, entity: Course, enrollment: Enrollment | None) -> "CourseDetailResponse":
        return cls(
            **_course_fields(entity),
            enrollment=(
                EnrollmentResponse.from_entity(entity.course_id, enrollment)
                if enrollment
                else None
            ),
        )


class CourseStats(BaseModel):
    enrolled_students: int
    pending_enrollments: int
    average_progress: int = Field(ge=0, le=100)


class InstructorCourseResponse(CourseResponse):
    """Course with enrollment statistics (instructor dashboard)."""

    stats: CourseStats

    @classmethod
    def from_entity(cls, entity: Course) -> "InstructorCourseResponse":
        return cls(
            **_course_fields(entity),
            stats=CourseStats(
                enrolled_students=len(entity.approved_enrollments()),
                pending_enrollments=len(entity.pending_enrollments()),
                average_progress=entity.average_progress(),
            ),
        )


class InstructorCourseListResponse(BaseModel):
    items: list[InstructorCourseResponse]
    total: int


def _course_fields(course: Course) -> dict:
    return {
        "course_id": course.course_id,
        "title": course.title,
        "instructor_id": course.instructor_id,
        "status": CourseStatus(course.status),
        "enrollment_requires_approval": course.enrollment_requires_approval,
        "modules": [ModuleResponse.from_entity(m) for m in course.modules],
        "quizzes": [CourseQuizResponse.from_entity(q) for q in course.quizzes],
        "required_items": len(course.required_material_ids()) + len(course.quizzes),
        "created_at": course.created_at,
        "updated_at": course.updated_at,
    }
