"""Course aggregate and its Cassandra table definitions.

A course is stored as a single JSON document: its modules, materials,
quiz references and enrollments (with progress) are embedded and always
loaded and written together. The ``courses_by_instructor`` lookup table
supports listing an instructor's courses without scanning documents.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from coursetrack.progress.models import Enrollment
from coursetrack.utils.dates import ensure_utc_aware, from_iso, to_iso, utcnow
from coursetrack.utils.percent import mean_percentage


class CourseStatus(str, Enum):
    """Course publication status."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class MaterialType(str, Enum):
    """Material file type."""

    PDF = "pdf"
    DOC = "doc"
    VIDEO = "video"
    LINK = "link"
    QUIZ = "quiz"
    OTHER = "other"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Whole course aggregate as one document; last write wins
COURSES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    course_id UUID PRIMARY KEY,
    instructor_id UUID,
    status TEXT,
    document TEXT,
    updated_at TIMESTAMP
)
"""

COURSES_BY_INSTRUCTOR_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses_by_instructor (
    instructor_id UUID,
    course_id UUID,
    title TEXT,
    status TEXT,
    PRIMARY KEY (instructor_id, course_id)
)
"""

COURSES_TABLES_CQL = [
    COURSES_TABLE_CQL,
    COURSES_BY_INSTRUCTOR_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class Material:
    """Learning material inside a module.

    Attributes:
        material_id: String identifier referenced by completed_lessons
        title: Display title
        file_type: pdf, doc, video, link, quiz or other
        is_required: Whether it counts toward completion
    """

    def __init__(
        self,
        material_id: str | None = None,
        title: str = "",
        file_type: str = MaterialType.OTHER.value,
        is_required: bool = True,
    ):
        self.material_id = material_id or str(uuid4())
        self.title = title
        self.file_type = file_type
        self.is_required = is_required

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Material":
        return cls(
            material_id=str(doc["material_id"]),
            title=doc.get("title", ""),
            file_type=doc.get("file_type") or MaterialType.OTHER.value,
            is_required=doc.get("is_required", True),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "material_id": self.material_id,
            "title": self.title,
            "file_type": self.file_type,
            "is_required": self.is_required,
        }

    def __repr__(self) -> str:
        flag = "required" if self.is_required else "optional"
        return f"<Material {self.material_id} {flag}>"


class Module:
    """Ordered group of materials.

    Attributes:
        order: Position key, unique within the course
        title: Module title
        materials: Ordered materials
    """

    def __init__(
        self,
        order: int,
        title: str = "",
        materials: list[Material] | None = None,
    ):
        self.order = order
        self.title = title
        self.materials = list(materials or [])

    def required_materials(self) -> list[Material]:
        return [m for m in self.materials if m.is_required]

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Module":
        return cls(
            order=int(doc["order"]),
            title=doc.get("title", ""),
            materials=[Material.from_document(m) for m in doc.get("materials", [])],
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "order": self.order,
            "title": self.title,
            "materials": [m.to_document() for m in self.materials],
        }

    def __repr__(self) -> str:
        return f"<Module order={self.order} materials={len(self.materials)}>"


class CourseQuiz:
    """Reference to a quiz that counts toward course completion."""

    def __init__(self, quiz_id: UUID, title: str = "", passing_score: float = 70):
        self.quiz_id = quiz_id
        self.title = title
        self.passing_score = passing_score

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "CourseQuiz":
        return cls(
            quiz_id=UUID(str(doc["quiz_id"])),
            title=doc.get("title", ""),
            passing_score=doc.get("passing_score", 70),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "quiz_id": str(self.quiz_id),
            "title": self.title,
            "passing_score": self.passing_score,
        }

    def __repr__(self) -> str:
        return f"<CourseQuiz {self.quiz_id} pass={self.passing_score}%>"


class Course:
    """Course aggregate root.

    Attributes:
        course_id: Course UUID
        title: Course title
        instructor_id: Owning instructor UUID
        status: draft, published or archived
        enrollment_requires_approval: New enrollments start as pending
        modules: Ordered modules (unique ``order`` values)
        quizzes: Quiz references counted as required items
        students: Enrollment per student UUID
        created_at: Creation timestamp
        updated_at: Last persisted change
    """

    def __init__(
        self,
        instructor_id: UUID,
        title: str = "",
        course_id: UUID | None = None,
        status: str = CourseStatus.DRAFT.value,
        enrollment_requires_approval: bool = False,
        modules: list[Module] | None = None,
        quizzes: list[CourseQuiz] | None = None,
        students: dict[UUID, Enrollment] | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.course_id = course_id or uuid4()
        self.title = title
        self.instructor_id = instructor_id
        self.status = status
        self.enrollment_requires_approval = enrollment_requires_approval
        self.modules = sorted(modules or [], key=lambda m: m.order)
        self.quizzes = list(quizzes or [])
        self.students = dict(students or {})
        self.created_at = ensure_utc_aware(created_at) or utcnow()
        self.updated_at = ensure_utc_aware(updated_at) or self.created_at

        orders = [m.order for m in self.modules]
        if len(orders) != len(set(orders)):
            msg = f"Duplicate module order in course {self.course_id}"
            raise ValueError(msg)

    @property
    def is_published(self) -> bool:
        return self.status == CourseStatus.PUBLISHED.value

    def is_instructor(self, user_id: UUID) -> bool:
        return self.instructor_id == user_id

    def required_material_ids(self) -> list[str]:
        """Identifiers of every required material, in module order."""
        return [
            material.material_id
            for module in self.modules
            for material in module.required_materials()
        ]

    def get_module(self, order: int) -> Module | None:
        return next((m for m in self.modules if m.order == order), None)

    def add_module(self, module: Module) -> None:
        """Insert a module, keeping modules sorted by order."""
        if self.get_module(module.order) is not None:
            msg = f"Module order {module.order} already used in course {self.course_id}"
            raise ValueError(msg)
        self.modules.append(module)
        self.modules.sort(key=lambda m: m.order)

    def find_material(self, material_id: str) -> Material | None:
        return next(
            (
                material
                for module in self.modules
                for material in module.materials
                if material.material_id == material_id
            ),
            None,
        )

    def get_enrollment(self, student_id: UUID) -> Enrollment | None:
        return self.students.get(student_id)

    def get_approved_enrollment(self, student_id: UUID) -> Enrollment | None:
        enrollment = self.students.get(student_id)
        if enrollment is None or not enrollment.is_approved:
            return None
        return enrollment

    def approved_enrollments(self) -> list[Enrollment]:
        return [e for e in self.students.values() if e.is_approved]

    def pending_enrollments(self) -> list[Enrollment]:
        return [e for e in self.students.values() if e.is_pending]

    def average_progress(self) -> int:
        """Round-half-up mean completion of approved students (0 when none)."""
        return mean_percentage(
            e.progress.completion_percentage for e in self.approved_enrollments()
        )

    def find_quiz(self, quiz_id: UUID) -> CourseQuiz | None:
        return next((q for q in self.quizzes if q.quiz_id == quiz_id), None)

    def attach_quiz(self, quiz_id: UUID, title: str, passing_score: float) -> None:
        """Add or refresh the reference to a quiz."""
        existing = self.find_quiz(quiz_id)
        if existing:
            existing.title = title
            existing.passing_score = passing_score
        else:
            self.quizzes.append(CourseQuiz(quiz_id, title, passing_score))

    def detach_quiz(self, quiz_id: UUID) -> bool:
        before = len(self.quizzes)
        self.quizzes = [q for q in self.quizzes if q.quiz_id != quiz_id]
        return len(self.quizzes) != before

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Course":
        """Create Course from its stored JSON document."""
        enrollments = [Enrollment.from_document(s) for s in doc.get("students", [])]
        return cls(
            course_id=UUID(str(doc["course_id"])),
            title=doc.get("title", ""),
            instructor_id=UUID(str(doc["instructor_id"])),
            status=doc.get("status") or CourseStatus.DRAFT.value,
            enrollment_requires_approval=doc.get("enrollment_requires_approval", False),
            modules=[Module.from_document(m) for m in doc.get("modules", [])],
            quizzes=[CourseQuiz.from_document(q) for q in doc.get("quizzes", [])],
            students={e.student_id: e for e in enrollments},
            created_at=from_iso(doc.get("created_at")),
            updated_at=from_iso(doc.get("updated_at")),
        )

    def to_document(self) -> dict[str, Any]:
        """Convert to a JSON-safe document."""
        return {
            "course_id": str(self.course_id),
            "title": self.title,
            "instructor_id": str(self.instructor_id),
            "status": self.status,
            "enrollment_requires_approval": self.enrollment_requires_approval,
            "modules": [m.to_document() for m in self.modules],
            "quizzes": [q.to_document() for q in self.quizzes],
            "students": [e.to_document() for e in self.students.values()],
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return (
            f"<Course {self.course_id} modules={len(self.modules)} "
            f"quizzes={len(self.quizzes)} students={len(self.students)}>"
        )
