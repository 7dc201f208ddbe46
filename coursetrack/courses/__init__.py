"""Course aggregate: modules, materials, quiz references and enrollments."""

from .models import (
    COURSES_TABLES_CQL,
    Course,
    CourseQuiz,
    CourseStatus,
    Material,
    MaterialType,
    Module,
)


__all__ = [
    "COURSES_TABLES_CQL",
    "Course",
    "CourseQuiz",
    "CourseStatus",
    "Material",
    "MaterialType",
    "Module",
]
