"""Course structure errors.

Lookups and permission failures reuse the progress errors
(``CourseNotFoundError``, ``NotAuthorizedError``).
"""

from coursetrack.core.exceptions import DomainError


class CourseError(DomainError):
    """Base course error."""

    def __init__(self, message: str, code: str = "course_error"):
        super().__init__(message, code)


class ModuleExistsError(CourseError):
    """Module order already used in the course."""

    def __init__(self, message: str = "A module with this order already exists"):
        super().__init__(message, "module_exists")


class MaterialExistsError(CourseError):
    """Material id already used in the course."""

    def __init__(self, message: str = "A material with this id already exists"):
        super().__init__(message, "material_exists")
