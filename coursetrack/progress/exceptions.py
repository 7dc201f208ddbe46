"""Progress and enrollment errors."""

from coursetrack.core.exceptions import DomainError


class ProgressError(DomainError):
    """Base progress error."""

    def __init__(self, message: str, code: str = "progress_error"):
        super().__init__(message, code)


class NotEnrolledError(ProgressError):
    """Student lacks an approved enrollment in the course."""

    def __init__(self, message: str = "Student is not enrolled in this course"):
        super().__init__(message, "not_enrolled")


class AlreadyEnrolledError(ProgressError):
    """Student already has an enrollment (in any status)."""

    def __init__(self, message: str = "Already enrolled in this course"):
        super().__init__(message, "already_enrolled")


class CourseNotFoundError(ProgressError):
    """Course not found."""

    def __init__(self, message: str = "Course not found"):
        super().__init__(message, "course_not_found")


class CourseNotPublishedError(ProgressError):
    """Enrollment attempted on a draft or archived course."""

    def __init__(self, message: str = "Cannot enroll in an unpublished course"):
        super().__init__(message, "course_not_published")


class NotAuthorizedError(ProgressError):
    """Actor is neither the course instructor nor an admin."""

    def __init__(self, message: str = "Not authorized for this course"):
        super().__init__(message, "not_authorized")
