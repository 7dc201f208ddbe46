"""Student progress tracking module.

Provides:
- Course enrollment with optional instructor approval
- Lesson and module completion
- Quiz score recording and completion percentage
"""

from .models import Enrollment, EnrollmentStatus, ProgressRecord, QuizScore


__all__ = [
    "Enrollment",
    "EnrollmentStatus",
    "ProgressRecord",
    "QuizScore",
]
