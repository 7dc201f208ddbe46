"""Quiz and grading errors."""

from coursetrack.core.exceptions import DomainError


class QuizError(DomainError):
    """Base quiz error."""

    def __init__(self, message: str, code: str = "quiz_error"):
        super().__init__(message, code)


class QuizNotFoundError(QuizError):
    """Quiz not found."""

    def __init__(self, message: str = "Quiz not found"):
        super().__init__(message, "quiz_not_found")


class QuizInactiveError(QuizError):
    """Quiz is not accepting attempts."""

    def __init__(self, message: str = "This quiz is not currently active"):
        super().__init__(message, "quiz_inactive")


class NoActiveAttemptError(QuizError):
    """Submit without a started attempt."""

    def __init__(self, message: str = "No active attempt found"):
        super().__init__(message, "no_active_attempt")


class AlreadyCompletedError(QuizError):
    """Attempt was already submitted and graded."""

    def __init__(self, message: str = "Attempt has already been submitted"):
        super().__init__(message, "attempt_already_completed")


class InvalidAnswerSetError(QuizError):
    """Submitted answers do not fit the quiz's questions."""

    def __init__(self, message: str = "Answers do not match the quiz questions"):
        super().__init__(message, "invalid_answer_set")


class QuizLockedError(QuizError):
    """Quiz cannot change once students have attempted it."""

    def __init__(self, message: str = "Quiz cannot change after students attempted it"):
        super().__init__(message, "quiz_locked")
