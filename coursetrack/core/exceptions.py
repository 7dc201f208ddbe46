"""Base class for typed domain errors.

Each error carries a stable machine-readable ``code``; the HTTP layer maps
codes to status codes and the message is safe to show to users.
"""


class DomainError(Exception):
    """Base domain error."""

    def __init__(self, message: str, code: str = "domain_error"):
        self.message = message
        self.code = code
        super().__init__(message)
