"""Acting-user identity and role checks.

Authentication happens upstream; this package only reads the asserted
identity and answers role questions about it.
"""

from .permissions import UserRole, has_permission
from .schemas import Actor


__all__ = ["Actor", "UserRole", "has_permission"]
