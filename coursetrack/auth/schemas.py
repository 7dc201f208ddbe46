"""Acting-user schema."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .permissions import UserRole


class Actor(BaseModel):
    """The authenticated user performing an operation."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
