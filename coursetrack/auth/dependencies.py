"""FastAPI dependencies for the acting user.

The API gateway authenticates requests and forwards the identity in
trusted headers. These dependencies parse and validate those headers.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status

from coursetrack.core.context import set_user

from .permissions import UserRole, has_permission
from .schemas import Actor


async def get_current_actor(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Actor:
    """Build the acting user from gateway headers.

    Raises:
        HTTPException(401): If identity headers are missing or malformed
    """
    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity",
        )

    try:
        actor = Actor(id=UUID(x_user_id), role=UserRole(x_user_role.lower()))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user identity",
        ) from e

    set_user(actor.id, actor.role.value)
    return actor


def require_permission(required_role: UserRole):
    """Create dependency requiring at least a permission level."""

    async def permission_checker(
        actor: Annotated[Actor, Depends(get_current_actor)],
    ) -> Actor:
        if not has_permission(actor.role, required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permission",
            )
        return actor

    return permission_checker


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
TeacherActor = Annotated[Actor, Depends(require_permission(UserRole.TEACHER))]
