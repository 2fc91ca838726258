"""
FastAPI dependency functions.

Authentication resolves the bearer token to a `User` loaded on the
request's own database session, so services can modify the caller and
commit in the same unit of work. Role checks are layered on top with
`require_roles`.
"""

import logging
from typing import Annotated, Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from budget_planning.core.database import get_db
from budget_planning.core.security import decode_access_token
from budget_planning.models.user import Role, User
from budget_planning.repositories.user import UserRepository

logger = logging.getLogger(__name__)


# HTTP Bearer token scheme
security = HTTPBearer()

WRONG_ROLE_DETAIL = "Wrong role"

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: DatabaseSession,
) -> User:
    """
    Resolve the bearer token to the stored user.

    Args:
        credentials: HTTP Bearer credentials from the Authorization header
        db: Request database session

    Returns:
        The authenticated user, attached to `db`

    Raises:
        HTTPException 401: If the token is invalid, expired, or its
            subject no longer exists

    Example:
        @router.get("/me")
        async def me(current_user: CurrentUser):
            return UserResponse.from_user(current_user)
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token_data = decode_access_token(credentials.credentials)
    if token_data is None:
        raise credentials_exception

    # Role is re-read from the database, the claim is informational only
    user = await UserRepository(db).get_by_email(token_data.email)
    if user is None:
        raise credentials_exception

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_roles(*roles: Role) -> Callable:
    """
    Build a dependency admitting only users with one of `roles`.

    Raises:
        HTTPException 403: With detail "Wrong role" for any other role

    Example:
        AdminUser = Annotated[User, Depends(require_roles(Role.ADMIN))]
    """
    allowed = frozenset(roles)

    async def check_role(request: Request, current_user: CurrentUser) -> User:
        if current_user.role not in allowed:
            logger.warning(
                "Role check failed",
                extra={
                    "user_id": current_user.id,
                    "role": current_user.role.value,
                    "path": request.url.path,
                    "request_id": getattr(request.state, "request_id", None),
                },
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=WRONG_ROLE_DETAIL,
            )
        return current_user

    return check_role


AdminUser = Annotated[User, Depends(require_roles(Role.ADMIN))]
ParentOrAdminUser = Annotated[User, Depends(require_roles(Role.PARENT, Role.ADMIN))]
