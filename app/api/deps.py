"""
API Dependencies

Reusable dependencies for API routes including authentication and role
checks.
"""

from typing import Annotated, Callable

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import Unauthenticated
from app.core.permissions import authorize
from app.core.security import decode_access_token
from app.models.enums import UserRole
from app.models.user import User
from app.services import user_service


# Tokens are issued by the OTP verification endpoint. Missing headers are
# reported by get_current_user so every 401 has the same shape.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/verify-otp", auto_error=False)


async def _resolve_user(db: AsyncSession, token: str | None) -> User | None:
    if not token:
        return None

    payload = decode_access_token(token)
    if payload is None:
        return None

    return await user_service.get_user_by_id(db, payload.sub)


async def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Dependency to get the current authenticated user.

    This dependency:
    1. Extracts the JWT token from the Authorization header
    2. Decodes and validates the token
    3. Fetches the user from the database
    4. Raises 401 if the token is invalid or the user is gone or disabled

    Args:
        token: JWT token from Authorization header (auto-extracted).
        db: Database session (auto-injected).

    Returns:
        User: The authenticated user object.

    Raises:
        Unauthenticated: 401 if authentication fails.
    """
    if not token:
        raise Unauthenticated("Not authenticated")

    user = await _resolve_user(db, token)
    if user is None or not user.is_active:
        raise Unauthenticated()

    return user


async def get_current_user_optional(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """
    Dependency to optionally get the current authenticated user.

    Returns None instead of raising when no valid token is provided.
    """
    user = await _resolve_user(db, token)
    if user is None or not user.is_active:
        return None
    return user


def require_roles(*roles: UserRole) -> Callable:
    """
    Build a dependency that admits callers ranked at or above the lowest of
    ``roles``.

    The role is read from the stored user rather than the token, so a role
    change takes effect on the next request.

    Usage:
        @router.get("/users")
        async def list_users(actor: Annotated[User, Depends(require_roles(UserRole.ADMIN))]):
            ...
    """
    async def dependency(
        current_user: Annotated[User | None, Depends(get_current_user_optional)],
        token: Annotated[str | None, Depends(oauth2_scheme)],
    ) -> User:
        if current_user is None and token:
            raise Unauthenticated()
        authorize(roles, current_user.role if current_user else None)
        return current_user

    return dependency


CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_roles(UserRole.ADMIN))]
SuperAdminUser = Annotated[User, Depends(require_roles(UserRole.SUPERADMIN))]
