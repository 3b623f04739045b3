"""
Admin Routes

Identity management and login history for admins and superadmins.
"""

import uuid
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AdminUser, SuperAdminUser
from app.core.database import get_db
from app.models.enums import UserRole
from app.models.login_log import LoginLogMixin
from app.models.user import User
from app.schemas.login_log import LoginLogResponse
from app.schemas.user import UserCreate, UserResponse, UserUpdate
from app.services import admin_service, login_log_service


router = APIRouter(prefix="/admin", tags=["Admin"])


# ==================== USER MANAGEMENT ====================

@router.get(
    "/users",
    response_model=List[UserResponse],
    summary="List users",
)
async def list_users(
    actor: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    role: Optional[UserRole] = Query(None, description="Filter by role"),
) -> List[User]:
    """
    List users, newest first.

    Admins only see regular users unless they filter by role.
    """
    return list(await admin_service.list_users(db, actor, role))


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Get a user",
)
async def get_user(
    user_id: uuid.UUID,
    actor: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    return await admin_service.get_user(db, user_id)


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(
    data: UserCreate,
    actor: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """
    Create a user. Admins may only create regular users; superadmins may
    also create admins.

    Raises:
        InsufficientPermissions: 403 if the role is out of the caller's reach.
        IdentityAlreadyExists: 409 if the phone or email is taken.
    """
    return await admin_service.create_user(db, actor, data)


@router.patch(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
)
async def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    actor: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    return await admin_service.update_user(db, actor, user_id, data)


@router.delete(
    "/users/{user_id}",
    response_model=dict,
    summary="Delete a user",
)
async def delete_user(
    user_id: uuid.UUID,
    actor: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Delete a user the caller may manage.

    Raises:
        InsufficientPermissions: 403 when deleting yourself or a peer.
        ResourceNotFound: 404 if the user does not exist.
    """
    return await admin_service.delete_user(db, actor, user_id)


@router.get(
    "/users/{user_id}/login-logs",
    response_model=List[LoginLogResponse],
    summary="Login history of a user",
)
async def get_user_login_logs(
    user_id: uuid.UUID,
    actor: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(10, ge=1, le=500),
) -> List[LoginLogMixin]:
    return list(
        await login_log_service.list_login_logs(db, UserRole.USER, user_id=user_id, limit=limit)
    )


# ==================== ADMIN MANAGEMENT (SuperAdmin only) ====================

@router.get(
    "/admins",
    response_model=List[UserResponse],
    summary="List admins",
)
async def list_admins(
    actor: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> List[User]:
    return list(await admin_service.list_admins(db))


@router.post(
    "/admins",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an admin",
)
async def create_admin(
    data: UserCreate,
    actor: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Create an admin account. Any role in the payload is ignored."""
    return await admin_service.create_admin(db, actor, data)


@router.delete(
    "/admins/{admin_id}",
    response_model=dict,
    summary="Delete an admin",
)
async def delete_admin(
    admin_id: uuid.UUID,
    actor: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """
    Delete an admin account.

    Raises:
        InsufficientPermissions: 403 when deleting yourself.
        ResourceNotFound: 404 if the account does not exist.
        HTTPException: 400 if the account is not an admin.
    """
    return await admin_service.delete_admin(db, actor, admin_id)


@router.get(
    "/admins/{admin_id}/login-logs",
    response_model=List[LoginLogResponse],
    summary="Login history of an admin",
)
async def get_admin_login_logs(
    admin_id: uuid.UUID,
    actor: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(10, ge=1, le=500),
) -> List[LoginLogMixin]:
    return list(
        await login_log_service.list_login_logs(db, UserRole.ADMIN, user_id=admin_id, limit=limit)
    )


# ==================== LOGIN LOGS ====================

@router.get(
    "/login-logs/users",
    response_model=List[LoginLogResponse],
    summary="Recent user logins",
)
async def get_all_user_login_logs(
    actor: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(50, ge=1, le=500),
) -> List[LoginLogMixin]:
    return list(await login_log_service.list_login_logs(db, UserRole.USER, limit=limit))


@router.get(
    "/login-logs/admins",
    response_model=List[LoginLogResponse],
    summary="Recent admin logins",
)
async def get_all_admin_login_logs(
    actor: SuperAdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(50, ge=1, le=500),
) -> List[LoginLogMixin]:
    return list(await login_log_service.list_login_logs(db, UserRole.ADMIN, limit=limit))
