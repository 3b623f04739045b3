"""
Admin Service

Identity management for admins and superadmins. Every mutation checks the
actor's role against the target's role on top of the route-level gate.
"""

import logging
import uuid
from typing import Optional, Sequence

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import IdentityAlreadyExists, InsufficientPermissions, ResourceNotFound
from app.core.permissions import can_manage
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.user import UserCreate, UserUpdate
from app.services import otp_service, user_service


logger = logging.getLogger(__name__)


def _check_can_manage(actor: User, target_role: UserRole, action: str) -> None:
    if not can_manage(actor.role, target_role):
        raise InsufficientPermissions(
            f"{actor.role.value} cannot {action} users with \"{UserRole(target_role).value}\" role"
        )


def _check_not_self(actor: User, target_id: uuid.UUID) -> None:
    if actor.id == target_id:
        raise InsufficientPermissions("Cannot delete your own account")


# ==================== USER MANAGEMENT ====================

async def list_users(
    db: AsyncSession,
    actor: User,
    role: Optional[UserRole] = None,
) -> Sequence[User]:
    """
    List users, newest first.

    Without a role filter admins see only regular users; superadmins see
    everyone.
    """
    query = select(User).order_by(User.created_at.desc())
    if role is not None:
        query = query.where(User.role == role)
    elif actor.role == UserRole.ADMIN:
        query = query.where(User.role == UserRole.USER)
    result = await db.execute(query)
    return result.scalars().all()


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    """
    Get a user by ID.

    Raises:
        ResourceNotFound: 404 if the user does not exist.
    """
    user = await user_service.get_user_by_id(db, user_id)
    if user is None:
        raise ResourceNotFound(f"User with ID {user_id} not found")
    return user


async def create_user(db: AsyncSession, actor: User, data: UserCreate) -> User:
    """
    Create a user with any role the actor may manage.

    Raises:
        InsufficientPermissions: 403 if the role is above the actor's reach.
        InvalidPhoneFormat: 400 for a bad phone number.
        IdentityAlreadyExists: 409 if the phone or email is taken.
    """
    _check_can_manage(actor, data.role, "create")

    phone = otp_service.normalize_phone(data.phone)
    await user_service.ensure_unique(db, phone=phone, email=data.email)

    user = await user_service.create_user(
        db,
        full_name=data.full_name,
        email=data.email,
        phone=phone,
        role=data.role,
    )
    logger.info("%s %s created %s %s", actor.role.value, actor.id, user.role.value, user.id)
    return user


async def update_user(
    db: AsyncSession,
    actor: User,
    user_id: uuid.UUID,
    data: UserUpdate,
) -> User:
    """
    Update a user the actor may manage.

    Both the target's current role and any requested new role must be
    manageable by the actor.

    Raises:
        ResourceNotFound: 404 if the user does not exist.
        InsufficientPermissions: 403 if the actor may not manage the target.
        IdentityAlreadyExists: 409 if the new phone or email is taken.
    """
    user = await get_user(db, user_id)
    _check_can_manage(actor, user.role, "update")
    if data.role is not None:
        _check_can_manage(actor, data.role, "assign")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "phone" in changes:
        changes["phone"] = otp_service.normalize_phone(changes["phone"])
    if "email" in changes:
        changes["email"] = changes["email"].lower()

    await user_service.ensure_unique(
        db,
        phone=changes.get("phone"),
        email=changes.get("email"),
        exclude_id=user.id,
    )

    for field, value in changes.items():
        setattr(user, field, value)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise IdentityAlreadyExists("User with this phone number or email already exists")
    await db.refresh(user)
    return user


async def delete_user(db: AsyncSession, actor: User, user_id: uuid.UUID) -> dict:
    """
    Delete a user the actor may manage.

    Raises:
        InsufficientPermissions: 403 when deleting oneself or an
            unmanageable role.
        ResourceNotFound: 404 if the user does not exist.
    """
    _check_not_self(actor, user_id)

    user = await get_user(db, user_id)
    _check_can_manage(actor, user.role, "delete")

    await db.delete(user)
    await db.commit()
    logger.info("%s %s deleted %s", actor.role.value, actor.id, user_id)
    return {"message": "User deleted successfully"}


# ==================== ADMIN MANAGEMENT (SuperAdmin only) ====================

async def list_admins(db: AsyncSession) -> Sequence[User]:
    """List admin accounts, newest first."""
    result = await db.execute(
        select(User).where(User.role == UserRole.ADMIN).order_by(User.created_at.desc())
    )
    return result.scalars().all()


async def create_admin(db: AsyncSession, actor: User, data: UserCreate) -> User:
    """Create an account with the admin role regardless of the requested role."""
    return await create_user(db, actor, data.model_copy(update={"role": UserRole.ADMIN}))


async def delete_admin(db: AsyncSession, actor: User, admin_id: uuid.UUID) -> dict:
    """
    Delete an admin account.

    Raises:
        InsufficientPermissions: 403 when deleting oneself.
        ResourceNotFound: 404 if the account does not exist.
        HTTPException: 400 if the account is not an admin.
    """
    _check_not_self(actor, admin_id)

    admin = await user_service.get_user_by_id(db, admin_id)
    if admin is None:
        raise ResourceNotFound(f"Admin with ID {admin_id} not found")

    if admin.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This user is not an admin",
        )

    _check_can_manage(actor, admin.role, "delete")

    await db.delete(admin)
    await db.commit()
    logger.info("%s %s deleted admin %s", actor.role.value, actor.id, admin_id)
    return {"message": "Admin deleted successfully"}
