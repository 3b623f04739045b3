"""
User Service

Identity store operations: lookups, creation, last-login tracking and
seeding of privileged accounts.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utcnow
from app.core.config import settings
from app.core.exceptions import IdentityAlreadyExists
from app.models.enums import UserRole
from app.models.user import User


logger = logging.getLogger(__name__)


async def get_user_by_id(db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
    """Fetch a user by primary key."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_phone(db: AsyncSession, phone: str) -> Optional[User]:
    """Fetch a user by normalized phone number."""
    result = await db.execute(select(User).where(User.phone == phone))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def ensure_unique(
    db: AsyncSession,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    """
    Reject a phone or email already held by another user.

    Raises:
        IdentityAlreadyExists: If either value is taken.
    """
    if phone and (existing := await get_user_by_phone(db, phone)) and existing.id != exclude_id:
        raise IdentityAlreadyExists()
    if email and (existing := await get_user_by_email(db, email)) and existing.id != exclude_id:
        raise IdentityAlreadyExists("User with this email already exists")


async def create_user(
    db: AsyncSession,
    full_name: str,
    email: str,
    phone: str,
    role: UserRole = UserRole.USER,
    is_verified: bool = False,
) -> User:
    """
    Create and persist a user.

    Args:
        db: Database session.
        full_name: Display name.
        email: Email address (stored lowercased).
        phone: Normalized 10-digit phone number.
        role: Role to assign.
        is_verified: Whether the phone was proven by OTP.

    Returns:
        User: The created user, refreshed from the database.

    Raises:
        IdentityAlreadyExists: 409 if the phone or email was taken concurrently.
    """
    user = User(
        full_name=full_name.strip(),
        email=email.lower(),
        phone=phone,
        role=role,
        is_active=True,
        is_verified=is_verified,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise IdentityAlreadyExists("User with this phone number or email already exists")
    await db.refresh(user)

    logger.info("Created %s account for %s", role.value, phone)
    return user


async def update_last_login(
    db: AsyncSession,
    user_id: uuid.UUID,
    ip_address: Optional[str] = None,
) -> None:
    """Record the time and client IP of a successful login."""
    user = await get_user_by_id(db, user_id)
    if user is None:
        return
    user.last_login_at = utcnow()
    user.last_login_ip = ip_address
    await db.commit()


async def seed_privileged_users(db: AsyncSession) -> int:
    """
    Create the configured superadmin and admin accounts if missing.

    An account is skipped when any user already holds its phone or email.

    Returns:
        int: Number of accounts created.
    """
    seeds = [
        (UserRole.SUPERADMIN, "Super Admin", settings.SEED_SUPERADMIN_PHONE, settings.SEED_SUPERADMIN_EMAIL),
        (UserRole.ADMIN, "Admin User", settings.SEED_ADMIN_PHONE, settings.SEED_ADMIN_EMAIL),
    ]

    created = 0
    for role, full_name, phone, email in seeds:
        if not phone or not email:
            continue
        result = await db.execute(
            select(User).where(or_(User.phone == phone, User.email == email.lower()))
        )
        if result.scalars().first() is not None:
            logger.info("%s account %s already exists", role.value, phone)
            continue
        await create_user(db, full_name, email, phone, role=role, is_verified=True)
        created += 1

    return created


async def update_profile(
    db: AsyncSession,
    user: User,
    full_name: Optional[str] = None,
    email: Optional[str] = None,
) -> User:
    """
    Update the caller's own name and email.

    Raises:
        IdentityAlreadyExists: 409 if the new email belongs to someone else.
    """
    if email is not None:
        await ensure_unique(db, email=email, exclude_id=user.id)
        user.email = email.lower()
    if full_name is not None:
        user.full_name = full_name.strip()

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise IdentityAlreadyExists("User with this email already exists")
    await db.refresh(user)
    return user
