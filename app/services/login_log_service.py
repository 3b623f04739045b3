"""
Login Log Service

Best-effort login auditing into role-specific logs, plus the read side used
by the admin panel.
"""

import logging
import uuid
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utcnow
from app.models.enums import LoginMethod, UserRole
from app.models.login_log import LOGIN_LOG_MODELS, LoginLogMixin
from app.models.user import User


logger = logging.getLogger(__name__)


# Checked in order; first substring found wins
DEVICE_PATTERNS: tuple[tuple[str, str], ...] = (
    ("Mobile", "Mobile"),
    ("Tablet", "Tablet"),
    ("Windows", "Windows PC"),
    ("Mac", "Mac"),
    ("Linux", "Linux"),
)


def parse_device_info(user_agent: Optional[str]) -> str:
    """Classify a user-agent string into a coarse device class."""
    if not user_agent:
        return "Unknown"
    for needle, label in DEVICE_PATTERNS:
        if needle in user_agent:
            return label
    return "Desktop"


def log_model_for(role: UserRole) -> type[LoginLogMixin]:
    """Table that holds login entries for a role."""
    return LOGIN_LOG_MODELS[UserRole(role)]


async def record_login(
    db: AsyncSession,
    user: User,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> None:
    """
    Append a successful login to the log matching the user's role.

    Failures are logged and swallowed; a login never fails because its
    audit entry could not be written.
    """
    phone = user.phone
    try:
        model = log_model_for(user.role)
        db.add(
            model(
                user_id=user.id,
                phone=user.phone,
                email=user.email,
                full_name=user.full_name,
                ip_address=ip_address,
                user_agent=user_agent,
                device_info=parse_device_info(user_agent),
                login_method=LoginMethod.OTP.value,
                success=True,
                login_at=utcnow(),
            )
        )
        await db.commit()
        logger.info("%s login logged: %s", user.role.value, phone)
    except Exception:
        logger.exception("Failed to log login for %s", phone)
        await db.rollback()


async def list_login_logs(
    db: AsyncSession,
    role: UserRole,
    user_id: Optional[uuid.UUID] = None,
    limit: int = 50,
) -> Sequence[LoginLogMixin]:
    """
    Most recent login entries for a role, optionally for one user.

    Args:
        db: Database session.
        role: Which role's log to read.
        user_id: Restrict to a single identity.
        limit: Maximum number of entries.

    Returns:
        Entries ordered newest first.
    """
    model = log_model_for(role)
    query = select(model).order_by(model.login_at.desc()).limit(limit)
    if user_id is not None:
        query = query.where(model.user_id == user_id)
    result = await db.execute(query)
    return result.scalars().all()
