"""
Login Log Models

Append-only login audit trails, one table per role so privileged-account
activity can be reviewed separately from ordinary users.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.clock import utcnow
from app.core.database import Base
from app.models.enums import LoginMethod, UserRole


class LoginLogMixin:
    """
    Columns shared by every login log table.

    Attributes:
        id: UUID primary key.
        user_id: Identity that logged in. Not a foreign key, so entries
            outlive deleted accounts.
        phone: Phone number at login time.
        email: Email at login time.
        full_name: Display name at login time.
        ip_address: Client IP, if known.
        user_agent: Raw client user-agent, if known.
        device_info: Coarse device class derived from the user-agent.
        login_method: Authentication method (otp).
        success: Whether the login succeeded.
        failure_reason: Reason for a failed login.
        login_at: When the login happened.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        index=True,
        nullable=False,
    )
    phone: Mapped[str] = mapped_column(String(10), index=True, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    device_info: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    login_method: Mapped[str] = mapped_column(
        String(20),
        default=LoginMethod.OTP.value,
        nullable=False,
    )
    success: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    failure_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    login_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        index=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(user_id={self.user_id}, login_at={self.login_at})>"


class UserLoginLog(LoginLogMixin, Base):
    __tablename__ = "user_login_logs"


class AdminLoginLog(LoginLogMixin, Base):
    __tablename__ = "admin_login_logs"


class SuperadminLoginLog(LoginLogMixin, Base):
    __tablename__ = "superadmin_login_logs"


LOGIN_LOG_MODELS: dict[UserRole, type[LoginLogMixin]] = {
    UserRole.USER: UserLoginLog,
    UserRole.ADMIN: AdminLoginLog,
    UserRole.SUPERADMIN: SuperadminLoginLog,
}
