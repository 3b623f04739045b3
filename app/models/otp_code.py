"""
OTP Code Model

Stores one-time login codes keyed by phone number.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class OTPCode(Base):
    """
    OTP Code model for phone authentication.

    At most one record exists per phone: issuing a new code deletes the old
    one first.

    Attributes:
        id: UUID primary key.
        phone: Normalized 10-digit phone number (unique).
        code_hash: SHA-256 of the 6-digit code.
        expires_at: The code is invalid at or after this instant.
        consumed: Set once the code has been verified successfully.
        consumed_at: When the code was consumed (null if unused).
        attempts: Verification attempts made against this record.
        created_at: Creation timestamp.
    """

    __tablename__ = "otp_codes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    phone: Mapped[str] = mapped_column(
        String(10),
        unique=True,
        index=True,
        nullable=False,
    )
    code_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
    )
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    consumed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    consumed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    attempts: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<OTPCode(id={self.id}, phone={self.phone}, consumed={self.consumed})>"
