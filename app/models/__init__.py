"""
Apadbandhav Backend - Models Module

This module exports all SQLAlchemy models for the application.
Import Base for Alembic migrations.
"""

from app.core.database import Base

# Enums
from app.models.enums import LoginMethod, UserRole

# Models
from app.models.user import User
from app.models.otp_code import OTPCode
from app.models.login_log import (
    LOGIN_LOG_MODELS,
    AdminLoginLog,
    SuperadminLoginLog,
    UserLoginLog,
)

__all__ = [
    # Base
    "Base",
    # Enums
    "UserRole",
    "LoginMethod",
    # Models
    "User",
    "OTPCode",
    "UserLoginLog",
    "AdminLoginLog",
    "SuperadminLoginLog",
    "LOGIN_LOG_MODELS",
]
