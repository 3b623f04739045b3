"""
Apadbandhav Backend - Schemas Module

Pydantic models for request/response validation.
"""

from app.schemas.user import (
    ProfileUpdate,
    UserCreate,
    UserResponse,
    UserSummary,
    UserUpdate,
)
from app.schemas.token import TokenPayload
from app.schemas.auth import (
    AuthResponse,
    SendOTPRequest,
    SendOTPResponse,
    SignupRequest,
    VerifyOTPRequest,
)
from app.schemas.login_log import LoginLogResponse

__all__ = [
    # User
    "UserSummary",
    "UserResponse",
    "UserCreate",
    "UserUpdate",
    "ProfileUpdate",
    # Token
    "TokenPayload",
    # Auth
    "SendOTPRequest",
    "SendOTPResponse",
    "VerifyOTPRequest",
    "SignupRequest",
    "AuthResponse",
    # Login logs
    "LoginLogResponse",
]
