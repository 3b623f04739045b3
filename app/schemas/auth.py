"""
Auth Schemas

Pydantic models for authentication request/response validation.
"""

from pydantic import BaseModel, EmailStr, Field

from app.schemas.user import PHONE_FIELD_DESCRIPTION, UserSummary


class SendOTPRequest(BaseModel):
    """Schema for send OTP request."""

    phone: str = Field(..., min_length=1, max_length=20, description=PHONE_FIELD_DESCRIPTION)


class SendOTPResponse(BaseModel):
    """Schema for send OTP response."""

    message: str
    user_exists: bool


class VerifyOTPRequest(BaseModel):
    """Schema for OTP login request."""

    phone: str = Field(..., min_length=1, max_length=20, description=PHONE_FIELD_DESCRIPTION)
    otp: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$", description="6-digit OTP code")


class SignupRequest(BaseModel):
    """Schema for signup request."""

    phone: str = Field(..., min_length=1, max_length=20, description=PHONE_FIELD_DESCRIPTION)
    otp: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$", description="6-digit OTP code")
    full_name: str = Field(..., min_length=2, max_length=100, description="User's full name")
    email: EmailStr = Field(..., description="User's email address")


class AuthResponse(BaseModel):
    """Session token plus the identity it was issued to."""

    access_token: str
    token_type: str = "bearer"
    user: UserSummary
