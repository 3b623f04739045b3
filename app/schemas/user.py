"""
User Schemas

Pydantic models for user request/response validation.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.models.enums import UserRole


PHONE_FIELD_DESCRIPTION = "10-digit mobile number, optionally prefixed with +91"


class UserSummary(BaseModel):
    """Identity summary returned alongside session tokens."""

    id: uuid.UUID
    full_name: str
    email: str
    phone: str
    role: UserRole

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    """Schema for user response."""

    id: uuid.UUID
    full_name: str
    email: str
    phone: str
    role: UserRole
    is_active: bool
    is_verified: bool
    last_login_at: Optional[datetime] = None
    last_login_ip: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserCreate(BaseModel):
    """Schema for creating a user from the admin panel."""

    full_name: str = Field(..., min_length=2, max_length=100, description="User's full name")
    email: EmailStr = Field(..., description="User's email address")
    phone: str = Field(..., min_length=1, max_length=20, description=PHONE_FIELD_DESCRIPTION)
    role: UserRole = Field(default=UserRole.USER, description="User role")

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip()


class UserUpdate(BaseModel):
    """Schema for admin updates; only provided fields change."""

    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1, max_length=20, description=PHONE_FIELD_DESCRIPTION)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class ProfileUpdate(BaseModel):
    """Schema for updating the caller's own profile."""

    email: Optional[EmailStr] = Field(None, description="New email address")
    full_name: Optional[str] = Field(None, min_length=2, max_length=100, description="New full name")
