"""
Token Schemas

Pydantic models for JWT token handling.
"""

import uuid

from pydantic import BaseModel

from app.models.enums import UserRole


class TokenPayload(BaseModel):
    """Schema for decoded token payload."""

    sub: uuid.UUID  # User ID
    phone: str
    role: UserRole
    exp: int  # Expiration timestamp
