"""
Login Log Schemas

Pydantic models for login audit responses.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class LoginLogResponse(BaseModel):
    """Schema for a login audit entry."""

    id: uuid.UUID
    user_id: uuid.UUID
    phone: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    device_info: Optional[str] = None
    login_method: str
    success: bool
    failure_reason: Optional[str] = None
    login_at: datetime

    model_config = {"from_attributes": True}
