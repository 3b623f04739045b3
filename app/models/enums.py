"""
Database Enums

Python Enums that map to database ENUM types.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration, ordered user < admin < superadmin."""
    USER = "user"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class LoginMethod(str, enum.Enum):
    """How an identity authenticated."""
    OTP = "otp"
