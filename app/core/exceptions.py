"""
Domain Exceptions

HTTPException subclasses raised by services and dependencies. Each carries a
fixed status code and a stable, user-safe message.
"""

import enum
from typing import Optional

from fastapi import HTTPException, status


class OtpFailure(str, enum.Enum):
    """Why an OTP verification was rejected."""
    NOT_FOUND = "NOT_FOUND"
    EXPIRED = "EXPIRED"
    INCORRECT = "INCORRECT"
    ALREADY_USED = "ALREADY_USED"


class AppError(HTTPException):
    """Base class for errors with a default status and message."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Bad request"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.message,
            headers=headers,
        )


class InvalidPhoneFormat(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid phone number. Must be a valid 10-digit Indian mobile number."


class OtpDeliveryFailed(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Failed to send OTP"


class OtpVerificationFailed(AppError):
    """Raised when a submitted OTP does not verify."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid OTP"

    def __init__(self, reason: OtpFailure, detail: Optional[str] = None):
        self.reason = reason
        super().__init__(detail)


class IdentityNotFound(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "User not found. Please sign up first."


class IdentityAlreadyExists(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "User with this phone number already exists. Please login instead."


class AccountDisabled(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Account is disabled"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Could not validate credentials"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InsufficientPermissions(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"


class ResourceNotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"
