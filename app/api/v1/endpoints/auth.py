"""
Authentication Routes

Handles OTP delivery, OTP login, signup and the current-identity lookup.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import CurrentUser
from app.core.database import get_db
from app.middleware.rate_limit import get_client_ip, rate_limit, send_otp_limiter, verify_otp_limiter
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    SendOTPRequest,
    SendOTPResponse,
    SignupRequest,
    VerifyOTPRequest,
)
from app.schemas.user import UserSummary
from app.services import auth_service


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/send-otp",
    response_model=SendOTPResponse,
    summary="Send an OTP to a mobile number",
)
@rate_limit(send_otp_limiter)
async def send_otp(
    request: Request,
    data: SendOTPRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SendOTPResponse:
    """
    Send a one-time code by SMS.

    **Flow:**
    1. Validate and normalize the phone number
    2. Check whether an account already uses it
    3. Store a fresh OTP, replacing any previous one
    4. Deliver the OTP by SMS

    The response's ``user_exists`` tells the client whether to continue
    with login or signup.

    Raises:
        InvalidPhoneFormat: 400 for a bad phone number.
        OtpDeliveryFailed: 400 if the SMS gateway rejects the message.
        RateLimitExceeded: 429 when called too often.
    """
    return await auth_service.request_otp(db, data.phone)


@router.post(
    "/verify-otp",
    response_model=AuthResponse,
    summary="Log in with an OTP",
)
@rate_limit(verify_otp_limiter)
async def verify_otp(
    request: Request,
    data: VerifyOTPRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """
    Verify an OTP and return a session token for an existing account.

    Raises:
        OtpVerificationFailed: 401 if the OTP is missing, expired, wrong or used.
        IdentityNotFound: 401 if no account uses this phone.
        AccountDisabled: 403 if the account is deactivated.
        RateLimitExceeded: 429 when called too often.
    """
    return await auth_service.login(
        db,
        data.phone,
        data.otp,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
    )


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account with an OTP",
)
async def signup(
    data: SignupRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """
    Verify an OTP and create a new user account.

    Raises:
        InvalidPhoneFormat: 400 for a bad phone number.
        OtpVerificationFailed: 401 if the OTP does not verify.
        IdentityAlreadyExists: 409 if the phone or email is taken.
    """
    return await auth_service.signup(
        db,
        phone=data.phone,
        otp=data.otp,
        full_name=data.full_name,
        email=data.email,
    )


@router.get(
    "/me",
    response_model=UserSummary,
    summary="Get the authenticated identity",
)
async def get_me(current_user: CurrentUser) -> User:
    """Return the identity the bearer token was issued to."""
    return current_user
