"""
Auth Service

OTP login and signup orchestration.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AccountDisabled, IdentityNotFound, OtpVerificationFailed
from app.core.security import create_access_token
from app.models.enums import UserRole
from app.schemas.auth import AuthResponse, SendOTPResponse
from app.schemas.user import UserSummary
from app.services import login_log_service, otp_service, user_service


logger = logging.getLogger(__name__)


async def request_otp(db: AsyncSession, phone: str) -> SendOTPResponse:
    """
    Issue an OTP for login or signup.

    The code is sent whether or not an account exists; the response tells
    the client which flow to continue with.

    Raises:
        InvalidPhoneFormat: If the number is not a valid mobile number.
        OtpDeliveryFailed: If the SMS gateway rejects the message.
    """
    formatted = otp_service.normalize_phone(phone)
    user_exists = await user_service.get_user_by_phone(db, formatted) is not None

    await otp_service.send_otp(db, formatted)

    return SendOTPResponse(
        message=(
            "OTP sent successfully. Please login."
            if user_exists
            else "OTP sent successfully. Please complete signup."
        ),
        user_exists=user_exists,
    )


async def _verify_or_raise(db: AsyncSession, phone: str, otp: str) -> None:
    verification = await otp_service.verify_otp(db, phone, otp)
    if not verification.is_valid:
        raise OtpVerificationFailed(verification.reason, verification.message)


async def login(
    db: AsyncSession,
    phone: str,
    otp: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuthResponse:
    """
    Log in with a phone number and OTP.

    **Flow:**
    1. Verify the OTP
    2. Find the account (the OTP is cleared if there is none)
    3. Clear the OTP so it cannot be replayed
    4. Mint the session token
    5. Record the login and update last-login info (best effort)

    Raises:
        OtpVerificationFailed: 401 if the OTP is invalid.
        IdentityNotFound: 401 if no account uses this phone.
        AccountDisabled: 403 if the account is deactivated.
    """
    formatted = otp_service.format_phone_number(phone)

    await _verify_or_raise(db, formatted, otp)

    user = await user_service.get_user_by_phone(db, formatted)
    if user is None:
        await otp_service.clear_otp(db, formatted)
        raise IdentityNotFound()

    if not user.is_active:
        await otp_service.clear_otp(db, formatted)
        raise AccountDisabled()

    await otp_service.clear_otp(db, formatted)

    response = AuthResponse(
        access_token=create_access_token(user),
        user=UserSummary.model_validate(user),
    )
    user_id = user.id

    await login_log_service.record_login(db, user, ip_address, user_agent)

    try:
        await user_service.update_last_login(db, user_id, ip_address)
    except Exception:
        logger.exception("Failed to update last login for %s", formatted)
        await db.rollback()

    return response


async def signup(
    db: AsyncSession,
    phone: str,
    otp: str,
    full_name: str,
    email: str,
) -> AuthResponse:
    """
    Create an account after proving control of the phone number.

    The existing-account check runs after OTP verification so signup cannot
    be used to discover registered numbers without a valid code. Signup
    does not write a login log entry.

    Raises:
        InvalidPhoneFormat: 400 if the number is not a valid mobile number.
        OtpVerificationFailed: 401 if the OTP is invalid.
        IdentityAlreadyExists: 409 if the phone or email is taken.
    """
    formatted = otp_service.normalize_phone(phone)

    await _verify_or_raise(db, formatted, otp)

    await user_service.ensure_unique(db, phone=formatted, email=email)

    user = await user_service.create_user(
        db,
        full_name=full_name,
        email=email,
        phone=formatted,
        role=UserRole.USER,
        is_verified=True,
    )

    await otp_service.clear_otp(db, formatted)

    return AuthResponse(
        access_token=create_access_token(user),
        user=UserSummary.model_validate(user),
    )
