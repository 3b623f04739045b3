"""
OTP Service

Handles phone normalization, OTP generation, storage, delivery and
verification.
"""

import hashlib
import hmac
import logging
import re
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import ensure_utc, utcnow
from app.core.config import settings
from app.core.exceptions import InvalidPhoneFormat, OtpDeliveryFailed, OtpFailure
from app.models.otp_code import OTPCode
from app.services import sms_service


logger = logging.getLogger(__name__)


PHONE_PATTERN = re.compile(r"^([6-9]\d{9}|91[6-9]\d{9})$")
PHONE_SEPARATORS = re.compile(r"[\s\-+]")

OTP_MESSAGES = {
    OtpFailure.NOT_FOUND: "OTP not found. Please request a new one.",
    OtpFailure.EXPIRED: "OTP has expired. Please request a new one.",
    OtpFailure.INCORRECT: "Invalid OTP",
    OtpFailure.ALREADY_USED: "OTP already used. Please request a new one.",
}


@dataclass(frozen=True)
class OTPVerification:
    """Result of checking a submitted code."""
    is_valid: bool
    message: str
    reason: Optional[OtpFailure] = None


def format_phone_number(phone: str) -> str:
    """
    Normalize a phone number to its 10-digit form.

    Strips spaces, hyphens and '+', then drops a leading 91 country code
    from 12-digit numbers. Idempotent for valid numbers.
    """
    clean = PHONE_SEPARATORS.sub("", phone)
    if clean.startswith("91") and len(clean) == 12:
        clean = clean[2:]
    return clean


def validate_phone_number(phone: str) -> bool:
    """Check for a 10-digit Indian mobile number (or its 91-prefixed form)."""
    return PHONE_PATTERN.match(PHONE_SEPARATORS.sub("", phone)) is not None


def normalize_phone(phone: str) -> str:
    """
    Format and validate a phone number.

    Raises:
        InvalidPhoneFormat: If the number is not a valid mobile number.
    """
    formatted = format_phone_number(phone)
    if not validate_phone_number(formatted):
        raise InvalidPhoneFormat()
    return formatted


def generate_otp() -> str:
    """Generate a 6-digit OTP code in [100000, 999999]."""
    return str(secrets.randbelow(900000) + 100000)


def hash_otp(code: str) -> str:
    """Hash an OTP code using SHA-256."""
    return hashlib.sha256(code.encode()).hexdigest()


async def store_otp(db: AsyncSession, phone: str, otp_code: str) -> OTPCode:
    """
    Replace any existing OTP for the phone with a new one.

    Args:
        db: Database session.
        phone: Normalized 10-digit phone number.
        otp_code: Plain text code to store (hashed before persisting).

    Returns:
        OTPCode: The stored record.
    """
    expires_at = utcnow() + timedelta(minutes=settings.OTP_EXPIRY_MINUTES)

    # A concurrent send for the same phone can insert between our delete and
    # insert; retry once so the later request wins.
    for attempt in range(2):
        await db.execute(delete(OTPCode).where(OTPCode.phone == phone))
        record = OTPCode(
            phone=phone,
            code_hash=hash_otp(otp_code),
            expires_at=expires_at,
            consumed=False,
            attempts=0,
        )
        db.add(record)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            if attempt:
                raise
            continue
        break

    logger.info("OTP stored for %s, expires at %s", phone, expires_at.isoformat())
    return record


async def send_otp(db: AsyncSession, phone: str) -> str:
    """
    Generate, store and deliver an OTP.

    The record is persisted before delivery. If the gateway then reports a
    failure the record stays valid until it expires.

    Args:
        db: Database session.
        phone: Raw phone number as submitted.

    Returns:
        str: The normalized phone number.

    Raises:
        InvalidPhoneFormat: If the number is not a valid mobile number.
        OtpDeliveryFailed: If the SMS gateway rejects the message.
    """
    formatted = normalize_phone(phone)
    otp_code = generate_otp()

    await store_otp(db, formatted, otp_code)

    result = await sms_service.send_otp_sms(formatted, otp_code)
    if not result.success:
        logger.warning("OTP delivery failed for %s: %s", formatted, result.detail)
        raise OtpDeliveryFailed(result.detail)

    return formatted


async def verify_otp(db: AsyncSession, phone: str, code: str) -> OTPVerification:
    """
    Verify an OTP code and mark it consumed.

    The success path is a single conditional UPDATE, so two concurrent
    requests with the same code cannot both succeed. When it matches no row
    the record is read back to explain why.

    Args:
        db: Database session.
        phone: Phone number (raw or normalized).
        code: Submitted OTP code.

    Returns:
        OTPVerification: Validity, user-facing message and failure reason.
    """
    formatted = format_phone_number(phone)
    now = utcnow()
    code_hash = hash_otp(code)

    result = await db.execute(
        update(OTPCode)
        .where(
            OTPCode.phone == formatted,
            OTPCode.code_hash == code_hash,
            OTPCode.consumed.is_(False),
            OTPCode.expires_at > now,
        )
        .values(
            consumed=True,
            consumed_at=now,
            attempts=OTPCode.attempts + 1,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        await db.commit()
        logger.info("OTP verified for %s", formatted)
        return OTPVerification(is_valid=True, message="OTP verified successfully")

    record = (
        await db.execute(
            select(OTPCode)
            .where(OTPCode.phone == formatted)
            .execution_options(populate_existing=True)
        )
    ).scalar_one_or_none()

    if record is None:
        return _rejected(OtpFailure.NOT_FOUND)

    if now >= ensure_utc(record.expires_at):
        await db.delete(record)
        await db.commit()
        return _rejected(OtpFailure.EXPIRED)

    record.attempts += 1
    await db.commit()

    if not hmac.compare_digest(record.code_hash, code_hash):
        return _rejected(OtpFailure.INCORRECT)

    if record.consumed:
        return _rejected(OtpFailure.ALREADY_USED)

    # Matching, unexpired and unconsumed, yet the UPDATE missed it: the record
    # was replaced between the two statements.
    return _rejected(OtpFailure.NOT_FOUND)


async def clear_otp(db: AsyncSession, phone: str) -> None:
    """Delete the OTP record for a phone so it cannot be replayed."""
    formatted = format_phone_number(phone)
    await db.execute(delete(OTPCode).where(OTPCode.phone == formatted))
    await db.commit()
    logger.info("OTP cleared for %s", formatted)


def _rejected(reason: OtpFailure) -> OTPVerification:
    return OTPVerification(is_valid=False, message=OTP_MESSAGES[reason], reason=reason)
