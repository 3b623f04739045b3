"""
SMS Service

Delivers OTP messages through the HTTP SMS gateway.
"""

import logging
from dataclasses import dataclass

import httpx

from app.core.config import settings
from app.core.http_client import request_with_retry


logger = logging.getLogger(__name__)


OTP_MESSAGE_TEMPLATE = (
    "Welcome to Apadbandhav. Your OTP for authentication is {otp}. "
    "Don't share with anybody. Thank you."
)


@dataclass(frozen=True)
class SmsResult:
    """Outcome reported by the gateway."""
    success: bool
    detail: str


def build_otp_message(otp_code: str) -> str:
    """Render the OTP SMS body."""
    return OTP_MESSAGE_TEMPLATE.format(otp=otp_code)


async def send_sms(phone: str, message: str) -> SmsResult:
    """
    Send a message through the configured gateway.

    The gateway takes every parameter in the query string and answers
    HTTP 200 on acceptance.

    Each request delivers a message, so only connection failures are retried.

    Args:
        phone: 10-digit receiver number.
        message: Message body.

    Returns:
        SmsResult: success flag and the gateway's status detail.
    """
    params = {
        "secret": settings.SMS_SECRET,
        "sender": settings.SMS_SENDER,
        "tempid": settings.SMS_TEMPID,
        "receiver": phone,
        "route": settings.SMS_ROUTE,
        "msgtype": settings.SMS_MSGTYPE,
        "sms": message,
    }

    try:
        response = await request_with_retry(
            "GET",
            settings.SMS_BASE_URL,
            max_retries=settings.SMS_MAX_RETRIES,
            idempotent=False,
            params=params,
            timeout=settings.SMS_TIMEOUT_SECONDS,
        )
    except httpx.HTTPError as e:
        logger.error("SMS gateway unreachable for %s: %s", phone, e)
        return SmsResult(success=False, detail=f"Failed to send SMS: {e}")

    logger.info("SMS API response for %s: %s - %s", phone, response.status_code, response.text[:200])

    if response.status_code == 200:
        return SmsResult(success=True, detail="SMS sent successfully")
    return SmsResult(success=False, detail=f"SMS API error: {response.text[:200]}")


async def send_otp_sms(phone: str, otp_code: str) -> SmsResult:
    """
    Send an OTP to a phone number.

    When the gateway is not configured the code only goes to the log and the
    send counts as accepted, so signups keep working in development.

    Args:
        phone: 10-digit receiver number.
        otp_code: The OTP code to deliver.

    Returns:
        SmsResult: Delivery outcome.
    """
    if not settings.sms_configured:
        logger.warning("[DEV MODE] SMS not configured. OTP for %s: %s", phone, otp_code)
        return SmsResult(success=True, detail="OTP logged (SMS not configured)")

    return await send_sms(phone, build_otp_message(otp_code))
