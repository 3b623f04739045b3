"""
OTP Service Unit Tests

Tests for phone normalization, OTP storage and verification states.
"""

import asyncio
from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import select

from app.core.clock import utcnow
from app.core.exceptions import InvalidPhoneFormat, OtpFailure
from app.models.otp_code import OTPCode
from app.services import otp_service


PHONE = "9876543210"


async def _load_otp(session_maker, phone: str = PHONE) -> OTPCode | None:
    async with session_maker() as session:
        result = await session.execute(select(OTPCode).where(OTPCode.phone == phone))
        return result.scalar_one_or_none()


class TestPhoneNumbers:
    """Tests for phone formatting and validation."""

    @pytest.mark.parametrize(
        "raw",
        ["9876543210", "+91 98765 43210", "91-9876543210", "+919876543210", "98765-43210"],
    )
    def test_format_strips_separators_and_country_code(self, raw):
        """Verify every accepted spelling formats to the same 10 digits."""
        assert otp_service.format_phone_number(raw) == PHONE

    def test_format_is_idempotent(self):
        once = otp_service.format_phone_number("+91 98765 43210")
        assert otp_service.format_phone_number(once) == once

    def test_format_keeps_short_91_prefix(self):
        """Only 12-digit numbers lose a leading 91."""
        assert otp_service.format_phone_number("9123456789") == "9123456789"

    @pytest.mark.parametrize("valid", ["6000000000", "9999999999", "919876543210", "+91 7012345678"])
    def test_validate_accepts_mobile_numbers(self, valid):
        assert otp_service.validate_phone_number(valid) is True

    @pytest.mark.parametrize("invalid", ["5876543210", "987654321", "98765432101", "abcdefghij", ""])
    def test_validate_rejects_bad_numbers(self, invalid):
        assert otp_service.validate_phone_number(invalid) is False

    def test_normalize_raises_for_invalid_number(self):
        with pytest.raises(InvalidPhoneFormat) as exc_info:
            otp_service.normalize_phone("12345")

        assert exc_info.value.status_code == 400


class TestGenerateOtp:
    """Tests for OTP generation."""

    def test_generates_six_digits_in_range(self):
        for _ in range(200):
            code = otp_service.generate_otp()
            assert len(code) == 6
            assert 100000 <= int(code) <= 999999

    def test_hash_is_sha256_hex(self):
        digest = otp_service.hash_otp("123456")
        assert len(digest) == 64
        assert digest != "123456"
        assert digest == otp_service.hash_otp("123456")


class TestStoreOtp:
    """Tests for OTP persistence."""

    @pytest.mark.asyncio
    async def test_store_persists_hashed_code(self, db_session, session_maker):
        await otp_service.store_otp(db_session, PHONE, "123456")

        record = await _load_otp(session_maker)
        assert record is not None
        assert record.code_hash == otp_service.hash_otp("123456")
        assert record.consumed is False
        assert record.attempts == 0

    @pytest.mark.asyncio
    async def test_new_code_replaces_previous(self, db_session):
        await otp_service.store_otp(db_session, PHONE, "111111")
        await otp_service.store_otp(db_session, PHONE, "222222")

        result = await db_session.execute(select(OTPCode).where(OTPCode.phone == PHONE))
        records = result.scalars().all()
        assert len(records) == 1

        old = await otp_service.verify_otp(db_session, PHONE, "111111")
        assert old.is_valid is False
        assert old.reason == OtpFailure.INCORRECT

        new = await otp_service.verify_otp(db_session, PHONE, "222222")
        assert new.is_valid is True

    @pytest.mark.asyncio
    async def test_send_otp_returns_normalized_phone(self, db_session, session_maker):
        with patch("app.services.otp_service.generate_otp", return_value="654321"):
            formatted = await otp_service.send_otp(db_session, "+91 98765 43210")

        assert formatted == PHONE
        record = await _load_otp(session_maker)
        assert record.code_hash == otp_service.hash_otp("654321")


class TestVerifyOtp:
    """Tests for OTP verification outcomes."""

    @pytest.mark.asyncio
    async def test_valid_code_is_consumed(self, db_session, session_maker):
        await otp_service.store_otp(db_session, PHONE, "123456")

        result = await otp_service.verify_otp(db_session, PHONE, "123456")

        assert result.is_valid is True
        assert result.reason is None
        assert result.message == "OTP verified successfully"

        record = await _load_otp(session_maker)
        assert record.consumed is True
        assert record.consumed_at is not None
        assert record.attempts == 1

    @pytest.mark.asyncio
    async def test_accepts_unnormalized_phone(self, db_session):
        await otp_service.store_otp(db_session, PHONE, "123456")

        result = await otp_service.verify_otp(db_session, "+91 98765-43210", "123456")

        assert result.is_valid is True

    @pytest.mark.asyncio
    async def test_missing_record(self, db_session):
        result = await otp_service.verify_otp(db_session, PHONE, "123456")

        assert result.is_valid is False
        assert result.reason == OtpFailure.NOT_FOUND
        assert result.message == "OTP not found. Please request a new one."

    @pytest.mark.asyncio
    async def test_wrong_code_counts_attempt(self, db_session, session_maker):
        await otp_service.store_otp(db_session, PHONE, "123456")

        result = await otp_service.verify_otp(db_session, PHONE, "000000")

        assert result.is_valid is False
        assert result.reason == OtpFailure.INCORRECT
        assert result.message == "Invalid OTP"

        record = await _load_otp(session_maker)
        assert record.consumed is False
        assert record.attempts == 1

    @pytest.mark.asyncio
    async def test_expired_code_is_deleted(self, db_session, session_maker):
        await otp_service.store_otp(db_session, PHONE, "123456")
        later = utcnow() + timedelta(minutes=6)

        with patch("app.services.otp_service.utcnow", return_value=later):
            result = await otp_service.verify_otp(db_session, PHONE, "123456")

        assert result.is_valid is False
        assert result.reason == OtpFailure.EXPIRED
        assert result.message == "OTP has expired. Please request a new one."
        assert await _load_otp(session_maker) is None

    @pytest.mark.asyncio
    async def test_expiry_boundary_is_exclusive(self, db_session):
        """A code is already invalid at exactly its expiry instant."""
        with patch("app.services.otp_service.utcnow", return_value=utcnow()) as clock:
            record = await otp_service.store_otp(db_session, PHONE, "123456")
            clock.return_value = record.expires_at

            result = await otp_service.verify_otp(db_session, PHONE, "123456")

        assert result.reason == OtpFailure.EXPIRED

    @pytest.mark.asyncio
    async def test_reuse_is_rejected(self, db_session):
        await otp_service.store_otp(db_session, PHONE, "123456")
        first = await otp_service.verify_otp(db_session, PHONE, "123456")

        second = await otp_service.verify_otp(db_session, PHONE, "123456")

        assert first.is_valid is True
        assert second.is_valid is False
        assert second.reason == OtpFailure.ALREADY_USED
        assert second.message == "OTP already used. Please request a new one."

    @pytest.mark.asyncio
    async def test_concurrent_verification_succeeds_once(self, db_session, session_maker):
        """Two simultaneous submissions of the same code: exactly one wins."""
        await otp_service.store_otp(db_session, PHONE, "123456")

        async def attempt():
            async with session_maker() as session:
                return await otp_service.verify_otp(session, PHONE, "123456")

        results = await asyncio.gather(attempt(), attempt())

        assert sum(result.is_valid for result in results) == 1
        loser = next(result for result in results if not result.is_valid)
        assert loser.reason == OtpFailure.ALREADY_USED


class TestClearOtp:
    """Tests for OTP removal."""

    @pytest.mark.asyncio
    async def test_clear_removes_record(self, db_session, session_maker):
        await otp_service.store_otp(db_session, PHONE, "123456")

        await otp_service.clear_otp(db_session, "+91" + PHONE)

        assert await _load_otp(session_maker) is None
        result = await otp_service.verify_otp(db_session, PHONE, "123456")
        assert result.reason == OtpFailure.NOT_FOUND

    @pytest.mark.asyncio
    async def test_clear_without_record_is_noop(self, db_session):
        await otp_service.clear_otp(db_session, PHONE)
