"""
Security Unit Tests

Tests for session tokens and signing configuration.
"""

import uuid
from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt
from pydantic import ValidationError

from app.core.config import Settings, settings
from app.core.security import create_access_token, decode_access_token
from app.models.enums import UserRole


@pytest.fixture
def identity():
    return SimpleNamespace(id=uuid.uuid4(), phone="9876543210", role=UserRole.ADMIN)


class TestAccessToken:
    """Tests for token minting and decoding."""

    def test_token_carries_identity_claims(self, identity):
        token = create_access_token(identity)

        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])

        assert claims["sub"] == str(identity.id)
        assert claims["phone"] == "9876543210"
        assert claims["role"] == "admin"
        assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60

    def test_decode_round_trip(self, identity):
        payload = decode_access_token(create_access_token(identity))

        assert payload is not None
        assert payload.sub == identity.id
        assert payload.role == UserRole.ADMIN

    def test_expired_token_is_rejected(self, identity):
        token = create_access_token(identity, expires_delta=timedelta(seconds=-10))

        assert decode_access_token(token) is None

    def test_foreign_signature_is_rejected(self, identity):
        token = jwt.encode(
            {"sub": str(identity.id), "phone": identity.phone, "role": "superadmin", "exp": 9999999999},
            "another-secret-key-of-thirty-two-characters!",
            algorithm="HS256",
        )

        assert decode_access_token(token) is None

    def test_garbage_is_rejected(self):
        assert decode_access_token("not-a-jwt") is None

    def test_malformed_subject_is_rejected(self):
        token = jwt.encode(
            {"sub": "not-a-uuid", "phone": "9876543210", "role": "user", "exp": 9999999999},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )

        assert decode_access_token(token) is None


class TestSigningConfiguration:
    """Tests for fail-fast settings validation."""

    def test_short_secret_fails(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite://", SECRET_KEY="too-short")

    def test_missing_secret_fails(self, monkeypatch):
        monkeypatch.delenv("SECRET_KEY", raising=False)

        with pytest.raises(ValidationError):
            Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite://")

    def test_settings_are_frozen(self):
        with pytest.raises(ValidationError):
            settings.SECRET_KEY = "x" * 40

    def test_sms_configured_requires_every_field(self):
        partial = Settings(
            _env_file=None,
            DATABASE_URL="sqlite+aiosqlite://",
            SECRET_KEY="k" * 32,
            SMS_BASE_URL="https://sms.example.com/send",
            SMS_SECRET="secret",
            SMS_SENDER="APDBND",
        )
        complete = partial.model_copy(update={"SMS_TEMPID": "1007"})

        assert partial.sms_configured is False
        assert complete.sms_configured is True
