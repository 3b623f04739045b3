"""
Security Utilities

JWT session token management.
"""

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Optional

from jose import JWTError, jwt
from pydantic import ValidationError

from app.core.config import settings
from app.schemas.token import TokenPayload

if TYPE_CHECKING:
    from app.models.user import User


def create_access_token(user: "User", expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed session token for an identity.

    Args:
        user: Identity the token is issued to.
        expires_delta: Optional custom expiration time.

    Returns:
        str: Encoded JWT with sub (identity id), phone and role claims.
    """
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user.id),
        "phone": user.phone,
        "role": user.role.value,
        "exp": expire,
        "iat": now,
    }

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def decode_access_token(token: str) -> TokenPayload | None:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode.

    Returns:
        TokenPayload if the signature and expiry are valid, None otherwise.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
        return TokenPayload(**payload)
    except (JWTError, ValidationError):
        return None
