"""
Rate Limiting

Token bucket rate limiter for the OTP endpoints.

Features:
- Per-client limiting keyed on IP address
- Separate limiters for sending and verifying OTPs
- Automatic bucket refill
"""

import time
from typing import Callable, Dict, Optional
from dataclasses import dataclass, field
from functools import wraps

from fastapi import Request, status

from app.core.config import settings
from app.core.exceptions import AppError


# ============== Token Bucket Implementation ==============

@dataclass
class TokenBucket:
    """Token bucket for rate limiting."""
    capacity: int          # Maximum tokens
    refill_rate: float     # Tokens per second
    tokens: float = field(default=0, init=False)
    last_refill: float = field(default=0, init=False)

    def __post_init__(self):
        self.tokens = float(self.capacity)
        self.last_refill = time.time()

    def consume(self, tokens: int = 1) -> bool:
        """
        Attempt to consume tokens.

        Args:
            tokens: Number of tokens to consume.

        Returns:
            True if tokens were available, False otherwise.
        """
        self._refill()

        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def _refill(self) -> None:
        """Refill tokens based on elapsed time."""
        now = time.time()
        elapsed = now - self.last_refill
        self.tokens = min(
            self.capacity,
            self.tokens + (elapsed * self.refill_rate)
        )
        self.last_refill = now


class RateLimitExceeded(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Rate limit exceeded. Please try again later."

    def __init__(self):
        super().__init__(headers={"Retry-After": "60"})


def get_client_ip(request: Request) -> Optional[str]:
    """
    Client IP address.

    The first X-Forwarded-For hop is used only when the connecting peer is
    listed in TRUSTED_PROXIES; otherwise the header is ignored.
    """
    peer = request.client.host if request.client else None
    if peer is not None and peer in settings.trusted_proxies_list:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return peer


# ============== Rate Limiter ==============

MAX_BUCKETS = 10000
BUCKET_MAX_AGE = 300  # seconds


class RateLimiter:
    """
    Per-client rate limiter using token bucket algorithm.

    A limiter of N requests per minute allows a burst of N and refills
    continuously at N/60 tokens per second.
    Once MAX_BUCKETS keys are tracked, idle buckets are pruned
    before a new one is added.
    """

    def __init__(self, requests_per_minute: int = 60, burst_capacity: Optional[int] = None):
        self._buckets: Dict[str, TokenBucket] = {}
        self._burst_capacity = burst_capacity or requests_per_minute
        self._refill_rate = requests_per_minute / 60.0  # Per second

    def _get_key(self, request: Request) -> str:
        return f"ip:{get_client_ip(request) or 'unknown'}"

    def _get_bucket(self, key: str) -> TokenBucket:
        """Get or create bucket for key."""
        if key not in self._buckets:
            if len(self._buckets) >= MAX_BUCKETS:
                self.cleanup(max_age=BUCKET_MAX_AGE)
            self._buckets[key] = TokenBucket(
                capacity=self._burst_capacity,
                refill_rate=self._refill_rate,
            )
        return self._buckets[key]

    def is_allowed(self, request: Request) -> bool:
        """
        Check if request is allowed.

        Args:
            request: FastAPI request object.

        Returns:
            True if allowed, False if rate limited.
        """
        return self._get_bucket(self._get_key(request)).consume()

    def cleanup(self, max_age: float = 3600) -> int:
        """
        Remove stale buckets.

        Args:
            max_age: Maximum age in seconds for inactive buckets.

        Returns:
            Number of buckets removed.
        """
        now = time.time()
        stale_keys = [
            key for key, bucket in self._buckets.items()
            if (now - bucket.last_refill) > max_age
        ]

        for key in stale_keys:
            del self._buckets[key]

        return len(stale_keys)

    def reset(self) -> None:
        """Drop every bucket."""
        self._buckets.clear()


# ============== Global Rate Limiters ==============

send_otp_limiter = RateLimiter(requests_per_minute=settings.SEND_OTP_RATE_PER_MINUTE)
verify_otp_limiter = RateLimiter(requests_per_minute=settings.VERIFY_OTP_RATE_PER_MINUTE)


# ============== Decorator for Specific Endpoints ==============

def rate_limit(limiter: RateLimiter):
    """
    Decorator to apply rate limiting to specific endpoints.

    The endpoint must accept a ``request: Request`` parameter. Limiting is
    skipped when RATE_LIMIT_ENABLED is off.

    Usage:
        @router.post("/send-otp")
        @rate_limit(send_otp_limiter)
        async def send_otp(request: Request, ...):
            ...
    """
    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            request = kwargs.get("request")
            if request is None:
                for arg in args:
                    if isinstance(arg, Request):
                        request = arg
                        break

            if settings.RATE_LIMIT_ENABLED and request is not None and not limiter.is_allowed(request):
                raise RateLimitExceeded()

            return await func(*args, **kwargs)
        return wrapper
    return decorator
