"""
HTTP Client Module

Shared httpx.AsyncClient for outbound calls (SMS gateway) with:
- Connection pooling
- Retries with exponential backoff on connection errors and 5xx responses
- Configurable timeouts
"""

import asyncio
import logging
from typing import Any, Optional

import httpx


logger = logging.getLogger(__name__)


# ============== Configuration ==============

MAX_CONNECTIONS = 20
MAX_KEEPALIVE_CONNECTIONS = 5
KEEPALIVE_EXPIRY = 30  # seconds

DEFAULT_TIMEOUT = 10.0  # seconds

MAX_RETRIES = 1
RETRY_BACKOFF_BASE = 0.5  # seconds

USER_AGENT = "Apadbandhav SMS Service/1.0"


# ============== Global Client Instance ==============

_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """
    Get or create the global async HTTP client.

    Returns:
        httpx.AsyncClient: Shared client instance.
    """
    global _http_client
    if _http_client is None:
        limits = httpx.Limits(
            max_connections=MAX_CONNECTIONS,
            max_keepalive_connections=MAX_KEEPALIVE_CONNECTIONS,
            keepalive_expiry=KEEPALIVE_EXPIRY,
        )
        _http_client = httpx.AsyncClient(
            limits=limits,
            timeout=httpx.Timeout(DEFAULT_TIMEOUT),
            headers={"User-Agent": USER_AGENT},
            http2=True,
        )
    return _http_client


async def close_http_client() -> None:
    """
    Close the global HTTP client.

    Should be called during application shutdown.
    """
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


# ============== Request Helpers with Retry ==============

CONNECT_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout)
RETRYABLE_ERRORS = CONNECT_ERRORS + (httpx.ReadTimeout,)


async def request_with_retry(
    method: str,
    url: str,
    max_retries: int = MAX_RETRIES,
    idempotent: bool = True,
    **kwargs: Any,
) -> httpx.Response:
    """
    Make an HTTP request, retrying on connection errors and 5xx responses.

    Non-idempotent requests are retried only when the connection was never
    established; read timeouts and 5xx responses are returned or raised as-is.

    Args:
        method: HTTP method (GET, POST, etc.)
        url: Request URL
        max_retries: Maximum number of retry attempts
        idempotent: Whether repeating a request that reached the server is safe
        **kwargs: Additional arguments passed to httpx request

    Returns:
        httpx.Response: The last response received

    Raises:
        httpx.HTTPError: If every attempt fails to connect
    """
    client = get_http_client()
    retryable = RETRYABLE_ERRORS if idempotent else CONNECT_ERRORS

    for attempt in range(max_retries + 1):
        try:
            response = await client.request(method, url, **kwargs)
        except retryable as exc:
            if attempt >= max_retries:
                raise
            wait_time = RETRY_BACKOFF_BASE * (2 ** attempt)
            logger.warning("Connection error calling %s, retrying in %ss: %s", url, wait_time, exc)
            await asyncio.sleep(wait_time)
            continue

        if idempotent and response.status_code >= 500 and attempt < max_retries:
            wait_time = RETRY_BACKOFF_BASE * (2 ** attempt)
            logger.warning(
                "Server error %s from %s, retrying in %ss", response.status_code, url, wait_time
            )
            await asyncio.sleep(wait_time)
            continue

        return response

    raise httpx.HTTPError(f"Request to {url} failed after {max_retries} retries")
