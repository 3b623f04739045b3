"""
HTTP Client Unit Tests

Tests for the connection pooling and retry logic.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import httpx


class TestHttpClient:
    """Tests for the HTTP client module."""

    def test_get_http_client_returns_singleton(self):
        """Verify that get_http_client returns the same instance."""
        with patch("app.core.http_client._http_client", None):
            from app.core.http_client import get_http_client

            client1 = get_http_client()
            client2 = get_http_client()

            assert client1 is client2

    def test_http_client_has_connection_limits(self):
        """Verify connection pool limits are configured."""
        with patch("app.core.http_client._http_client", None):
            with patch("app.core.http_client.httpx.AsyncClient") as mock_client_cls:
                from app.core.http_client import get_http_client

                get_http_client()

                kwargs = mock_client_cls.call_args.kwargs
                assert kwargs["limits"].max_connections == 20
                assert kwargs["limits"].max_keepalive_connections == 5
                assert kwargs["headers"]["User-Agent"] == "Apadbandhav SMS Service/1.0"
                assert kwargs["http2"] is True

    @pytest.mark.asyncio
    async def test_close_resets_client(self):
        """Verify closing drops the shared instance."""
        with patch("app.core.http_client._http_client", None):
            from app.core import http_client

            first = http_client.get_http_client()
            await http_client.close_http_client()

            assert http_client._http_client is None
            assert first.is_closed


class TestRequestWithRetry:
    """Tests for retry logic."""

    @pytest.mark.asyncio
    async def test_retry_on_server_error(self):
        """Verify retry on 5xx status codes."""
        mock_response_fail = MagicMock()
        mock_response_fail.status_code = 500

        mock_response_success = MagicMock()
        mock_response_success.status_code = 200

        mock_client = AsyncMock()
        mock_client.request = AsyncMock(
            side_effect=[mock_response_fail, mock_response_success]
        )

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            with patch("app.core.http_client.RETRY_BACKOFF_BASE", 0.01):  # Fast retry
                from app.core.http_client import request_with_retry

                response = await request_with_retry("GET", "http://test.com")

                assert response.status_code == 200
                assert mock_client.request.call_count == 2

    @pytest.mark.asyncio
    async def test_returns_last_server_error(self):
        """Verify the final 5xx response is returned once retries run out."""
        mock_response = MagicMock()
        mock_response.status_code = 503

        mock_client = AsyncMock()
        mock_client.request = AsyncMock(return_value=mock_response)

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            with patch("app.core.http_client.RETRY_BACKOFF_BASE", 0.01):
                from app.core.http_client import request_with_retry

                response = await request_with_retry("GET", "http://test.com", max_retries=1)

                assert response.status_code == 503
                assert mock_client.request.call_count == 2

    @pytest.mark.asyncio
    async def test_no_retry_on_success(self):
        """Verify no retry when request succeeds."""
        mock_response = MagicMock()
        mock_response.status_code = 200

        mock_client = AsyncMock()
        mock_client.request = AsyncMock(return_value=mock_response)

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            from app.core.http_client import request_with_retry

            response = await request_with_retry("GET", "http://test.com")

            assert response.status_code == 200
            assert mock_client.request.call_count == 1

    @pytest.mark.asyncio
    async def test_no_retry_on_client_error(self):
        """Verify 4xx responses are returned as-is."""
        mock_response = MagicMock()
        mock_response.status_code = 401

        mock_client = AsyncMock()
        mock_client.request = AsyncMock(return_value=mock_response)

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            from app.core.http_client import request_with_retry

            response = await request_with_retry("GET", "http://test.com", max_retries=3)

            assert response.status_code == 401
            assert mock_client.request.call_count == 1

    @pytest.mark.asyncio
    async def test_raises_after_max_retries(self):
        """Verify exception after all retries exhausted."""
        mock_client = AsyncMock()
        mock_client.request = AsyncMock(side_effect=httpx.ConnectError("Connection failed"))

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            with patch("app.core.http_client.RETRY_BACKOFF_BASE", 0.01):
                from app.core.http_client import request_with_retry

                with pytest.raises(httpx.ConnectError):
                    await request_with_retry("GET", "http://test.com", max_retries=2)

                assert mock_client.request.call_count == 3  # Initial + 2 retries

    @pytest.mark.asyncio
    async def test_non_idempotent_does_not_retry_server_error(self):
        """Verify a 5xx from a side-effecting request is returned without a second send."""
        mock_response = MagicMock()
        mock_response.status_code = 502

        mock_client = AsyncMock()
        mock_client.request = AsyncMock(return_value=mock_response)

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            from app.core.http_client import request_with_retry

            response = await request_with_retry(
                "GET", "http://test.com", max_retries=2, idempotent=False
            )

            assert response.status_code == 502
            assert mock_client.request.call_count == 1

    @pytest.mark.asyncio
    async def test_non_idempotent_does_not_retry_read_timeout(self):
        """Verify a read timeout is raised on the first attempt."""
        mock_client = AsyncMock()
        mock_client.request = AsyncMock(side_effect=httpx.ReadTimeout("slow gateway"))

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            from app.core.http_client import request_with_retry

            with pytest.raises(httpx.ReadTimeout):
                await request_with_retry("GET", "http://test.com", max_retries=2, idempotent=False)

            assert mock_client.request.call_count == 1

    @pytest.mark.asyncio
    async def test_non_idempotent_retries_connect_error(self):
        """Verify a request that never connected is still retried."""
        mock_response = MagicMock()
        mock_response.status_code = 200

        mock_client = AsyncMock()
        mock_client.request = AsyncMock(
            side_effect=[httpx.ConnectError("refused"), mock_response]
        )

        with patch("app.core.http_client.get_http_client", return_value=mock_client):
            with patch("app.core.http_client.RETRY_BACKOFF_BASE", 0.01):
                from app.core.http_client import request_with_retry

                response = await request_with_retry(
                    "GET", "http://test.com", max_retries=1, idempotent=False
                )

                assert response.status_code == 200
                assert mock_client.request.call_count == 2
