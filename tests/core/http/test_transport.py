"""
Tests for core.http.transport module.

Tests cover:
- Successful JSON requests
- HTTP error status codes (401, 4xx, 5xx)
- Timeout and connection errors
- Session creation and lifecycle
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from core.errors.exceptions import (
    AuthExpiredError,
    PermanentError,
    TransientError,
    TransportError,
)
from core.http.models import ApiRequest, Transport
from core.http.transport import HttpTransport, create_session

BASE_URL = "http://localhost:8080"


def _mock_response(status=200, text='{"success": true, "data": []}', headers=None):
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.headers = headers or {"Content-Type": "application/json"}
    mock_response.text = AsyncMock(return_value=text)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)
    return mock_response


def _mock_session(response=None, side_effect=None):
    mock_session = AsyncMock()
    mock_session.closed = False
    if side_effect is not None:
        mock_session.request = MagicMock(side_effect=side_effect)
    else:
        mock_session.request = MagicMock(return_value=response)
    return mock_session


class TestHttpTransportSend:
    """Tests for HttpTransport.send."""

    @pytest.mark.asyncio
    async def test_successful_request_decodes_json(self):
        session = _mock_session(_mock_response())
        transport = HttpTransport(BASE_URL, session=session)
        request = ApiRequest(
            "POST",
            "/api/v1/locations",
            json_body={"name": "Cafe"},
            headers={"Authorization": "Bearer tok"},
        )

        response = await transport.send(request)

        assert response.status == 200
        assert response.data == {"success": True, "data": []}
        session.request.assert_called_once()
        call_args = session.request.call_args
        assert call_args[0] == ("POST", "http://localhost:8080/api/v1/locations")
        assert call_args[1]["json"] == {"name": "Cafe"}
        assert call_args[1]["headers"] == {"Authorization": "Bearer tok"}

    @pytest.mark.asyncio
    async def test_empty_body_decodes_to_none(self):
        session = _mock_session(_mock_response(status=204, text=""))
        transport = HttpTransport(BASE_URL, session=session)

        response = await transport.send(ApiRequest("DELETE", "/api/v1/locations/1"))

        assert response.status == 204
        assert response.data is None

    @pytest.mark.asyncio
    async def test_non_json_body_is_returned_as_text(self):
        session = _mock_session(_mock_response(text="OK"))
        transport = HttpTransport(BASE_URL, session=session)

        response = await transport.send(ApiRequest("GET", "/health"))

        assert response.data == "OK"

    @pytest.mark.asyncio
    async def test_401_raises_auth_expired(self):
        session = _mock_session(_mock_response(status=401, text='{"error": "expired"}'))
        transport = HttpTransport(BASE_URL, session=session)

        with pytest.raises(AuthExpiredError) as exc_info:
            await transport.send(ApiRequest("GET", "/api/v1/users/self"))

        assert exc_info.value.status_code == 401
        assert exc_info.value.context["response_body"] == '{"error": "expired"}'

    @pytest.mark.asyncio
    async def test_404_raises_permanent(self):
        session = _mock_session(_mock_response(status=404, text=""))
        transport = HttpTransport(BASE_URL, session=session)

        with pytest.raises(PermanentError) as exc_info:
            await transport.send(ApiRequest("GET", "/api/v1/reports/9"))

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_503_raises_transient(self):
        session = _mock_session(_mock_response(status=503, text="down"))
        transport = HttpTransport(BASE_URL, session=session)

        with pytest.raises(TransientError) as exc_info:
            await transport.send(ApiRequest("GET", "/api/v1/stores"))

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_timeout_raises_transport_error(self):
        session = _mock_session(side_effect=asyncio.TimeoutError())
        transport = HttpTransport(BASE_URL, session=session)

        with pytest.raises(TransportError) as exc_info:
            await transport.send(ApiRequest("GET", "/api/v1/locations"))

        assert exc_info.value.status_code is None
        assert exc_info.value.context["error_type"] == "timeout"

    @pytest.mark.asyncio
    async def test_connection_error_raises_transport_error(self):
        session = _mock_session(side_effect=aiohttp.ClientConnectionError("refused"))
        transport = HttpTransport(BASE_URL, session=session)

        with pytest.raises(TransportError) as exc_info:
            await transport.send(ApiRequest("GET", "/api/v1/locations"))

        assert exc_info.value.context["error_type"] == "connection"
        assert exc_info.value.context["api_endpoint"] == "/api/v1/locations"


class TestHttpTransportLifecycle:

    def test_rejects_base_url_without_scheme(self):
        with pytest.raises(ValueError):
            HttpTransport("localhost:8080")

    def test_strips_trailing_slash(self):
        transport = HttpTransport("http://localhost:8080/")

        assert transport.url_for(ApiRequest("GET", "/x")) == "http://localhost:8080/x"

    @pytest.mark.asyncio
    async def test_does_not_close_injected_session(self):
        session = _mock_session(_mock_response())
        transport = HttpTransport(BASE_URL, session=session)

        await transport.close()

        session.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_closed_transport_refuses_requests(self):
        transport = HttpTransport(BASE_URL, session=_mock_session(_mock_response()))
        await transport.close()

        with pytest.raises(RuntimeError):
            await transport.send(ApiRequest("GET", "/x"))

    @pytest.mark.asyncio
    async def test_creates_and_closes_own_session(self):
        transport = HttpTransport(BASE_URL, timeout_seconds=3)

        session = await transport._ensure_session()
        assert isinstance(session, aiohttp.ClientSession)
        assert session.timeout.total == 3

        await transport.close()
        assert session.closed


class TestCreateSession:

    @pytest.mark.asyncio
    async def test_session_defaults(self):
        session = create_session(timeout_total=7)
        try:
            assert session.timeout.total == 7
            assert session.headers["Content-Type"] == "application/json"
            assert session.headers["Accept"] == "application/json"
            assert isinstance(session.cookie_jar, aiohttp.CookieJar)
        finally:
            await session.close()


class TestTransportProtocol:

    @pytest.mark.asyncio
    async def test_http_transport_is_a_transport(self):
        transport: Transport = HttpTransport(BASE_URL, session=_mock_session(_mock_response()))

        response = await transport.send(ApiRequest("GET", "/api/v1/locations"))

        assert response.status == 200
