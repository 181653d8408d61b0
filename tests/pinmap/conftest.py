"""Shared fixtures for pinmap client tests: mocked aiohttp session and tokens."""

import base64
import json
from copy import deepcopy
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.config import ClientConfig


def make_response(status=200, body=None):
    """Mock aiohttp response usable as `async with session.request(...)`."""
    text = "" if body is None else (body if isinstance(body, str) else json.dumps(body))
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.headers = {"Content-Type": "application/json"}
    mock_response.text = AsyncMock(return_value=text)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)
    return mock_response


class CopyingMock(MagicMock):
    """MagicMock that records copies of its arguments, as sent at call time."""

    def __call__(self, /, *args, **kwargs):
        return super().__call__(*deepcopy(args), **deepcopy(kwargs))


def make_session(*responses):
    """Mock aiohttp session returning the given responses in order."""
    mock_session = AsyncMock()
    mock_session.closed = False
    mock_session.request = CopyingMock(side_effect=list(responses))
    return mock_session


def make_jwt(claims):
    """Unsigned JWT carrying the given claims."""

    def segment(data):
        raw = json.dumps(data).encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    return f"{segment({'alg': 'HS256', 'typ': 'JWT'})}.{segment(claims)}.signature"


def sent_requests(mock_session):
    """(method, url, Authorization header) for every call made on the session."""
    calls = []
    for call in mock_session.request.call_args_list:
        method, url = call[0]
        calls.append((method, url, call[1]["headers"].get("Authorization")))
    return calls


@pytest.fixture
def client_config():
    return ClientConfig(api_base_url="http://test:8080", refresh_timeout_seconds=1)


@pytest.fixture(name="make_response")
def make_response_fixture():
    return make_response


@pytest.fixture(name="make_session")
def make_session_fixture():
    return make_session


@pytest.fixture(name="make_jwt")
def make_jwt_fixture():
    return make_jwt


@pytest.fixture(name="sent_requests")
def sent_requests_fixture():
    return sent_requests
