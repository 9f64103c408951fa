import json
from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import ClientResponse

from infinispan_console_py import CacheService, RestClient, StaticTokenProvider

ENDPOINT = "http://localhost:11222/rest/v2"


def _build_response(
    status: int = 200,
    body: Any = "",
    headers: Optional[Dict[str, str]] = None,
) -> MagicMock:
    """Build a mocked aiohttp response.

    Bytes bodies decode the way aiohttp does; other non-string bodies are served as JSON.
    """
    response = MagicMock(spec=ClientResponse)
    response.status = status
    if isinstance(body, bytes):
        response.text = AsyncMock(
            side_effect=lambda encoding="utf-8", errors="strict": body.decode(encoding, errors)
        )
        response.json = AsyncMock(side_effect=lambda **kwargs: json.loads(body.decode("utf-8")))
        response.headers = headers or {}
        return response
    text = body if isinstance(body, str) else json.dumps(body)
    response.text = AsyncMock(return_value=text)
    if isinstance(body, str):
        try:
            parsed = json.loads(body)
        except (ValueError, RecursionError) as exc:
            response.json = AsyncMock(side_effect=exc)
        else:
            response.json = AsyncMock(return_value=parsed)
    else:
        response.json = AsyncMock(return_value=body)
    response.headers = headers or {}
    return response


@pytest.fixture
def rest_client():
    """RestClient with a mocked, already open session."""
    client = RestClient(ENDPOINT, token_provider=StaticTokenProvider("token123"))
    session = MagicMock()
    session.closed = False
    session.request = AsyncMock(return_value=_build_response())
    client._session = session
    return client


@pytest.fixture
def cache_service(rest_client):
    return CacheService(rest_client)


@pytest.fixture
def make_response():
    return _build_response
