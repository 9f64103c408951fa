import asyncio
import logging
from types import TracebackType
from typing import Any, Callable, Dict, Optional, Type, TypeVar

import aiohttp
from yarl import URL

from .auth import TokenProvider
from .config import build_base_url, parse_endpoint
from .either import Either, Left, Right
from .errors import (
    UNAUTHORIZED_ACTION,
    CacheConnectionError,
    CacheError,
    CacheHttpError,
    CacheUnauthorizedError,
    CacheValidationError,
    map_error,
)
from .models import ActionResponse, ServiceCall

T = TypeVar("T")

DEFAULT_GET_ERROR = "An error occurred retrieving data."

_RECOVERABLE_ERRORS = (CacheError, aiohttp.ClientError, asyncio.TimeoutError)


def is_success(status: int) -> bool:
    return 200 <= status < 300


class RestClient:
    """
    Async REST client for the data grid's REST API.

    Every call is a single round trip: no retries, no response caching.
    Failures of get/post/put/delete are reported as ActionResponse values,
    never raised.
    """

    def __init__(
        self,
        endpoint: str = "localhost:11222",
        token_provider: Optional[TokenProvider] = None,
        timeout: Optional[float] = None,
        use_ssl: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize REST client.

        Args:
            endpoint: REST endpoint (e.g., "http://localhost:11222/rest/v2")
            token_provider: Source of the bearer token, None for anonymous access
            timeout: Total request timeout in seconds, None keeps aiohttp's default
            use_ssl: Use https when the endpoint has no scheme
            logger: Logger to use instead of the module logger
        """
        self.host, self.port, self.use_ssl, self.base_path = parse_endpoint(endpoint, use_ssl)
        self.endpoint = build_base_url(self.host, self.port, self.use_ssl, self.base_path)
        if timeout is not None and timeout <= 0:
            raise CacheValidationError("Timeout must be positive")
        self.timeout = timeout
        self.token_provider = token_provider
        self.logger = logger or logging.getLogger(__name__)

        self._session: Optional[aiohttp.ClientSession] = None
        self._closed = False

        self.logger.debug("Initialized RestClient for %s", self.endpoint)

    async def __aenter__(self) -> "RestClient":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def connect(self) -> None:
        """Open the HTTP session; cookies persist in its jar across calls"""
        if self._session is not None and not self._session.closed:
            self.logger.debug("HTTP session already open")
            return

        if self.timeout is not None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        else:
            self._session = aiohttp.ClientSession()
        self._closed = False
        self.logger.debug("Opened HTTP session for %s", self.endpoint)

    async def close(self) -> None:
        """Close the HTTP session"""
        if self._session is not None and not self._closed:
            self.logger.debug("Closing HTTP session")
            await self._session.close()
            self._session = None
            self._closed = True

    def is_connected(self) -> bool:
        return (
            self._session is not None
            and not self._session.closed
            and not self._closed
        )

    def create_authenticated_header(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self.token_provider is None:
            return headers
        token = self.token_provider.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def rest_call(
        self,
        url: str,
        method: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[str] = None,
    ) -> aiohttp.ClientResponse:
        """
        Perform a single REST call.

        Args:
            url: Fully built, already percent-encoded URL
            method: HTTP verb
            headers: Request headers; the authenticated header is used when None
            body: Request body, sent only when non-empty

        Returns:
            The transport response, body not yet read

        Raises:
            CacheConnectionError: If the request could not be sent
        """
        if self._closed:
            raise CacheConnectionError("Client is closed")
        if headers is None:
            headers = self.create_authenticated_header()

        if not self.is_connected():
            await self.connect()
        session = self._session
        if session is None:
            raise CacheConnectionError("HTTP session is not open")

        kwargs: Dict[str, Any] = {"headers": headers}
        if body:
            kwargs["data"] = body

        self.logger.debug("%s %s", method, url)
        try:
            return await session.request(method, URL(url, encoded=True), **kwargs)
        except asyncio.CancelledError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error("%s %s failed: %s", method, url, e)
            raise CacheConnectionError(str(e)) from e

    async def raise_for_status(self, response: aiohttp.ClientResponse) -> None:
        if is_success(response.status):
            return
        body = await response.text(errors="replace")
        if response.status in (401, 403):
            raise CacheUnauthorizedError(response.status, body)
        raise CacheHttpError(response.status, body)

    async def get(
        self,
        url: str,
        transformer: Callable[[Any], T],
        headers: Optional[Dict[str, str]] = None,
        as_text: bool = False,
        error_message: str = DEFAULT_GET_ERROR,
    ) -> Either[ActionResponse, T]:
        """
        GET a resource and convert its body.

        Args:
            url: Resource URL
            transformer: Builds the domain value from the parsed body
            headers: Request headers, authenticated header when None
            as_text: Hand the raw text to the transformer instead of parsed JSON
            error_message: Fallback message when the call fails

        Returns:
            Right with the transformed value, Left with a failed ActionResponse
        """
        try:
            response = await self.rest_call(url, "GET", headers)
            await self.raise_for_status(response)
            if as_text:
                payload = await response.text(errors="replace")
            else:
                payload = await response.json(content_type=None)
            return Right(transformer(payload))
        except asyncio.CancelledError:
            raise
        except (
            *_RECOVERABLE_ERRORS, ValueError, KeyError, TypeError, AttributeError, RecursionError
        ) as e:
            self.logger.warning("GET %s failed: %s", url, e)
            return Left(map_error(e, error_message))

    async def post(self, call: ServiceCall) -> ActionResponse:
        return await self._handle_crud_action_response("POST", call)

    async def put(self, call: ServiceCall) -> ActionResponse:
        return await self._handle_crud_action_response("PUT", call)

    async def delete(self, call: ServiceCall) -> ActionResponse:
        return await self._handle_crud_action_response("DELETE", call)

    async def _handle_crud_action_response(self, method: str, call: ServiceCall) -> ActionResponse:
        try:
            response = await self.rest_call(call.url, method, call.headers, call.body)
            if response.status == 403:
                await response.text(errors="replace")
                raise CacheUnauthorizedError(403, UNAUTHORIZED_ACTION)
            await self.raise_for_status(response)
            # Mutation endpoints carry nothing useful in their body.
            await response.text(errors="replace")
        except asyncio.CancelledError:
            raise
        except _RECOVERABLE_ERRORS as e:
            self.logger.warning("%s %s failed: %s", method, call.url, e)
            return map_error(e, call.error_message)

        self.logger.debug("%s %s succeeded", method, call.url)
        return ActionResponse(message=call.success_message, success=True)
