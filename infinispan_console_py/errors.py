import asyncio
import logging
from typing import Any, Optional

import aiohttp

from .models import ActionResponse

logger = logging.getLogger(__name__)

UNAUTHORIZED_ACTION = "Unauthorized action."
CHECK_CREDENTIALS = "Unauthorized action. Check your credentials and try again."

MISSING_TYPE_ID_MESSAGE = (
    "You are trying to write a JSON key or value that needs '_type' field in this cache."
)
SPRING_SESSION_MESSAGE = (
    "This cache contains Spring Session entries that can not be read or edited from the Console."
)
UNKNOWN_TYPE_MESSAGE = (
    "This cache contains entries that can not be read or edited from the Console."
)


class CacheError(Exception):
    """Base exception for cache operations"""


class CacheConnectionError(CacheError):
    """Raised when the REST endpoint cannot be reached"""


class CacheValidationError(CacheError):
    """Raised when input validation fails"""


class CacheConfigurationError(CacheError):
    """Raised when a cache configuration document has no known topology"""


class CacheHttpError(CacheError):
    """Raised when the REST endpoint answers with a non-2xx status"""

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(body or f"HTTP {status}")


class CacheUnauthorizedError(CacheHttpError):
    """Raised on 401 and 403 answers"""


def is_transport_error(err: BaseException) -> bool:
    if isinstance(err, aiohttp.ClientResponseError):
        return False
    return isinstance(err, (aiohttp.ClientError, asyncio.TimeoutError, CacheConnectionError))


def interpret(text: str, error_message: str) -> str:
    """Rewrite a server failure body into something a console user can act on.

    Checks are substring based; the first match wins. Unrecognized bodies are
    appended to ``error_message`` on a new line.
    """
    if "missing type id property '_type'" in text:
        return MISSING_TYPE_ID_MESSAGE

    if "Unknown type id : 5901" in text:
        return SPRING_SESSION_MESSAGE

    if "Unknown type id" in text:
        return UNKNOWN_TYPE_MESSAGE

    return f"{error_message}\n{text}"


def map_error(err: Any, error_message: Optional[str]) -> ActionResponse:
    """
    Convert a failed call into a failed ActionResponse.

    Args:
        err: Transport exception, CacheHttpError or raw failure text
        error_message: Fallback message for the operation

    Returns:
        ActionResponse with success set to False
    """
    fallback = error_message or ""
    logger.debug("Mapping error %r with fallback %r", err, fallback)

    if isinstance(err, BaseException) and is_transport_error(err):
        return ActionResponse(message=str(err) or fallback, success=False)

    if isinstance(err, CacheHttpError):
        if err.status == 401:
            return ActionResponse(message=f"{fallback}\n{CHECK_CREDENTIALS}", success=False)
        text = err.body
    else:
        text = str(err)

    return ActionResponse(message=interpret(text, fallback), success=False)
