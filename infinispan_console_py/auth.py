from typing import Callable, Mapping, Optional, Protocol

SESSION_TOKEN_KEY = "react-token"


class TokenProvider(Protocol):
    """Source of the bearer token attached to authenticated requests."""

    def get_token(self) -> Optional[str]:
        ...


class StaticTokenProvider:
    def __init__(self, token: Optional[str]):
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token


class SessionStorageTokenProvider:
    """
    Reads the token a login flow stored in a session mapping.

    The mapping is only read, never written; token refresh belongs to
    whoever owns the session.

    Args:
        storage: Session storage (any mapping of str to str)
        key: Storage key holding the token
        is_initialized: Returns False while no login flow has completed
    """

    def __init__(
        self,
        storage: Mapping[str, str],
        key: str = SESSION_TOKEN_KEY,
        is_initialized: Optional[Callable[[], bool]] = None,
    ):
        self._storage = storage
        self._key = key
        self._is_initialized = is_initialized

    def get_token(self) -> Optional[str]:
        if self._is_initialized is not None and not self._is_initialized():
            return None
        return self._storage.get(self._key)
