"""
Bearer token stores for the storefront gateway.

The gateway only reads tokens. Storing and clearing the token after login and
logout is the job of the front-end session that owns the store.
"""

import logging
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class TokenProvider(Protocol):
    """Read access to the current caller's bearer token."""

    def get_token(self) -> Optional[str]:
        """Return the current token, or None when the caller is signed out."""
        ...


class InMemoryTokenProvider:
    """Token store holding a single session token in memory."""

    def __init__(self, token: Optional[str] = None) -> None:
        self._token: Optional[str] = token or None
        self.logger = logging.getLogger("services.token_provider")

    def set_token(self, token: str) -> None:
        self._token = token or None
        self.logger.debug("Session token stored")

    def get_token(self) -> Optional[str]:
        return self._token

    def clear_token(self) -> None:
        self._token = None
        self.logger.debug("Session token cleared")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(has_token={self._token is not None})"
