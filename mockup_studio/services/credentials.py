"""API key selection for paid operations (video generation).

The gallery asks a provider for a key right before each animation request,
so a key selected mid-session is picked up by the next attempt.
"""

import logging
from typing import Protocol

from ..errors import CredentialError


logger = logging.getLogger(__name__)

NO_KEY_MESSAGE = (
    "No API key selected. Please select a valid key and ensure the "
    "'Generative Language API' is enabled on your Cloud project."
)


class CredentialProvider(Protocol):
    """Capability the restaging gallery queries for the current API key."""
    
    async def has_selected_key(self) -> bool: ...
    
    async def select_key(self) -> None: ...
    
    def current_key(self) -> str | None: ...


class SessionKeyProvider:
    """Holds the key a browser session selected, falling back to the server key."""
    
    def __init__(self, fallback_key: str | None = None):
        self._fallback_key = fallback_key
        self._selected_key: str | None = None
    
    def select(self, api_key: str) -> None:
        """Record a key chosen by the user."""
        self._selected_key = api_key.strip() or None
        logger.info("API key selected for session")
    
    async def has_selected_key(self) -> bool:
        return self._selected_key is not None
    
    async def select_key(self) -> None:
        """Fall back to the server-configured key when the user picked none."""
        if self._selected_key is not None:
            return
        if not self._fallback_key:
            raise CredentialError(NO_KEY_MESSAGE)
        logger.debug("No session key selected, using server key")
        self._selected_key = self._fallback_key
    
    def current_key(self) -> str | None:
        return self._selected_key
