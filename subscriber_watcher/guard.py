"""Credential guard: exclusive holder of the current OAuth credential.

Refresh and use happen inside one locked section, so no caller can read a
token that another caller is replacing.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from subscriber_watcher.credentials import Credential, CredentialStore
from subscriber_watcher.exceptions import CredentialStoreError, NoCredentialError
from subscriber_watcher.oauth import OAuthClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CredentialGuard:
    """Holds at most one credential behind an asyncio lock."""

    def __init__(
        self,
        oauth_client: OAuthClient,
        store: CredentialStore,
        credential: Optional[Credential] = None,
        expiry_leeway: int = 10,
    ):
        """
        Initialize the guard.

        Args:
            oauth_client: Client used to refresh expired credentials.
            store: Store the refreshed credential is persisted to.
            credential: Initial credential, usually loaded from the store.
            expiry_leeway: Seconds before expiry at which a refresh is forced.
        """
        self.oauth_client = oauth_client
        self.store = store
        self.expiry_leeway = expiry_leeway
        self._credential = credential
        self._lock = asyncio.Lock()

    async def set_credential(self, credential: Credential) -> None:
        """Replace the held credential."""
        async with self._lock:
            self._credential = credential
        logger.info("Credential updated")

    async def with_valid_credential(self, fn: Callable[[Credential], Awaitable[T]]) -> T:
        """Run ``fn`` with a valid credential while holding the lock.

        An expired credential is refreshed (and persisted) first.

        Args:
            fn: Coroutine function receiving the credential.

        Returns:
            Whatever ``fn`` returns.

        Raises:
            NoCredentialError: If no credential has been acquired yet.
            RefreshFailedError: If the refresh grant fails. The stale
                credential is kept so the next call retries.
        """
        async with self._lock:
            if self._credential is None:
                raise NoCredentialError("No token found, authenticate via /login")

            if self._credential.is_expired(self.expiry_leeway):
                logger.info("Access token expired, refreshing")
                refreshed = await self.oauth_client.refresh(self._credential)
                self._credential = refreshed
                try:
                    self.store.save(refreshed)
                except CredentialStoreError as e:
                    # keep the in-memory token; the next refresh writes again
                    logger.error(f"Failed to persist refreshed credential: {e}")

            return await fn(self._credential)

    async def snapshot(self) -> Dict[str, Any]:
        """Summarize the held credential without exposing its tokens."""
        async with self._lock:
            credential = self._credential

        if credential is None:
            return {"has_credential": False, "expiry": None, "expired": None}

        return {
            "has_credential": True,
            "expiry": credential.expiry.isoformat() if credential.expiry else None,
            "expired": credential.is_expired(self.expiry_leeway),
        }
