"""Authorization-code flow: state check, code exchange, persist, install."""

import logging
import secrets
from typing import Optional

from subscriber_watcher.credentials import Credential, CredentialStore
from subscriber_watcher.exceptions import InvalidStateError
from subscriber_watcher.guard import CredentialGuard
from subscriber_watcher.oauth import OAuthClient

logger = logging.getLogger(__name__)


class AuthorizationFlow:
    """Produces the credential the guard starts from.

    One anti-forgery state token is generated per process and reused for
    every login, which suits a single-operator deployment.
    """

    def __init__(
        self,
        oauth_client: OAuthClient,
        store: CredentialStore,
        guard: CredentialGuard,
        state: Optional[str] = None,
    ):
        self.oauth_client = oauth_client
        self.store = store
        self.guard = guard
        self.state = state or secrets.token_urlsafe(32)

    def login_url(self) -> str:
        return self.oauth_client.authorization_url(self.state)

    async def complete(self, state: Optional[str], code: Optional[str]) -> Credential:
        """Handle the provider's callback.

        Args:
            state: ``state`` query parameter.
            code: ``code`` query parameter.

        Returns:
            The new credential, already persisted and installed in the guard.

        Raises:
            InvalidStateError: If ``state`` does not match.
            ExchangeFailedError: If the code exchange fails.
            CredentialStoreError: If the credential cannot be persisted; the
                guard keeps its previous value.
        """
        if not state or not secrets.compare_digest(state, self.state):
            raise InvalidStateError("State parameter doesn't match")

        credential = await self.oauth_client.exchange_code(code or "")
        self.store.save(credential)
        await self.guard.set_credential(credential)

        logger.info("Login successful, credential stored")
        return credential
