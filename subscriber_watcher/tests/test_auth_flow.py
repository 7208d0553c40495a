"""Tests for the authorization-code flow."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from subscriber_watcher.auth_flow import AuthorizationFlow
from subscriber_watcher.credentials import CredentialStore
from subscriber_watcher.exceptions import ExchangeFailedError, InvalidStateError
from subscriber_watcher.guard import CredentialGuard
from subscriber_watcher.oauth import OAuthClient


@pytest.fixture
def oauth_client(config):
    """OAuth client with a mocked code exchange."""
    client = OAuthClient(config)
    client.exchange_code = AsyncMock()
    return client


@pytest.fixture
def store():
    """Mocked credential store."""
    return MagicMock(spec=CredentialStore)


@pytest.fixture
def guard(oauth_client, store):
    """Empty credential guard."""
    return CredentialGuard(oauth_client, store)


class TestAuthorizationFlow:
    """Test AuthorizationFlow."""

    def test_random_state_per_instance(self, oauth_client, store, guard):
        """Test that each process gets its own state token."""
        first = AuthorizationFlow(oauth_client, store, guard)
        second = AuthorizationFlow(oauth_client, store, guard)

        assert first.state != second.state
        assert len(first.state) >= 32

    def test_login_url_carries_state(self, oauth_client, store, guard):
        """Test that the login URL embeds the flow's state."""
        flow = AuthorizationFlow(oauth_client, store, guard, state="fixed-state")

        assert "state=fixed-state" in flow.login_url()

    @pytest.mark.asyncio
    async def test_complete_persists_then_installs(
        self, oauth_client, store, guard, valid_credential
    ):
        """Test that a successful callback saves and installs the credential."""
        oauth_client.exchange_code.return_value = valid_credential
        flow = AuthorizationFlow(oauth_client, store, guard, state="fixed-state")

        credential = await flow.complete("fixed-state", "auth-code")

        assert credential == valid_credential
        store.save.assert_called_once_with(valid_credential)
        assert (await guard.snapshot())["has_credential"] is True

    @pytest.mark.asyncio
    async def test_invalid_state(self, oauth_client, store, guard):
        """Test that a mismatched state is rejected before any exchange."""
        flow = AuthorizationFlow(oauth_client, store, guard, state="fixed-state")

        with pytest.raises(InvalidStateError):
            await flow.complete("other-state", "auth-code")

        oauth_client.exchange_code.assert_not_called()
        store.save.assert_not_called()
        assert (await guard.snapshot())["has_credential"] is False

    @pytest.mark.asyncio
    async def test_exchange_failure(self, oauth_client, store, guard):
        """Test that exchange errors propagate without touching the guard."""
        oauth_client.exchange_code.side_effect = ExchangeFailedError("invalid_grant")
        flow = AuthorizationFlow(oauth_client, store, guard, state="fixed-state")

        with pytest.raises(ExchangeFailedError):
            await flow.complete("fixed-state", "auth-code")

        store.save.assert_not_called()
        assert (await guard.snapshot())["has_credential"] is False
