"""Tests for the FastAPI application and its routes."""

from unittest.mock import AsyncMock, patch
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient

from subscriber_watcher.app import create_app
from subscriber_watcher.credentials import CredentialStore
from subscriber_watcher.exceptions import CredentialStoreError, ExchangeFailedError
from subscriber_watcher.oauth import OAuthClient


@pytest.fixture
def oauth_client(config):
    """Real OAuth client with a mocked code exchange."""
    client = OAuthClient(config)
    client.exchange_code = AsyncMock()
    return client


@pytest.fixture
def app(config, oauth_client):
    """Application under test."""
    return create_app(config, oauth_client=oauth_client)


@pytest.fixture
def client(app):
    """Test client running the application lifespan."""
    with TestClient(app) as test_client:
        yield test_client


class TestHome:
    """Test the home page."""

    def test_home_links_to_login(self, client):
        """Test that the home page is static HTML with a login link."""
        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert 'href="/login"' in response.text


class TestLogin:
    """Test the login redirect."""

    def test_redirects_to_consent_page(self, client, app):
        """Test the 307 redirect carrying state and offline access."""
        response = client.get("/login", follow_redirects=False)

        assert response.status_code == 307
        location = urlparse(response.headers["location"])
        params = parse_qs(location.query)
        assert location.netloc == "accounts.google.com"
        assert params["state"] == [app.state.auth_flow.state]
        assert params["access_type"] == ["offline"]

    def test_state_reused_between_logins(self, client):
        """Test that the same state is issued to every login."""
        first = client.get("/login", follow_redirects=False).headers["location"]
        second = client.get("/login", follow_redirects=False).headers["location"]

        assert parse_qs(urlparse(first).query)["state"] == parse_qs(urlparse(second).query)["state"]


class TestOAuthCallback:
    """Test the OAuth callback."""

    def test_success(self, client, app, oauth_client, config, valid_credential):
        """Test that a valid callback stores and installs the credential."""
        oauth_client.exchange_code.return_value = valid_credential
        state = app.state.auth_flow.state

        response = client.get("/oauth2callback", params={"state": state, "code": "auth-code"})

        assert response.status_code == 200
        assert "Login successful" in response.text
        assert "valid-access-token" not in response.text
        oauth_client.exchange_code.assert_awaited_once_with("auth-code")
        assert CredentialStore(config.token_path).load() == valid_credential
        assert client.get("/health").json()["has_credential"] is True

    def test_state_mismatch(self, client, oauth_client, config):
        """Test that a wrong state yields 400 and changes nothing."""
        response = client.get("/oauth2callback", params={"state": "forged", "code": "auth-code"})

        assert response.status_code == 400
        assert "State parameter doesn't match" in response.json()["detail"]
        oauth_client.exchange_code.assert_not_called()
        assert not config.token_path.exists()
        assert client.get("/health").json()["has_credential"] is False

    def test_missing_state(self, client, oauth_client):
        """Test that a callback without state is rejected."""
        response = client.get("/oauth2callback", params={"code": "auth-code"})

        assert response.status_code == 400
        oauth_client.exchange_code.assert_not_called()

    def test_exchange_failure_keeps_existing_credential(
        self, config, oauth_client, valid_credential
    ):
        """Test that a failed exchange yields 500 and keeps the stored credential."""
        CredentialStore(config.token_path).save(valid_credential)
        oauth_client.exchange_code.side_effect = ExchangeFailedError("invalid_grant")
        app = create_app(config, oauth_client=oauth_client)

        with TestClient(app) as client:
            response = client.get(
                "/oauth2callback",
                params={"state": app.state.auth_flow.state, "code": "bad-code"},
            )
            health = client.get("/health").json()

        assert response.status_code == 500
        assert "Failed to exchange token" in response.json()["detail"]
        assert health["has_credential"] is True
        assert CredentialStore(config.token_path).load() == valid_credential

    def test_store_failure(self, client, app, oauth_client, valid_credential):
        """Test that a failed write yields 500 and does not install the credential."""
        oauth_client.exchange_code.return_value = valid_credential

        with patch.object(
            app.state.store, "save", side_effect=CredentialStoreError("read-only")
        ):
            response = client.get(
                "/oauth2callback",
                params={"state": app.state.auth_flow.state, "code": "auth-code"},
            )

        assert response.status_code == 500
        assert client.get("/health").json()["has_credential"] is False


class TestHealth:
    """Test the health endpoint."""

    def test_degraded_without_credential(self, client):
        """Test health before login."""
        data = client.get("/health").json()

        assert data["status"] == "degraded"
        assert data["service"] == "subscriber-watcher"
        assert data["has_credential"] is False
        assert data["last_count"] is None
        assert data["notifications"] == {"sent": 0, "failed": 0}

    def test_stored_credential_loaded_at_startup(self, config, oauth_client, valid_credential):
        """Test that the lifespan installs the persisted credential."""
        CredentialStore(config.token_path).save(valid_credential)

        with TestClient(create_app(config, oauth_client=oauth_client)) as client:
            data = client.get("/health").json()

        assert data["has_credential"] is True
        assert data["credential_expiry"] == valid_credential.expiry.isoformat()
