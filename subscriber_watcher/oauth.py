"""Google OAuth2 client for the authorization-code and refresh-token grants."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from subscriber_watcher.config import Config
from subscriber_watcher.credentials import Credential
from subscriber_watcher.exceptions import ExchangeFailedError, RefreshFailedError

logger = logging.getLogger(__name__)

AUTH_URL = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
YOUTUBE_READONLY_SCOPE = "https://www.googleapis.com/auth/youtube.readonly"


class OAuthClient:
    """Talks to Google's authorization and token endpoints."""

    def __init__(
        self,
        config: Config,
        scopes: Optional[List[str]] = None,
        auth_url: str = AUTH_URL,
        token_url: str = TOKEN_URL,
    ):
        """Initialize the OAuth client.

        Args:
            config: Service configuration holding the client id, secret and
                redirect URL.
            scopes: Requested scopes, defaults to YouTube read-only.
            auth_url: Authorization endpoint.
            token_url: Token endpoint.
        """
        self.client_id = config.client_id
        self.client_secret = config.client_secret
        self.redirect_url = config.redirect_url
        self.timeout = config.request_timeout
        self.scopes = scopes or [YOUTUBE_READONLY_SCOPE]
        self.auth_url = auth_url
        self.token_url = token_url

    def authorization_url(self, state: str) -> str:
        """Build the consent page URL, requesting offline access."""
        params = {
            "access_type": "offline",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_url,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "state": state,
        }
        return str(httpx.URL(self.auth_url, params=params))

    async def exchange_code(self, code: str) -> Credential:
        """Exchange an authorization code for a credential.

        Raises:
            ExchangeFailedError: If the token endpoint rejects the code or
                cannot be reached.
        """
        if not code:
            raise ExchangeFailedError("Missing authorization code")

        try:
            data = await self._token_request(
                {
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.redirect_url,
                }
            )
            return Credential.from_token_response(data)
        except (httpx.HTTPError, ValueError, TypeError, KeyError) as e:
            raise ExchangeFailedError(str(e)) from e

    async def refresh(self, credential: Credential) -> Credential:
        """Obtain a new access token with the credential's refresh token.

        Raises:
            RefreshFailedError: If there is no refresh token or the grant fails.
        """
        if not credential.refresh_token:
            raise RefreshFailedError("Credential has no refresh token, login again via /login")

        try:
            data = await self._token_request(
                {
                    "grant_type": "refresh_token",
                    "refresh_token": credential.refresh_token,
                }
            )
            return Credential.from_token_response(data, previous=credential)
        except (httpx.HTTPError, ValueError, TypeError, KeyError) as e:
            raise RefreshFailedError(str(e)) from e

    async def _token_request(self, form: Dict[str, str]) -> Dict[str, Any]:
        form = {**form, "client_id": self.client_id, "client_secret": self.client_secret}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.token_url,
                data=form,
                headers={"Accept": "application/json"},
            )

        if response.status_code != 200:
            raise ValueError(
                f"Token endpoint returned HTTP {response.status_code}: {response.text}"
            )

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Token endpoint returned a non-object body: {type(data).__name__}")
        if not data.get("access_token"):
            raise ValueError("Token endpoint response has no access_token")
        return data
