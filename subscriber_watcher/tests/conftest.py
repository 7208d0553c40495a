"""Pytest configuration and shared fixtures for subscriber_watcher tests."""

from datetime import datetime, timedelta, timezone

import pytest

from subscriber_watcher.config import Config
from subscriber_watcher.credentials import Credential


@pytest.fixture
def config(tmp_path):
    """Configuration with a webhook sink and a token file under tmp_path."""
    return Config(
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_url="http://localhost:8080/oauth2callback",
        channel_id="UC_test_channel",
        webhook_url="https://hooks.example.com/subscribers",
        sleep_time=5,
        request_timeout=5.0,
        token_path=tmp_path / "token.json",
    )


@pytest.fixture
def telegram_config(tmp_path):
    """Configuration with only the Telegram sink."""
    return Config(
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_url="http://localhost:8080/oauth2callback",
        channel_id="UC_test_channel",
        bot_key="123:abc",
        chat_ids=["111", "222"],
        token_path=tmp_path / "token.json",
    )


@pytest.fixture
def valid_credential():
    """Credential expiring in an hour."""
    return Credential(
        access_token="valid-access-token",
        refresh_token="test-refresh-token",
        expiry=datetime.now(timezone.utc) + timedelta(hours=1),
        scope="https://www.googleapis.com/auth/youtube.readonly",
    )


@pytest.fixture
def expired_credential():
    """Credential that expired a minute ago."""
    return Credential(
        access_token="expired-access-token",
        refresh_token="test-refresh-token",
        expiry=datetime.now(timezone.utc) - timedelta(minutes=1),
        scope="https://www.googleapis.com/auth/youtube.readonly",
    )
