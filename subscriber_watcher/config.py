"""Configuration management for the subscriber watcher service.

Loads configuration once from a YAML file with validation and defaults.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from subscriber_watcher.exceptions import ConfigError

DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_SLEEP_TIME = 60

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    """Configuration for the subscriber watcher service."""

    # Google OAuth client
    client_id: str
    client_secret: str
    redirect_url: str

    # Polled channel
    channel_id: str

    # Sinks (at least one must be configured)
    webhook_url: Optional[str] = None
    bot_key: Optional[str] = None
    chat_ids: List[str] = field(default_factory=list)
    telegram_api_url: str = "https://api.telegram.org"

    # Polling
    sleep_time: int = DEFAULT_SLEEP_TIME
    request_timeout: float = 10.0
    expiry_leeway: int = 10

    # Service settings
    host: str = "0.0.0.0"
    port: int = 8080
    token_path: Path = Path("token.json")
    log_level: str = "INFO"
    log_path: Optional[Path] = None

    @classmethod
    def from_yaml(cls, path: Optional[str] = None) -> "Config":
        """Load configuration from a YAML file.

        Args:
            path: Path to the file. Defaults to $SUBSCRIBER_WATCHER_CONFIG,
                then ``config.yaml`` in the working directory.

        Returns:
            Config: Validated configuration instance.

        Raises:
            ConfigError: If the file cannot be read or parsed, or required
                fields are missing.
        """
        path = path or os.getenv("SUBSCRIBER_WATCHER_CONFIG", DEFAULT_CONFIG_PATH)

        try:
            with open(path, "rt", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Read config file error: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Decode config file error: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")

        config = cls.from_dict(data)
        config.validate()
        return config

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build configuration from a parsed mapping.

        Raises:
            ConfigError: If required fields are missing or values have the
                wrong type.
        """
        required = {
            "client_id": data.get("client_id"),
            "client_secret": data.get("client_secret"),
            "redirect_url": data.get("redirect_url"),
            "channel_id": data.get("channel_id"),
        }

        missing = [key for key, value in required.items() if not value]
        if missing:
            raise ConfigError(f"Missing required configuration fields: {', '.join(missing)}")

        log_path = data.get("log_path")

        chat_ids = data.get("chat_ids") or []
        if isinstance(chat_ids, (str, int)):
            chat_ids = [chat_ids]
        elif not isinstance(chat_ids, list):
            raise ConfigError(f"chat_ids must be a list, got {type(chat_ids).__name__}")

        try:
            return cls(
                client_id=str(required["client_id"]),
                client_secret=str(required["client_secret"]),
                redirect_url=str(required["redirect_url"]),
                channel_id=str(required["channel_id"]),
                webhook_url=data.get("webhook_url") or None,
                bot_key=data.get("bot_key") or None,
                chat_ids=[str(chat_id) for chat_id in chat_ids],
                telegram_api_url=data.get("telegram_api_url", "https://api.telegram.org"),
                sleep_time=int(data.get("sleep_time") or 0),
                request_timeout=float(data.get("request_timeout", 10.0)),
                expiry_leeway=int(data.get("expiry_leeway", 10)),
                host=data.get("host", "0.0.0.0"),
                port=int(data.get("port", 8080)),
                token_path=Path(data.get("token_path", "token.json")),
                log_level=str(os.getenv("LOG_LEVEL", data.get("log_level", "INFO"))).upper(),
                log_path=Path(log_path) if log_path else None,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

    @property
    def poll_interval(self) -> int:
        """Polling interval in seconds; non-positive values fall back to the default."""
        if self.sleep_time <= 0:
            return DEFAULT_SLEEP_TIME
        return self.sleep_time

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.bot_key and self.chat_ids)

    @property
    def webhook_enabled(self) -> bool:
        return bool(self.webhook_url)

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigError: If configuration values are invalid.
        """
        if not self.webhook_enabled and not self.telegram_enabled:
            raise ConfigError(
                "No notification sink configured: set webhook_url, or bot_key and chat_ids"
            )

        if self.bot_key and not self.chat_ids:
            logger.warning("bot_key is set but chat_ids is empty, Telegram sink disabled")

        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be positive")

        if self.expiry_leeway < 0:
            raise ConfigError("expiry_leeway must not be negative")

        if not 0 < self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}")

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_levels:
            raise ConfigError(
                f"Invalid log level '{self.log_level}'. Must be one of: {', '.join(valid_levels)}"
            )
