"""
Unified notification interface for subscriber count changes.

Fans a new count out to every configured sink:
- JSON webhook
- Telegram chats

Sink errors are logged and counted, never raised to the caller.
"""

import logging
from typing import Dict, Optional

from subscriber_watcher.config import Config
from subscriber_watcher.notifier.telegram import TelegramClient
from subscriber_watcher.notifier.webhook import WebhookClient

logger = logging.getLogger(__name__)


class Notifier:
    """Sends subscriber count changes to the configured sinks."""

    def __init__(self, config: Config):
        """
        Initialize the notifier.

        Args:
            config: Service configuration; sinks are enabled by the presence
                of their settings.
        """
        self.config = config
        self.webhook_client: Optional[WebhookClient] = None
        self.telegram_client: Optional[TelegramClient] = None

        if config.webhook_enabled:
            self.webhook_client = WebhookClient(config.webhook_url, config.request_timeout)

        if config.telegram_enabled:
            self.telegram_client = TelegramClient(
                config.bot_key,
                config.chat_ids,
                api_url=config.telegram_api_url,
                timeout_seconds=config.request_timeout,
            )

        # Statistics
        self.stats = {"sent": 0, "failed": 0}

    async def notify(self, subscriber_count: int) -> bool:
        """
        Deliver a new subscriber count.

        Args:
            subscriber_count: New count

        Returns:
            True if at least one delivery succeeded
        """
        results = []

        if self.webhook_client:
            try:
                results.append(await self.webhook_client.send_count(subscriber_count))
            except Exception as e:
                logger.error(f"Error sending webhook notification: {e}", exc_info=True)
                results.append(False)

        if self.telegram_client:
            try:
                chat_results = await self.telegram_client.broadcast(subscriber_count)
                results.extend(ok for _, ok in chat_results)
            except Exception as e:
                logger.error(f"Error sending Telegram notification: {e}", exc_info=True)
                results.append(False)

        self.stats["sent"] += sum(1 for result in results if result)
        self.stats["failed"] += sum(1 for result in results if not result)

        if not results:
            logger.warning("No notification sinks configured, count not delivered")

        return any(results)

    def get_stats(self) -> Dict[str, int]:
        """
        Get notification statistics.

        Returns:
            Dictionary with statistics
        """
        return self.stats.copy()
