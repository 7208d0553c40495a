"""
Notification sinks for subscriber count changes.

Main components:
- Notifier: Unified notification interface
- WebhookClient: JSON webhook client
- TelegramClient: Telegram Bot API client

Example:
    from subscriber_watcher.notifier import Notifier

    notifier = Notifier(config)
    await notifier.notify(1234)
"""

from .notifier import Notifier
from .telegram import TelegramClient
from .webhook import WebhookClient

__all__ = ["Notifier", "TelegramClient", "WebhookClient"]
