"""Subscriber watcher service.

Polls a YouTube channel's subscriber count with an auto-refreshing OAuth
credential and notifies a webhook and Telegram chats when it changes.
"""

__version__ = "1.0.0"

from .config import Config

__all__ = ["Config"]
