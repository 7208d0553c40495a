"""
Telegram Bot API client.

Broadcasts the subscriber count to a list of chats with one multipart
``sendMessage`` request per chat.
"""

import asyncio
import logging
from typing import Dict, List, Tuple

import aiohttp

logger = logging.getLogger(__name__)


class TelegramClient:
    """Telegram sendMessage client."""

    def __init__(
        self,
        bot_key: str,
        chat_ids: List[str],
        api_url: str = "https://api.telegram.org",
        timeout_seconds: float = 10.0,
    ):
        """
        Initialize Telegram client.

        Args:
            bot_key: Bot token issued by BotFather
            chat_ids: Destination chat ids
            api_url: Bot API base URL
            timeout_seconds: Total timeout per request
        """
        self.chat_ids = list(chat_ids)
        self.send_message_url = f"{api_url.rstrip('/')}/bot{bot_key}/sendMessage"
        self.timeout_seconds = timeout_seconds

    @staticmethod
    def message_fields(chat_id: str, subscriber_count: int) -> Dict[str, str]:
        """Form fields of one sendMessage request."""
        return {
            "text": f"Subscriber count: {subscriber_count}",
            "chat_id": chat_id,
            "caption": "",
            "parse_mode": "MarkdownV2",
            "disable_notification": "true",
        }

    @staticmethod
    def _build_form(fields: Dict[str, str]) -> aiohttp.MultipartWriter:
        writer = aiohttp.MultipartWriter("form-data")
        for name, value in fields.items():
            part = writer.append(value)
            part.set_content_disposition("form-data", name=name)
        return writer

    async def send_message(
        self, session: aiohttp.ClientSession, chat_id: str, subscriber_count: int
    ) -> bool:
        """
        Send the count to a single chat.

        Returns:
            True if Telegram accepted the message, False otherwise
        """
        form = self._build_form(self.message_fields(chat_id, subscriber_count))

        try:
            async with session.post(
                self.send_message_url,
                data=form,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                if response.status == 200:
                    logger.debug(f"Telegram message sent to chat {chat_id}")
                    return True

                error_text = await response.text()
                logger.error(
                    f"Telegram sendMessage to chat {chat_id} failed: "
                    f"{response.status} - {error_text}"
                )
                return False

        except asyncio.TimeoutError:
            logger.error(f"Telegram sendMessage to chat {chat_id} timed out")
            return False
        except aiohttp.ClientError as e:
            logger.error(f"Telegram sendMessage to chat {chat_id} failed: {e}")
            return False

    async def broadcast(self, subscriber_count: int) -> List[Tuple[str, bool]]:
        """
        Send the count to every configured chat, one after another.

        A failed chat does not stop delivery to the remaining ones.

        Returns:
            (chat id, delivery result) pair per configured chat, in order;
            a chat listed twice appears twice
        """
        results: List[Tuple[str, bool]] = []
        async with aiohttp.ClientSession() as session:
            for chat_id in self.chat_ids:
                ok = await self.send_message(session, chat_id, subscriber_count)
                results.append((chat_id, ok))
        return results
