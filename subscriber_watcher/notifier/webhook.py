"""
Generic JSON webhook client.

Posts ``{"subscriber_count": N}`` to a configured URL.
"""

import asyncio
import logging
from typing import Any, Dict

import aiohttp

logger = logging.getLogger(__name__)


class WebhookClient:
    """JSON webhook client."""

    def __init__(self, webhook_url: str, timeout_seconds: float = 10.0):
        """
        Initialize webhook client.

        Args:
            webhook_url: URL the payload is POSTed to
            timeout_seconds: Total request timeout
        """
        self.webhook_url = webhook_url
        self.timeout_seconds = timeout_seconds

    @staticmethod
    def build_payload(subscriber_count: int) -> Dict[str, Any]:
        return {"subscriber_count": subscriber_count}

    async def send_count(self, subscriber_count: int) -> bool:
        """
        Send the subscriber count to the webhook.

        Args:
            subscriber_count: New subscriber count

        Returns:
            True if the webhook answered with a 2xx status, False otherwise
        """
        logger.info(f"Sending webhook notification with subscriber count: {subscriber_count}")

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.webhook_url,
                    json=self.build_payload(subscriber_count),
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                ) as response:
                    if 200 <= response.status < 300:
                        logger.debug("Webhook notification sent successfully")
                        return True

                    error_text = await response.text()
                    logger.error(
                        f"Unexpected status code from webhook: {response.status} - {error_text}"
                    )
                    return False

        except asyncio.TimeoutError:
            logger.error("Webhook notification timed out")
            return False
        except aiohttp.ClientError as e:
            logger.error(f"Error sending webhook notification: {e}")
            return False
