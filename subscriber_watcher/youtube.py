"""YouTube Data API client for channel statistics."""

import logging

import httpx

from subscriber_watcher.credentials import Credential
from subscriber_watcher.exceptions import ChannelNotFoundError, StatisticsError

logger = logging.getLogger(__name__)

CHANNELS_URL = "https://www.googleapis.com/youtube/v3/channels"


class YouTubeStatsClient:
    """Fetches a channel's subscriber count with a bearer credential."""

    def __init__(self, timeout: float = 10.0, channels_url: str = CHANNELS_URL):
        self.timeout = timeout
        self.channels_url = channels_url

    async def fetch_subscriber_count(self, credential: Credential, channel_id: str) -> int:
        """List channel statistics by id and return the subscriber count.

        Args:
            credential: Valid OAuth credential.
            channel_id: YouTube channel id.

        Returns:
            int: Current subscriber count.

        Raises:
            ChannelNotFoundError: If the response contains no channel.
            StatisticsError: On transport errors, non-200 responses or
                malformed payloads.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    self.channels_url,
                    params={"part": "statistics", "id": channel_id},
                    headers={"Authorization": credential.authorization_header},
                )
        except httpx.HTTPError as e:
            raise StatisticsError(f"Error fetching channel statistics: {e}") from e

        if response.status_code != 200:
            raise StatisticsError(
                f"Error fetching channel statistics: HTTP {response.status_code} - {response.text}"
            )

        try:
            items = response.json().get("items") or []
        except ValueError as e:
            raise StatisticsError(f"Invalid statistics response: {e}") from e

        if not items:
            raise ChannelNotFoundError(f"No channel found with ID: {channel_id}")

        try:
            count = int(items[0]["statistics"]["subscriberCount"])
        except (KeyError, TypeError, ValueError) as e:
            raise StatisticsError(f"Statistics response has no subscriber count: {e}") from e

        if count < 0:
            raise StatisticsError(f"Negative subscriber count: {count}")
        return count
