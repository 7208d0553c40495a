"""Background loop polling the subscriber count at a fixed interval."""

import asyncio
import logging
from typing import Optional

from subscriber_watcher.exceptions import (
    ChannelNotFoundError,
    NoCredentialError,
    RefreshFailedError,
    StatisticsError,
)
from subscriber_watcher.guard import CredentialGuard
from subscriber_watcher.notifier import Notifier
from subscriber_watcher.tracker import CountTracker
from subscriber_watcher.youtube import YouTubeStatsClient

logger = logging.getLogger(__name__)


class SubscriberPoller:
    """Polls channel statistics and notifies on subscriber count changes.

    Every failure inside a tick is logged and the tick is skipped; the next
    tick runs after the usual interval with no backoff.
    """

    def __init__(
        self,
        guard: CredentialGuard,
        stats_client: YouTubeStatsClient,
        tracker: CountTracker,
        notifier: Notifier,
        channel_id: str,
        interval: int,
    ):
        """Initialize the poller.

        Args:
            guard: Holder of the OAuth credential.
            stats_client: YouTube statistics client.
            tracker: Last observed count.
            notifier: Sinks receiving count changes.
            channel_id: Polled channel.
            interval: Seconds between ticks.
        """
        self.guard = guard
        self.stats_client = stats_client
        self.tracker = tracker
        self.notifier = notifier
        self.channel_id = channel_id
        self.interval = interval

    async def _sleep(self) -> None:
        await asyncio.sleep(self.interval)

    async def _fetch(self, credential) -> int:
        return await self.stats_client.fetch_subscriber_count(credential, self.channel_id)

    async def poll_once(self) -> Optional[int]:
        """Run one tick without the leading sleep.

        Returns:
            The fetched count, or None if the tick was skipped.
        """
        try:
            count = await self.guard.with_valid_credential(self._fetch)
        except NoCredentialError:
            logger.warning("No token found, skipping check")
            return None
        except RefreshFailedError as e:
            logger.error(f"Error refreshing token: {e}")
            return None
        except ChannelNotFoundError as e:
            logger.warning(str(e))
            return None
        except StatisticsError as e:
            logger.error(str(e))
            return None

        logger.info(f"Got subscriber count from YouTube: {count}")
        await self.tracker.observe(count, self.notifier.notify)
        return count

    async def run_forever(self) -> None:
        """Sleep, poll, repeat until cancelled."""
        logger.info(f"Starting subscriber poller (interval: {self.interval}s)")

        while True:
            try:
                logger.info(f"Sleeping for {self.interval} seconds...")
                await self._sleep()
                logger.info("Checking subscriber count...")
                await self.poll_once()

            except asyncio.CancelledError:
                logger.info("Subscriber poller cancelled")
                break
            except Exception as e:
                logger.error(f"Error in subscriber poller: {e}", exc_info=True)
