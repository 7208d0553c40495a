"""Last observed subscriber count, behind its own lock."""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class CountTracker:
    """Remembers the previous successful observation and reports changes.

    The initial value is ``None``, so the first real count (zero included)
    always counts as a change.
    """

    def __init__(self) -> None:
        self._last_count: Optional[int] = None
        self._observed_at: Optional[datetime] = None
        self._lock = asyncio.Lock()

    @property
    def last_count(self) -> Optional[int]:
        return self._last_count

    @property
    def observed_at(self) -> Optional[datetime]:
        return self._observed_at

    async def observe(
        self, count: int, on_change: Callable[[int], Awaitable[None]]
    ) -> bool:
        """Record ``count`` and call ``on_change`` once if it differs.

        ``on_change`` runs while the lock is held.

        Returns:
            True if the count changed and ``on_change`` was invoked.
        """
        async with self._lock:
            self._observed_at = datetime.now()
            if count == self._last_count:
                logger.debug(f"Subscriber count unchanged: {count}")
                return False

            logger.info(f"Subscriber count changed: {self._last_count} -> {count}")
            self._last_count = count
            await on_change(count)
            return True
