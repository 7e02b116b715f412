"""Poller refreshing the realtime trip update cache."""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from gtfs_departures.adapters.pollers.interval_poller import IntervalPoller
from gtfs_departures.domain.models.error_details import ErrorDetails

if TYPE_CHECKING:
    from gtfs_departures.domain.contracts.realtime_cache import RealtimeCacheProtocol
    from gtfs_departures.domain.ports.realtime_feed_source import RealtimeFeedSource

logger = logging.getLogger(__name__)


def _extract_error_details(error: Exception) -> ErrorDetails:
    """Extract HTTP status code and error reason from exception."""
    error_str = str(error)
    # Format: "Bad API call: Got response (502) from ..."
    status_match = re.search(r"\((\d{3})\)", error_str)
    status_code = int(status_match.group(1)) if status_match else None

    if status_code == 429:
        reason = "Rate limit exceeded"
    elif status_code == 502:
        reason = "Bad gateway (server error)"
    elif status_code == 503:
        reason = "Service unavailable"
    elif status_code == 504:
        reason = "Gateway timeout"
    elif status_code is not None:
        reason = f"HTTP {status_code}"
    else:
        reason = "Unknown error"

    return ErrorDetails(status_code=status_code, reason=reason)


class RealtimePoller(IntervalPoller):
    """Fetches the realtime feed and swaps the cache snapshot.

    On failure the previous snapshot stays in effect and the next interval
    retries.
    """

    name = "realtime poller"

    def __init__(
        self,
        feed_source: RealtimeFeedSource,
        realtime_cache: RealtimeCacheProtocol,
        refresh_interval_seconds: float = 30,
        on_update: Callable[[], Awaitable[object]] | None = None,
    ) -> None:
        """Initialize the realtime poller.

        Args:
            feed_source: Source of decoded trip updates.
            realtime_cache: Cache whose snapshot gets replaced.
            refresh_interval_seconds: Seconds between refreshes.
            on_update: Awaited after each successful refresh, e.g. to trigger
                a broadcast.
        """
        super().__init__(refresh_interval_seconds, run_immediately=True)
        self.feed_source = feed_source
        self.realtime_cache = realtime_cache
        self.on_update = on_update
        self.last_success: datetime | None = None
        self.last_error: ErrorDetails | None = None

    async def refresh(self) -> bool:
        """Refresh the cache once.

        Returns:
            True if the snapshot was replaced.
        """
        try:
            updates = await self.feed_source.fetch()
        except Exception as e:
            error_details = _extract_error_details(e)
            self.last_error = error_details
            logger.warning(
                f"Realtime refresh failed: {error_details.reason} "
                f"(status: {error_details.status_code}, error: {e}); "
                f"keeping previous snapshot of {len(self.realtime_cache)} trip(s)"
            )
            if error_details.status_code == 429:
                logger.warning("Rate limit (429) detected - consider a longer refresh interval")
            return False

        self.realtime_cache.replace(updates)
        self.last_success = datetime.now(UTC)
        self.last_error = None
        logger.debug(f"Realtime cache refreshed with {len(updates)} trip update(s)")
        return True

    async def _tick(self) -> None:
        if await self.refresh() and self.on_update is not None:
            await self.on_update()
