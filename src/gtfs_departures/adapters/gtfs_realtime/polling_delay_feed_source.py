"""Feed source for plain JSON endpoints that report one delay per trip."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from gtfs_departures.adapters.api_request_logger import log_api_request, log_api_response
from gtfs_departures.domain.errors import RealtimeFeedError
from gtfs_departures.domain.models.trip_update import TripUpdate
from gtfs_departures.domain.ports.realtime_feed_source import RealtimeFeedSource

logger = logging.getLogger(__name__)


def parse_delay_records(data: Any) -> list[TripUpdate]:
    """Convert a delay payload into trip-level updates.

    Accepts either a list of records or an object with a ``delays`` list.
    Each record needs ``trip_id`` and either ``delay_seconds`` / ``delay``
    (seconds) or ``delay_minutes``. Records without a usable delay are skipped.
    """
    records = data.get("delays", []) if isinstance(data, dict) else data
    if not isinstance(records, list):
        raise RealtimeFeedError("Delay payload must be a list or an object with 'delays'")

    updates: list[TripUpdate] = []
    for record in records:
        if not isinstance(record, dict):
            continue
        trip_id = str(record.get("trip_id") or "").strip()
        if not trip_id:
            continue
        try:
            if record.get("delay_seconds") is not None:
                delay = int(record["delay_seconds"])
            elif record.get("delay") is not None:
                delay = int(record["delay"])
            elif record.get("delay_minutes") is not None:
                delay = round(float(record["delay_minutes"]) * 60)
            else:
                continue
        except (TypeError, ValueError):
            logger.debug(f"Skipping delay record with unusable delay: {record}")
            continue
        updates.append(TripUpdate(trip_id=trip_id, delay=delay))
    return updates


class PollingDelayFeedSource(RealtimeFeedSource):
    """Adapter polling JSON endpoints for trip-level delays."""

    def __init__(
        self,
        urls: list[str],
        session: aiohttp.ClientSession | None = None,
        timeout_seconds: int = 30,
    ) -> None:
        """Initialize with endpoint URLs and optional aiohttp session."""
        self._urls = list(urls)
        self._session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def fetch(self) -> list[TripUpdate]:
        """Fetch trip-level delays from every endpoint.

        Raises:
            RealtimeFeedError: If any endpoint fails.
        """
        if self._session is None:
            async with aiohttp.ClientSession() as session:
                return await self._fetch_all(session)
        return await self._fetch_all(self._session)

    async def _fetch_all(self, session: aiohttp.ClientSession) -> list[TripUpdate]:
        updates: list[TripUpdate] = []
        for url in self._urls:
            log_api_request("GET", url)
            try:
                async with session.get(url, timeout=self._timeout) as response:
                    log_api_response(url, response.status, response.content_length or 0)
                    if response.status != 200:
                        raise RealtimeFeedError(
                            f"Bad API call: Got response ({response.status}) from {url}"
                        )
                    data = await response.json(content_type=None)
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                raise RealtimeFeedError(f"Failed to fetch {url}: {e}") from e
            updates.extend(parse_delay_records(data))
        return updates
