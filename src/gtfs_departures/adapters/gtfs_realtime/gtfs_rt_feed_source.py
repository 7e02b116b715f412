"""GTFS-Realtime trip update feed source.

Supports the binary protobuf encoding and the protobuf JSON mapping served
by some agencies.
"""

from __future__ import annotations

import asyncio
import json
import logging

import aiohttp
from google.protobuf import json_format
from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from gtfs_departures.adapters.api_request_logger import log_api_request, log_api_response
from gtfs_departures.adapters.gtfs_realtime.trip_update_parser import parse_feed_message
from gtfs_departures.domain.errors import RealtimeFeedError
from gtfs_departures.domain.models.trip_update import TripUpdate
from gtfs_departures.domain.ports.realtime_feed_source import RealtimeFeedSource

logger = logging.getLogger(__name__)


class GtfsRealtimeFeedSource(RealtimeFeedSource):
    """Adapter fetching GTFS-RT trip updates from one or more URLs."""

    def __init__(
        self,
        urls: list[str],
        session: aiohttp.ClientSession | None = None,
        feed_format: str = "protobuf",
        timeout_seconds: int = 30,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize the feed source.

        Args:
            urls: Feed URLs. Their trip updates are merged into one snapshot.
            session: Optional aiohttp session for HTTP connections.
            feed_format: "protobuf" or "json".
            timeout_seconds: Request timeout in seconds.
            headers: Extra request headers (e.g. API keys).
        """
        if feed_format not in ("protobuf", "json"):
            raise ValueError("feed_format must be either 'protobuf' or 'json'")
        self._urls = list(urls)
        self._session = session
        self._feed_format = feed_format
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._headers = headers or {}

    async def fetch(self) -> list[TripUpdate]:
        """Fetch and decode every configured feed.

        Raises:
            RealtimeFeedError: If any feed fails, so a partial snapshot is
                never produced.
        """
        if self._session is None:
            async with aiohttp.ClientSession() as session:
                return await self._fetch_all(session)
        return await self._fetch_all(self._session)

    async def _fetch_all(self, session: aiohttp.ClientSession) -> list[TripUpdate]:
        updates: list[TripUpdate] = []
        for url in self._urls:
            feed = await self._fetch_feed(session, url)
            updates.extend(parse_feed_message(feed))
        logger.debug(f"Fetched {len(updates)} trip update(s) from {len(self._urls)} feed(s)")
        return updates

    async def _fetch_feed(
        self, session: aiohttp.ClientSession, url: str
    ) -> gtfs_realtime_pb2.FeedMessage:
        log_api_request("GET", url, headers=self._headers)
        try:
            async with session.get(url, headers=self._headers, timeout=self._timeout) as response:
                payload = await response.read()
                log_api_response(url, response.status, len(payload))
                if response.status != 200:
                    raise RealtimeFeedError(
                        f"Bad API call: Got response ({response.status}) from {url}"
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RealtimeFeedError(f"Failed to fetch {url}: {e}") from e

        return self.decode(payload, self._feed_format, url)

    @staticmethod
    def decode(payload: bytes, feed_format: str, url: str = "") -> gtfs_realtime_pb2.FeedMessage:
        """Decode a raw feed payload.

        Raises:
            RealtimeFeedError: If the payload is not a valid feed message.
        """
        feed = gtfs_realtime_pb2.FeedMessage()
        try:
            if feed_format == "json":
                json_format.ParseDict(json.loads(payload), feed, ignore_unknown_fields=True)
            else:
                feed.ParseFromString(payload)
        except (DecodeError, json_format.ParseError, ValueError) as e:
            raise RealtimeFeedError(f"Failed to decode {feed_format} feed {url}: {e}") from e
        return feed
