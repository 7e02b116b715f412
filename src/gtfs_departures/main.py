"""Main entry point for the GTFS departures application."""

import asyncio
import logging
import sys

import aiohttp

from gtfs_departures.adapters.cache import SharedRealtimeCache
from gtfs_departures.adapters.config import AppConfig, QueryConfigurationLoader
from gtfs_departures.adapters.gtfs_realtime import GtfsRealtimeFeedSource, PollingDelayFeedSource
from gtfs_departures.adapters.gtfs_static import GtfsZipScheduleStore
from gtfs_departures.adapters.pollers import (
    BroadcastPoller,
    IntervalPoller,
    RealtimePoller,
    ScheduleRefreshPoller,
)
from gtfs_departures.adapters.sinks import LoggingDepartureSink, StateSink
from gtfs_departures.application.services import DepartureEngine
from gtfs_departures.domain.errors import ScheduleStoreUnavailableError
from gtfs_departures.domain.models import RealtimeMode
from gtfs_departures.domain.ports import RealtimeFeedSource

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)


def create_feed_source(
    config: AppConfig, session: aiohttp.ClientSession
) -> RealtimeFeedSource | None:
    """Create the realtime feed source for the configured mode."""
    mode = config.get_realtime_mode()
    if mode is RealtimeMode.GTFS_RT:
        return GtfsRealtimeFeedSource(
            config.realtime_urls,
            session=session,
            feed_format=config.realtime_format,
            timeout_seconds=config.request_timeout_seconds,
        )
    if mode is RealtimeMode.POLLING_DELAY:
        return PollingDelayFeedSource(
            config.realtime_urls,
            session=session,
            timeout_seconds=config.request_timeout_seconds,
        )
    return None


async def main() -> None:
    """Main application entry point."""
    config = AppConfig()

    try:
        queries = QueryConfigurationLoader.load(config)
        schedule_source = config.get_schedule_source()
    except (ValueError, FileNotFoundError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    if not queries:
        logger.error("No queries configured.")
        logger.error("Add [[queries]] entries with route_name and/or stop_name to your config.")
        sys.exit(1)
    logger.info(f"Loaded {len(queries)} query(s)")

    async with aiohttp.ClientSession() as session:
        store = GtfsZipScheduleStore(
            session=session, timeout_seconds=config.request_timeout_seconds
        )
        feed_source = create_feed_source(config, session)
        realtime_cache = SharedRealtimeCache() if feed_source is not None else None

        engine = DepartureEngine(
            store,
            display_settings=config.get_display_settings(),
            realtime_cache=realtime_cache,
            sinks=[LoggingDepartureSink(), StateSink()],
            timezone=config.get_timezone(),
        )

        try:
            await engine.register(queries, schedule_source)
        except ScheduleStoreUnavailableError as e:
            logger.error(f"Schedule unavailable: {e}")
            sys.exit(1)

        pollers: list[IntervalPoller] = [
            BroadcastPoller(engine, config.broadcast_interval_seconds),
            ScheduleRefreshPoller(engine, schedule_source, config.schedule_refresh_hours),
        ]
        if feed_source is not None and realtime_cache is not None:
            pollers.append(
                RealtimePoller(
                    feed_source,
                    realtime_cache,
                    config.realtime_refresh_seconds,
                    on_update=engine.broadcast,
                )
            )

        for poller in pollers:
            await poller.start()
        try:
            await asyncio.Event().wait()
        finally:
            logger.info("Shutting down...")
            for poller in pollers:
                await poller.stop()


def run() -> None:
    """Synchronous entry point for the application command."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
