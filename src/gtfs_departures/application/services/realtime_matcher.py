"""Realtime matcher service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gtfs_departures.domain.models.realtime_update import DelaySource, RealtimeUpdate

if TYPE_CHECKING:
    from datetime import datetime

    from gtfs_departures.domain.contracts.realtime_cache import RealtimeCacheProtocol
    from gtfs_departures.domain.models.trip_update import (
        StopTimeEvent,
        StopTimeUpdate,
        TripUpdate,
    )

logger = logging.getLogger(__name__)

# Agencies publish epoch-zero sentinels; anything further off than this is noise
MAX_CREDIBLE_DERIVED_DELAY_SECONDS = 12 * 60 * 60


class RealtimeMatcher:
    """Finds the delay that applies to a trip at a given stop."""

    def __init__(self, realtime_cache: RealtimeCacheProtocol | None = None) -> None:
        """Initialize the matcher.

        Args:
            realtime_cache: Cache of the latest trip updates. None means no
                realtime source is configured and nothing ever matches.
        """
        self._realtime_cache = realtime_cache

    def match(
        self, trip_id: str, stop_sequence: int, scheduled_instant: datetime
    ) -> RealtimeUpdate | None:
        """Match a realtime delay to a scheduled stop.

        Order of preference:
        1. the stop-level update with the greatest stop_sequence not past the
           queried one, using departure before arrival and explicit delays
           before delays derived from absolute timestamps (derived delays
           beyond 12 hours are discarded),
        2. the trip-level delay,
        3. no data.

        Args:
            trip_id: Trip to match.
            stop_sequence: Position of the queried stop along the trip.
            scheduled_instant: Scheduled departure at the stop, used to derive
                delays from absolute timestamps.

        Returns:
            The matched update, or None when there is no usable data. A delay
            of 0 is a match, not "no data".
        """
        if self._realtime_cache is None:
            return None

        trip_update = self._realtime_cache.get(trip_id)
        if trip_update is None:
            return None

        stop_update = self._applicable_stop_update(trip_update, stop_sequence)
        if stop_update is not None:
            matched = self._delay_from_stop_update(trip_id, stop_update, scheduled_instant)
            if matched is not None:
                return matched

        if trip_update.delay is not None:
            return RealtimeUpdate(
                trip_id=trip_id,
                stop_sequence=None,
                delay_seconds=trip_update.delay,
                source=DelaySource.TRIP_LEVEL_FALLBACK,
            )
        return None

    @staticmethod
    def _applicable_stop_update(
        trip_update: TripUpdate, stop_sequence: int
    ) -> StopTimeUpdate | None:
        best: StopTimeUpdate | None = None
        for update in trip_update.stop_time_updates:
            if update.stop_sequence is None or update.stop_sequence > stop_sequence:
                continue
            if best is None or update.stop_sequence > best.stop_sequence:  # type: ignore[operator]
                best = update
        return best

    def _delay_from_stop_update(
        self, trip_id: str, update: StopTimeUpdate, scheduled_instant: datetime
    ) -> RealtimeUpdate | None:
        events: list[StopTimeEvent] = [
            event for event in (update.departure, update.arrival) if event is not None
        ]

        for event in events:
            if event.delay is not None:
                return RealtimeUpdate(
                    trip_id=trip_id,
                    stop_sequence=update.stop_sequence,
                    delay_seconds=event.delay,
                    source=DelaySource.EXPLICIT_DELAY,
                )

        scheduled_timestamp = int(scheduled_instant.timestamp())
        for event in events:
            if event.time is None:
                continue
            delay = event.time - scheduled_timestamp
            if abs(delay) > MAX_CREDIBLE_DERIVED_DELAY_SECONDS:
                logger.debug(
                    f"Discarding non-credible delay of {delay}s for trip {trip_id} "
                    f"at stop_sequence {update.stop_sequence}"
                )
                continue
            return RealtimeUpdate(
                trip_id=trip_id,
                stop_sequence=update.stop_sequence,
                delay_seconds=delay,
                source=DelaySource.DERIVED_FROM_TIMESTAMP,
            )
        return None
