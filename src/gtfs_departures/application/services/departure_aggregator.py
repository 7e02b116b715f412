"""Departure aggregation, ordering and time-window filtering."""

import logging
import re
import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from gtfs_departures.domain.models.departure_event import DepartureEvent
from gtfs_departures.domain.models.display_settings import DisplaySettings, SortMode
from gtfs_departures.domain.models.realtime_update import RealtimeUpdate
from gtfs_departures.domain.models.route_ref import RouteRef
from gtfs_departures.domain.models.stop_ref import StopRef
from gtfs_departures.domain.models.stop_time import StopTime
from gtfs_departures.domain.models.trip import Trip

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"(\d+)")


def collation_key(text: str) -> tuple[tuple[int, Any, str], ...]:
    """Build a numeral-aware, case- and accent-insensitive sort key.

    "2" sorts before "10", "Bus 9" before "Bus 10", and "Émile" next to
    "Emile". The original text is the last tiebreaker so the key is total.
    """
    normalized = unicodedata.normalize("NFC", text)
    key: list[tuple[int, Any, str]] = []
    for part in _DIGITS.split(normalized):
        if not part:
            continue
        if part.isdigit():
            key.append((0, int(part), part))
        else:
            decomposed = unicodedata.normalize("NFKD", part)
            folded = "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()
            key.append((1, folded, part))
    return tuple(key)


@dataclass(frozen=True)
class DepartureCandidate:
    """One (stop, route, trip, instant) combination discovered in a cycle."""

    stop: StopRef
    route: RouteRef
    trip: Trip
    stop_time: StopTime
    scheduled_instant: datetime
    realtime: RealtimeUpdate | None = None


class DepartureAggregator:
    """Builds, deduplicates, orders and filters departure events."""

    def __init__(self, settings: DisplaySettings | None = None) -> None:
        """Initialize with display settings."""
        self.settings = settings or DisplaySettings()

    def aggregate(
        self, candidates: Iterable[DepartureCandidate], now: datetime
    ) -> list[DepartureEvent]:
        """Turn candidates into the final ordered departure list.

        Args:
            candidates: All candidates of one broadcast cycle.
            now: Current time for the time-window filter.

        Returns:
            One event per dedup key, sorted and without departures older than
            the grace period.
        """
        events: dict[str, DepartureEvent] = {}
        for candidate in candidates:
            try:
                event = self._build_event(candidate)
            except ValueError as e:
                logger.warning(f"Dropping malformed departure record: {e}")
                continue
            # Later writes win: overlapping queries collapse to one event
            events[event.dedup_key] = event

        ordered = self.sort_events(events.values())
        return self.filter_events(ordered, now)

    def sort_events(self, events: Iterable[DepartureEvent]) -> list[DepartureEvent]:
        """Sort by stop, route, direction, terminus and time (stable)."""
        return sorted(events, key=self._sort_key)

    def filter_events(self, events: list[DepartureEvent], now: datetime) -> list[DepartureEvent]:
        """Drop departures whose effective time is beyond the grace period."""
        cutoff = now - timedelta(minutes=self.settings.grace_period_minutes)
        kept = [event for event in events if event.estimated_instant >= cutoff]
        if len(kept) != len(events):
            logger.debug(f"Filtered out {len(events) - len(kept)} departed trip(s)")
        return kept

    def _sort_key(self, event: DepartureEvent) -> tuple[Any, ...]:
        settings = self.settings
        instant = (
            event.estimated_instant
            if settings.sort_mode is SortMode.ESTIMATED
            else event.scheduled_instant
        )
        return (
            collation_key(event.stop_name) if settings.group_by_stop else (),
            collation_key(event.route_label),
            -1 if event.direction is None else event.direction,
            collation_key(event.trip_terminus) if settings.split_by_terminus else (),
            instant,
        )

    @staticmethod
    def _build_event(candidate: DepartureCandidate) -> DepartureEvent:
        stop, route, trip = candidate.stop, candidate.route, candidate.trip
        missing = [
            name
            for name, value in (
                ("stop_id", stop.stop_id),
                ("route_id", route.route_id),
                ("trip_id", trip.trip_id),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"missing {', '.join(missing)} (trip={trip!r})")

        realtime = candidate.realtime
        return DepartureEvent(
            stop_id=stop.stop_id,
            stop_name=stop.stop_name,
            route_id=route.route_id,
            route_name=route.route_long_name,
            route_short_name=route.route_short_name,
            trip_id=trip.trip_id,
            direction=trip.direction,
            trip_terminus=trip.headsign,
            stop_sequence=candidate.stop_time.stop_sequence,
            scheduled_instant=candidate.scheduled_instant,
            delay_seconds=realtime.delay_seconds if realtime is not None else None,
        )
