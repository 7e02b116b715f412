"""Conversion of GTFS-RT feed messages into domain trip updates."""

import logging

from google.transit import gtfs_realtime_pb2

from gtfs_departures.domain.models.trip_update import StopTimeEvent, StopTimeUpdate, TripUpdate

logger = logging.getLogger(__name__)

_IGNORED_STOP_RELATIONSHIPS = {
    gtfs_realtime_pb2.TripUpdate.StopTimeUpdate.SKIPPED,
    gtfs_realtime_pb2.TripUpdate.StopTimeUpdate.NO_DATA,
}


def _parse_event(
    stop_time_update: gtfs_realtime_pb2.TripUpdate.StopTimeUpdate, field_name: str
) -> StopTimeEvent | None:
    if not stop_time_update.HasField(field_name):
        return None
    event = getattr(stop_time_update, field_name)
    delay = event.delay if event.HasField("delay") else None
    timestamp = event.time if event.HasField("time") else None
    if delay is None and timestamp is None:
        return None
    return StopTimeEvent(delay=delay, time=timestamp)


def parse_feed_message(feed: gtfs_realtime_pb2.FeedMessage) -> list[TripUpdate]:
    """Extract trip updates from a decoded GTFS-RT feed message.

    Entities without a trip update or trip ID are skipped, as are stop time
    updates flagged SKIPPED or NO_DATA.
    """
    updates: list[TripUpdate] = []
    for entity in feed.entity:
        if not entity.HasField("trip_update"):
            continue
        trip_update = entity.trip_update
        trip_id = trip_update.trip.trip_id
        if not trip_id:
            logger.debug(f"Skipping trip update entity {entity.id} without trip_id")
            continue

        stop_time_updates: list[StopTimeUpdate] = []
        for stop_time_update in trip_update.stop_time_update:
            if stop_time_update.schedule_relationship in _IGNORED_STOP_RELATIONSHIPS:
                continue
            stop_time_updates.append(
                StopTimeUpdate(
                    stop_sequence=(
                        stop_time_update.stop_sequence
                        if stop_time_update.HasField("stop_sequence")
                        else None
                    ),
                    arrival=_parse_event(stop_time_update, "arrival"),
                    departure=_parse_event(stop_time_update, "departure"),
                )
            )

        updates.append(
            TripUpdate(
                trip_id=trip_id,
                stop_time_updates=tuple(stop_time_updates),
                delay=trip_update.delay if trip_update.HasField("delay") else None,
            )
        )
    return updates
