"""In-memory index of a static GTFS archive."""

from __future__ import annotations

import csv
import io
import logging
import zipfile
from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass, field

from gtfs_departures.domain.models.calendar import WEEKDAY_NAMES, Calendar
from gtfs_departures.domain.models.route_ref import RouteRef
from gtfs_departures.domain.models.stop_ref import StopRef
from gtfs_departures.domain.models.stop_time import StopTime
from gtfs_departures.domain.models.trip import Trip

logger = logging.getLogger(__name__)

REQUIRED_FILES = ("routes.txt", "stops.txt", "trips.txt", "stop_times.txt")


@dataclass
class GtfsIndex:
    """Lookup tables built from one GTFS archive.

    Built completely before it is handed to the store, never modified after.
    """

    routes: dict[str, RouteRef] = field(default_factory=dict)
    stops: dict[str, StopRef] = field(default_factory=dict)
    trips: dict[str, Trip] = field(default_factory=dict)
    calendars: dict[str, Calendar] = field(default_factory=dict)
    trips_by_route: dict[str, list[str]] = field(default_factory=lambda: defaultdict(list))
    stop_ids_by_route: dict[str, set[str]] = field(default_factory=lambda: defaultdict(set))
    stop_times_by_trip: dict[str, list[StopTime]] = field(
        default_factory=lambda: defaultdict(list)
    )

    @classmethod
    def from_zip_bytes(cls, payload: bytes, exclude: tuple[str, ...] = ()) -> GtfsIndex:
        """Parse a GTFS zip archive.

        Args:
            payload: Raw bytes of the archive.
            exclude: File names to skip (e.g. "calendar.txt").

        Raises:
            zipfile.BadZipFile: If the payload is not a zip archive.
            ValueError: If a required file is missing.
        """
        index = cls()
        with zipfile.ZipFile(io.BytesIO(payload)) as archive:
            members = {_base_name(name): name for name in archive.namelist()}
            missing = [name for name in REQUIRED_FILES if name not in members]
            if missing:
                raise ValueError(f"GTFS archive is missing {', '.join(missing)}")

            def rows(filename: str) -> Iterator[dict[str, str]]:
                if filename in exclude or filename not in members:
                    return iter(())
                return _iter_csv(archive, members[filename])

            index._load_routes(rows("routes.txt"))
            index._load_stops(rows("stops.txt"))
            index._load_trips(rows("trips.txt"))
            index._load_stop_times(rows("stop_times.txt"))
            index._load_calendars(rows("calendar.txt"))

        logger.info(
            f"GTFS index loaded: {len(index.routes)} routes, {len(index.stops)} stops, "
            f"{len(index.trips)} trips, {len(index.calendars)} calendars"
        )
        return index

    def _load_routes(self, rows: Iterator[dict[str, str]]) -> None:
        for row in rows:
            route_id = (row.get("route_id") or "").strip()
            if not route_id:
                continue
            self.routes[route_id] = RouteRef(
                route_id=route_id,
                route_long_name=(row.get("route_long_name") or "").strip(),
                route_short_name=(row.get("route_short_name") or "").strip(),
            )

    def _load_stops(self, rows: Iterator[dict[str, str]]) -> None:
        for row in rows:
            stop_id = (row.get("stop_id") or "").strip()
            if not stop_id:
                continue
            self.stops[stop_id] = StopRef(
                stop_id=stop_id, stop_name=(row.get("stop_name") or "").strip()
            )

    def _load_trips(self, rows: Iterator[dict[str, str]]) -> None:
        for row in rows:
            trip_id = (row.get("trip_id") or "").strip()
            route_id = (row.get("route_id") or "").strip()
            service_id = (row.get("service_id") or "").strip()
            if not trip_id or not route_id or not service_id:
                continue
            direction_raw = (row.get("direction_id") or "").strip()
            self.trips[trip_id] = Trip(
                trip_id=trip_id,
                route_id=route_id,
                service_id=service_id,
                direction=int(direction_raw) if direction_raw in ("0", "1") else None,
                headsign=(row.get("trip_headsign") or "").strip(),
            )
            self.trips_by_route[route_id].append(trip_id)

    def _load_stop_times(self, rows: Iterator[dict[str, str]]) -> None:
        skipped = 0
        for row in rows:
            trip_id = (row.get("trip_id") or "").strip()
            stop_id = (row.get("stop_id") or "").strip()
            departure = (row.get("departure_time") or row.get("arrival_time") or "").strip()
            try:
                sequence = int(row.get("stop_sequence") or "")
            except ValueError:
                skipped += 1
                continue
            if not trip_id or not stop_id:
                skipped += 1
                continue
            self.stop_times_by_trip[trip_id].append(
                StopTime(
                    trip_id=trip_id,
                    stop_id=stop_id,
                    stop_sequence=sequence,
                    departure_time=departure,
                )
            )
            trip = self.trips.get(trip_id)
            if trip is not None:
                self.stop_ids_by_route[trip.route_id].add(stop_id)

        for stop_times in self.stop_times_by_trip.values():
            stop_times.sort(key=lambda st: st.stop_sequence)
        if skipped:
            logger.debug(f"Skipped {skipped} stop_times row(s) without trip, stop or sequence")

    def _load_calendars(self, rows: Iterator[dict[str, str]]) -> None:
        for row in rows:
            service_id = (row.get("service_id") or "").strip()
            if not service_id:
                continue
            self.calendars[service_id] = Calendar(
                service_id=service_id,
                days=tuple(  # type: ignore[arg-type]
                    (row.get(day) or "").strip() == "1" for day in WEEKDAY_NAMES
                ),
            )


def _base_name(member: str) -> str:
    return member.rsplit("/", 1)[-1].lower()


def _iter_csv(archive: zipfile.ZipFile, member: str) -> Iterator[dict[str, str]]:
    with archive.open(member) as raw:
        text = io.TextIOWrapper(raw, encoding="utf-8-sig", newline="")
        yield from csv.DictReader(text)
