"""Resolved query domain model."""

from dataclasses import dataclass, field

from gtfs_departures.domain.models.query import Query
from gtfs_departures.domain.models.route_ref import RouteRef
from gtfs_departures.domain.models.stop_ref import StopRef


@dataclass(frozen=True)
class ResolvedQuery:
    """Concrete stops and routes a query maps to.

    Built once per registered query and never mutated; a new resolution
    replaces the old one.
    """

    query: Query
    stops: frozenset[StopRef] = field(default_factory=frozenset)
    routes: frozenset[RouteRef] = field(default_factory=frozenset)

    @property
    def direction(self) -> int | None:
        return self.query.direction

    @property
    def is_empty(self) -> bool:
        return not self.stops or not self.routes
