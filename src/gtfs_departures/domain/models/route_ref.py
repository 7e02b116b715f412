"""Route reference domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RouteRef:
    """A route as returned by the schedule store."""

    route_id: str
    route_long_name: str
    route_short_name: str = ""

    @property
    def label(self) -> str:
        """Short display identifier, falling back to the route id."""
        return self.route_short_name or self.route_id
