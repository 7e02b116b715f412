"""Query configuration loader."""

import logging
from typing import Any

from gtfs_departures.adapters.config.app_config import AppConfig
from gtfs_departures.domain.models.query import Query

logger = logging.getLogger(__name__)


class QueryConfigurationLoader:
    """Loads watch queries from app config."""

    @staticmethod
    def load_query_from_data(query_data: dict[str, Any]) -> Query | None:
        """Load a single query from a data dict.

        Numeric names (``route_name = 49``) are accepted and converted to
        strings.

        Raises:
            ValueError: If direction is set to anything other than 0 or 1.
        """
        if not isinstance(query_data, dict):
            return None

        route_name = query_data.get("route_name")
        stop_name = query_data.get("stop_name")
        direction = query_data.get("direction")

        if route_name is not None and not isinstance(route_name, str):
            route_name = str(route_name) if isinstance(route_name, int) else None
        if stop_name is not None and not isinstance(stop_name, str):
            stop_name = str(stop_name) if isinstance(stop_name, int) else None

        # Treat empty strings as unset
        route_name = route_name or None
        stop_name = stop_name or None

        if direction is not None:
            if isinstance(direction, bool) or direction not in (0, 1):
                raise ValueError(f"Query direction must be 0 or 1, got {direction!r}")
            direction = int(direction)

        if route_name is None and stop_name is None:
            logger.warning("Query without route_name and stop_name watches the whole network")

        return Query(route_name=route_name, stop_name=stop_name, direction=direction)

    @staticmethod
    def load(config: AppConfig) -> list[Query]:
        """Load all queries from app config."""
        queries: list[Query] = []
        for query_data in config.get_queries_config():
            query = QueryConfigurationLoader.load_query_from_data(query_data)
            if query is not None:
                queries.append(query)
        return queries
