"""Departure sink adapters."""

from gtfs_departures.adapters.sinks.departures_state import DeparturesState
from gtfs_departures.adapters.sinks.logging_sink import LoggingDepartureSink, format_departure
from gtfs_departures.adapters.sinks.state_sink import StateSink

__all__ = ["DeparturesState", "LoggingDepartureSink", "StateSink", "format_departure"]
