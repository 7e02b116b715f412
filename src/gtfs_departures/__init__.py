"""GTFS departures: upcoming departures for watched routes and stops."""
