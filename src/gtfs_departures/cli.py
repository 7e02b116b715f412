"""CLI helpers for writing departure queries against a GTFS feed."""

import asyncio
import json
import sys
from dataclasses import asdict

from gtfs_departures.adapters.gtfs_static import GtfsZipScheduleStore
from gtfs_departures.adapters.sinks import format_departure
from gtfs_departures.application.services import DepartureEngine, QueryResolver, collation_key
from gtfs_departures.domain.errors import ScheduleStoreUnavailableError
from gtfs_departures.domain.models import Query, RouteFilter, ScheduleSource


def _schedule_source(location: str) -> ScheduleSource:
    if location.startswith(("http://", "https://")):
        return ScheduleSource(url=location)
    return ScheduleSource(path=location)


async def list_routes(store: GtfsZipScheduleStore, name: str | None, as_json: bool) -> None:
    """Print routes whose id, short name or long name contains ``name``."""
    routes = await store.get_routes(RouteFilter())
    if name:
        routes = [
            r
            for r in routes
            if name in r.route_id or name in r.route_short_name or name in r.route_long_name
        ]
    routes.sort(key=lambda r: collation_key(r.label))

    if as_json:
        print(json.dumps([asdict(r) for r in routes], indent=2, ensure_ascii=False))
        return
    if not routes:
        print(f"No routes found for '{name}'", file=sys.stderr)
        sys.exit(1)
    print(f"\nFound {len(routes)} route(s):\n")
    for route in routes:
        print(f"  {route.label:<10} {route.route_long_name}  (route_id: {route.route_id})")


async def resolve_query(store: GtfsZipScheduleStore, query: Query, as_json: bool) -> None:
    """Print the stops and routes a query resolves to."""
    resolved = await QueryResolver(store).resolve(query)
    stops = sorted(resolved.stops, key=lambda s: collation_key(s.stop_name))
    routes = sorted(resolved.routes, key=lambda r: collation_key(r.label))

    if as_json:
        payload = {
            "stops": [asdict(s) for s in stops],
            "routes": [asdict(r) for r in routes],
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return
    if resolved.is_empty:
        print("Query matches no stops.", file=sys.stderr)
        sys.exit(1)
    print(f"\nStops ({len(stops)}):")
    for stop in stops:
        print(f"  {stop.stop_name}  (stop_id: {stop.stop_id})")
    print(f"\nRoutes ({len(routes)}):")
    for route in routes:
        print(f"  {route.label}  {route.route_long_name}")


async def show_departures(engine: DepartureEngine, query: Query, limit: int) -> None:
    """Print the next departures for a single query."""
    await engine.register([query])
    events = engine.last_events
    if not events:
        print("No upcoming departures.", file=sys.stderr)
        sys.exit(1)
    for event in events[:limit]:
        print(f"  {format_departure(event)}")


async def main() -> None:
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="GTFS Departures Configuration Helper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List routes whose name contains "49"
  gtfs-config --schedule google_bus.zip routes 49

  # Show which stops and routes a query watches
  gtfs-config --schedule google_bus.zip resolve --route 49 --stop "Main St"

  # Show upcoming departures for a query
  gtfs-config --schedule google_bus.zip departures --route 49 --stop "Main St" --direction 1
        """,
    )
    parser.add_argument("--schedule", required=True, help="GTFS zip path or URL")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    routes_parser = subparsers.add_parser("routes", help="List routes")
    routes_parser.add_argument("name", nargs="?", help="Route name substring")
    routes_parser.add_argument("--json", action="store_true", help="Output as JSON")

    for command, help_text in (
        ("resolve", "Show stops and routes a query resolves to"),
        ("departures", "Show upcoming departures for a query"),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("--route", help="Route name substring")
        sub.add_argument("--stop", help="Stop name substring")
        sub.add_argument("--direction", type=int, choices=(0, 1), help="GTFS direction_id")
        if command == "resolve":
            sub.add_argument("--json", action="store_true", help="Output as JSON")
        else:
            sub.add_argument("--limit", type=int, default=20, help="Departures to show")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    store = GtfsZipScheduleStore()
    engine = DepartureEngine(store)
    try:
        await engine.start(_schedule_source(args.schedule))

        if args.command == "routes":
            await list_routes(store, args.name, args.json)
        else:
            query = Query(route_name=args.route, stop_name=args.stop, direction=args.direction)
            if args.command == "resolve":
                await resolve_query(store, query, args.json)
            else:
                await show_departures(engine, query, args.limit)

    except ScheduleStoreUnavailableError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()
