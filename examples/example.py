"""Example usage of TflAPI."""

import sys
from pathlib import Path

# Add src to path so we can import tfltrack
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tfltrack import DepartureTime, TflAPI, TflError
from tfltrack.logging_config import setup_logging
from tfltrack.timeutil import local_today

setup_logging()


def print_line_overview(api: TflAPI, mode: str = "tube"):
    """Print every line of a mode with its current status."""
    print(f"\n{'='*70}")
    print(f"Lines for mode: {mode}")
    print(f"{'='*70}\n")
    for line in api.lines(mode, include_status=True):
        print(f"{line.name:<25} {'; '.join(line.status) or 'Status unknown'}")


def print_arrivals(api: TflAPI, line_id: str, station_id: str):
    """
    Print live arrivals at a station, by platform.

    Args:
        line_id: TfL line id (e.g. "victoria")
        station_id: Naptan id (e.g. "940GZZLUOXC" for Oxford Circus)
    """
    arrivals = api.arrivals_for(line_id, station_id)
    if not arrivals.platforms:
        print("  No arrivals found")
        return
    print(f"\nArrivals at {arrivals.station_name}:")
    for platform in arrivals.platforms:
        print(f"\n{platform.name}:")
        for arrival in platform.arrivals:
            tracked = "" if arrival.can_be_tracked else " (untracked)"
            print(f"  {arrival.eta()} → {arrival.towards}{tracked}")


def print_first_departure(api: TflAPI, line_id: str, origin: str, destination: str):
    """Print today's first scheduled departure from origin, stop by stop."""
    weekday = local_today().weekday()
    departures = api.scheduled_departure_times(line_id, origin, destination, weekday)
    if not departures.departure_times:
        print("  No departures scheduled")
        return
    first = departures.departure_times[0]
    timetable = api.scheduled_timetable(
        line_id, origin, destination, weekday, DepartureTime(hour=first.hour, minute=first.minute)
    )
    print(f"\n{timetable.from_station.short_name} → {timetable.to_station.short_name} at {first.etd()}")
    for stop in timetable.stops:
        print(f"  {stop.eta}  {stop.station.short_name}")


if __name__ == "__main__":
    line_id = sys.argv[1] if len(sys.argv) > 1 else "victoria"
    station_id = sys.argv[2] if len(sys.argv) > 2 else "940GZZLUOXC"

    with TflAPI() as api:
        print_line_overview(api)
        try:
            print_arrivals(api, line_id, station_id)
            routes = api.routes(line_id)
            if routes:
                print_first_departure(api, line_id, routes[0].start, routes[0].dest)
        except TflError as e:
            print(f"Error: {e}")
            sys.exit(1)
