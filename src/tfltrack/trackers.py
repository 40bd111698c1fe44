"""Reshape live arrival records into platform and vehicle views."""

import logging
from datetime import timedelta
from typing import Dict, List

from .models import Arrival, Arrivals, Platform, VehicleSchedule, VehicleStop
from .timeutil import parse_rfc3339
from .wire import StationArrival, VehicleArrival

logger = logging.getLogger(__name__)

PLATFORM_NOT_SPECIFIED = "Platform Not Specified"
NOT_AVAILABLE = "Not Available"


def cleansed_platform_name(record: StationArrival) -> str:
    if record.platform_name in ("", "null"):
        return PLATFORM_NOT_SPECIFIED
    return record.platform_name


def arrivals_from_records(records: List[StationArrival]) -> Arrivals:
    """
    Build the station view from raw arrival records.

    Station id and name come from the first record. An empty input gives an
    empty Arrivals.
    """
    if not records:
        return Arrivals()
    return Arrivals(
        station_id=records[0].naptan_id,
        station_name=records[0].station_name,
        platforms=arrivals_by_platform(records),
    )


def arrivals_by_platform(records: List[StationArrival]) -> List[Platform]:
    """
    Group arrivals by platform.

    Returns:
        Platforms sorted by name, each with arrivals sorted by time to station.
    """
    by_platform: Dict[str, Platform] = {}
    for record in records:
        name = cleansed_platform_name(record)
        if name not in by_platform:
            by_platform[name] = Platform(name=name)
        by_platform[name].arrivals.append(
            Arrival(
                vehicle_id=record.vehicle_id,
                towards=record.towards,
                current_location=record.current_location or NOT_AVAILABLE,
                time_to_station=timedelta(seconds=record.time_to_station),
                expected_arrival=parse_rfc3339(record.expected_arrival),
            )
        )

    platforms = list(by_platform.values())
    for platform in platforms:
        platform.arrivals.sort(key=lambda a: a.time_to_station)
    platforms.sort(key=lambda p: p.name)
    return platforms


def vehicle_schedule_from_records(
    line_id: str, vehicle_id: str, records: List[VehicleArrival]
) -> VehicleSchedule:
    """
    Build a vehicle's schedule on one line.

    Records for other lines are dropped; if nothing is left the empty
    VehicleSchedule is returned.
    """
    on_line = [r for r in records if r.line_id == line_id]
    if not on_line:
        return VehicleSchedule()
    return VehicleSchedule(
        vehicle_id=vehicle_id,
        line=on_line[0].line_name,
        destination=_vehicle_destination(on_line),
        current_location=_vehicle_current_location(on_line),
        stops=_vehicle_stops(on_line),
    )


def _vehicle_destination(records: List[VehicleArrival]) -> str:
    first = records[0]
    if first.destination_name:
        return first.destination_name
    if first.towards:
        return first.towards
    return NOT_AVAILABLE


def _vehicle_current_location(records: List[VehicleArrival]) -> str:
    # Longest description wins, it tends to be the most specific
    result = ""
    for record in records:
        if len(record.current_location) > len(result):
            result = record.current_location
    return result


def _vehicle_stops(records: List[VehicleArrival]) -> List[VehicleStop]:
    stops = [
        VehicleStop(
            station_id=r.naptan_id,
            station_name=r.station_name,
            time_to_station=timedelta(seconds=r.time_to_station),
            expected_arrival=parse_rfc3339(r.expected_arrival),
        )
        for r in records
    ]
    stops.sort(key=lambda s: s.time_to_station)

    # Looping services pass some stations twice; keep the soonest visit
    seen = set()
    deduped: List[VehicleStop] = []
    for stop in stops:
        if stop.station_id in seen:
            continue
        seen.add(stop.station_id)
        deduped.append(stop)
    return deduped
