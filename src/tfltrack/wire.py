"""Wire shapes of the TfL unified API responses we consume."""

from dataclasses import dataclass, field
from typing import Any, List

from .exceptions import DecodeError


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """
    Read a field from a decoded JSON object.

    TfL sends camelCase keys; matching is case-insensitive so either
    spelling works. JSON null is treated as missing.
    """
    if not isinstance(record, dict):
        raise DecodeError(f"expected a JSON object, got {type(record).__name__}")
    value = record.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in record.items():
            if key.lower() == lowered:
                value = candidate
                break
    return default if value is None else value


def get_list(record: Any, name: str) -> list:
    value = get_field(record, name, [])
    if not isinstance(value, list):
        raise DecodeError(f"expected {name} to be a list, got {type(value).__name__}")
    return value


def expect_list(payload: Any, what: str) -> list:
    if not isinstance(payload, list):
        raise DecodeError(f"expected a JSON array of {what}, got {type(payload).__name__}")
    return payload


def _as_int(record: Any, name: str) -> int:
    value = get_field(record, name, 0)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"invalid {name} {value!r}: {e}") from e


def _as_float(record: Any, name: str) -> float:
    value = get_field(record, name, 0.0)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"invalid {name} {value!r}: {e}") from e


@dataclass
class StationArrival:
    """One record of /Line/{line}/Arrivals/{station}."""
    naptan_id: str
    station_name: str
    platform_name: str
    towards: str
    current_location: str
    vehicle_id: str
    time_to_station: int  # seconds
    expected_arrival: str  # RFC3339

    @classmethod
    def from_json(cls, record: Any) -> "StationArrival":
        return cls(**_arrival_fields(record))


@dataclass
class VehicleArrival(StationArrival):
    """One record of /Vehicle/{vehicle}/Arrivals."""
    line_id: str = ""
    line_name: str = ""
    destination_name: str = ""

    @classmethod
    def from_json(cls, record: Any) -> "VehicleArrival":
        return cls(
            line_id=str(get_field(record, "lineId", "")),
            line_name=str(get_field(record, "lineName", "")),
            destination_name=str(get_field(record, "destinationName", "")),
            **_arrival_fields(record),
        )


def _arrival_fields(record: Any) -> dict:
    return {
        "naptan_id": str(get_field(record, "naptanId", "")),
        "station_name": str(get_field(record, "stationName", "")),
        "platform_name": str(get_field(record, "platformName", "")),
        "towards": str(get_field(record, "towards", "")),
        "current_location": str(get_field(record, "currentLocation", "")),
        "vehicle_id": str(get_field(record, "vehicleId", "")),
        "time_to_station": _as_int(record, "timeToStation"),
        "expected_arrival": str(get_field(record, "expectedArrival", "")),
    }


@dataclass
class TimetableStop:
    id: str
    name: str


@dataclass
class Interval:
    stop_id: str
    time_to_arrival: float  # minutes from the origin


@dataclass
class StationInterval:
    id: str
    intervals: List[Interval] = field(default_factory=list)


@dataclass
class KnownJourney:
    hour: str
    minute: str
    interval_id: str


@dataclass
class Schedule:
    name: str
    known_journeys: List[KnownJourney] = field(default_factory=list)


@dataclass
class TimetableRoute:
    station_intervals: List[StationInterval] = field(default_factory=list)
    schedules: List[Schedule] = field(default_factory=list)


@dataclass
class TimetableResponse:
    """Body of /Line/{line}/Timetable/{from}/to/{to}."""
    stops: List[TimetableStop] = field(default_factory=list)
    routes: List[TimetableRoute] = field(default_factory=list)

    @classmethod
    def from_json(cls, payload: Any) -> "TimetableResponse":
        stops = [
            TimetableStop(id=str(get_field(s, "id", "")), name=str(get_field(s, "name", "")))
            for s in get_list(payload, "stops")
        ]
        timetable = get_field(payload, "timetable", {})
        routes = []
        for r in get_list(timetable, "routes"):
            station_intervals = [
                StationInterval(
                    id=str(get_field(si, "id", "")),
                    intervals=[
                        Interval(
                            stop_id=str(get_field(i, "stopId", "")),
                            time_to_arrival=_as_float(i, "timeToArrival"),
                        )
                        for i in get_list(si, "intervals")
                    ],
                )
                for si in get_list(r, "stationIntervals")
            ]
            schedules = [
                Schedule(
                    name=str(get_field(s, "name", "")),
                    known_journeys=[
                        KnownJourney(
                            hour=str(get_field(kj, "hour", "")),
                            minute=str(get_field(kj, "minute", "")),
                            interval_id=str(get_field(kj, "intervalId", "")),
                        )
                        for kj in get_list(s, "knownJourneys")
                    ],
                )
                for s in get_list(r, "schedules")
            ]
            routes.append(TimetableRoute(station_intervals=station_intervals, schedules=schedules))
        return cls(stops=stops, routes=routes)
