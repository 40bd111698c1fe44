"""Data models for the TfL data layer."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from typing import Dict, List, Optional, Tuple

from . import timeutil

logger = logging.getLogger(__name__)

UNTRACKABLE_VEHICLE_ID = "000"


@dataclass
class Line:
    """Represents a TfL line (e.g. "victoria")."""
    id: str
    name: str
    status: List[str] = field(default_factory=list)  # Status descriptions, only when requested


@dataclass
class Station:
    """Represents a station or stop point."""
    id: str
    name: str
    latitude: float = 0.0
    longitude: float = 0.0

    @property
    def short_name(self) -> str:
        return self.name.replace(" Underground Station", "")


@dataclass
class Route:
    """One directional ordered sequence of stations for a line."""
    id: str
    name: str
    stations: List[Station] = field(default_factory=list)

    @property
    def start(self) -> str:
        return self.stations[0].id if self.stations else ""

    @property
    def dest(self) -> str:
        return self.stations[-1].id if self.stations else ""


@dataclass
class Arrival:
    """Represents a live arrival at a platform."""
    vehicle_id: str
    towards: str
    current_location: str
    time_to_station: timedelta
    expected_arrival: datetime

    @property
    def can_be_tracked(self) -> bool:
        return self.vehicle_id != UNTRACKABLE_VEHICLE_ID

    def eta(self, tz: Optional[tzinfo] = None) -> str:
        clock = timeutil.format_clock(self.expected_arrival, tz)
        return f"{clock} ({timeutil.format_duration(self.time_to_station)})"


@dataclass
class Platform:
    """Arrivals at one platform, soonest first."""
    name: str
    arrivals: List[Arrival] = field(default_factory=list)


@dataclass
class Arrivals:
    """Live arrivals for a station grouped by platform."""
    station_id: str = ""
    station_name: str = ""
    platforms: List[Platform] = field(default_factory=list)


@dataclass
class VehicleStop:
    """A predicted stop for a tracked vehicle."""
    station_id: str
    station_name: str
    time_to_station: timedelta
    expected_arrival: datetime

    def eta(self, tz: Optional[tzinfo] = None) -> str:
        clock = timeutil.format_clock(self.expected_arrival, tz)
        return f"{clock} ({timeutil.format_duration(self.time_to_station)})"

    def eta_time(self, tz: Optional[tzinfo] = None) -> str:
        return timeutil.format_clock(self.expected_arrival, tz)


@dataclass
class VehicleSchedule:
    """Upcoming stops of a single vehicle on a line."""
    vehicle_id: str = ""
    line: str = ""
    destination: str = ""
    current_location: str = ""
    stops: List[VehicleStop] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.vehicle_id)

    @property
    def cleansed_current_location(self) -> str:
        if not self.current_location:
            return "Current Location Not Specified"
        return self.current_location


@dataclass
class JourneyStop:
    """A stop on a scheduled journey with minutes from the trip origin."""
    station: Station
    time_to_arrival: timedelta


@dataclass
class Journey:
    """One scheduled trip's ordered stops."""
    interval_id: str
    stops: List[JourneyStop] = field(default_factory=list)


@dataclass
class DepartureTime:
    """
    A scheduled departure as sent by TfL.

    Hour and minute are kept as the source strings. Services that start
    after midnight on the previous service day have an hour of 24 or more.
    """
    hour: str
    minute: str
    destination: Optional[Station] = None
    destination_eta: str = ""

    @property
    def key(self) -> Tuple[str, str]:
        return (self.hour, self.minute)

    def clock(self) -> Tuple[int, int]:
        """
        Effective (hour, minute) on a 24h clock.

        Returns:
            Tuple of ints; (0, 0) when the source values are not numeric.
        """
        try:
            hour = int(self.hour)
            minute = int(self.minute)
        except ValueError as e:
            logger.warning(f"error parsing departure time {self.hour}:{self.minute}: {e}")
            return 0, 0
        return hour % 24, minute

    def etd(self) -> str:
        hour, minute = self.clock()
        return f"{hour:02d}:{minute:02d}"


@dataclass
class ScheduledDepartureTimes:
    """Departures from an origin towards a destination for one day bucket."""
    from_station: Station
    to_station: Station
    departure_times: List[DepartureTime] = field(default_factory=list)


@dataclass
class ScheduledStop:
    """A stop on a resolved timetable."""
    station: Station
    time_to_arrival: timedelta
    eta: str
    journey_eta: str = "NA"
    journey_status: str = "journeyNA"


@dataclass
class ScheduledTimeTable:
    """A single departure resolved into per-stop ETAs."""
    from_station: Station
    to_station: Station
    departure_time: DepartureTime
    stops: List[ScheduledStop] = field(default_factory=list)
    vehicle_id: Optional[str] = None
    vehicle_location: Optional[str] = None


@dataclass
class TimetableDetails:
    """One day bucket of a weekly timetable."""
    schedule_name: str
    scheduled_departures: List[DepartureTime] = field(default_factory=list)
    journeys: Dict[Tuple[str, str], Journey] = field(default_factory=dict)


@dataclass
class TimetableByDayOfWeek:
    """A parsed weekly timetable for (line, origin, destination)."""
    stops: Dict[str, Station]
    mon_to_thu: TimetableDetails
    fri: TimetableDetails
    sat_others: TimetableDetails
    sun: TimetableDetails
    created_on: date

    def details_for(self, weekday: int) -> TimetableDetails:
        """
        Pick the day bucket for a weekday.

        Args:
            weekday: Day number as returned by date.weekday() (Monday is 0).
        """
        if weekday in (0, 1, 2, 3):
            return self.mon_to_thu
        if weekday == 4:
            return self.fri
        if weekday == 5:
            return self.sat_others
        return self.sun

    def is_stale(self, today: date) -> bool:
        return today != self.created_on

    def station(self, station_id: str) -> Station:
        return self.stops.get(station_id, Station(id="", name=""))
