"""Timetable manager: caches weekly timetables and answers departure queries."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Callable, Dict, Optional, Tuple, Union

from .actors import Actor
from .exceptions import TimetableError
from .journey import resolve_journey
from .models import (
    DepartureTime,
    ScheduledDepartureTimes,
    ScheduledTimeTable,
    TimetableByDayOfWeek,
    VehicleSchedule,
)
from .tfl_client import TflClient
from .timeutil import local_today

logger = logging.getLogger(__name__)

TimetableKey = Tuple[str, str, str]


@dataclass(frozen=True)
class DepartureTimesRequest:
    line_id: str
    origin: str
    destination: str
    weekday: int


@dataclass
class TimeTableRequest:
    line_id: str
    origin: str
    destination: str
    weekday: int
    departure_time: DepartureTime
    vehicle: Optional[VehicleSchedule] = None


class TimetableManager(Actor):
    """
    Owns the timetable cache, keyed by (line, origin, destination).

    A cached timetable is only good for the calendar day it was fetched on;
    the first lookup on a later day fetches it again.
    """

    name = "timetables"

    def __init__(
        self,
        client: TflClient,
        timeout: float = 5.0,
        queue_size: int = 16,
        today: Optional[Callable[[], date]] = None,
        now: Optional[Callable[[], datetime]] = None,
        tz: Optional[tzinfo] = None,
    ):
        self._client = client
        self._today = today or (lambda: local_today(tz))
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._tz = tz
        self._cache: Dict[TimetableKey, TimetableByDayOfWeek] = {}
        super().__init__(timeout=timeout, queue_size=queue_size)

    def scheduled_departure_times(
        self, line_id: str, origin: str, destination: str, weekday: int
    ) -> ScheduledDepartureTimes:
        return self.ask(DepartureTimesRequest(line_id, origin, destination, weekday))

    def scheduled_timetable(
        self,
        line_id: str,
        origin: str,
        destination: str,
        weekday: int,
        departure_time: DepartureTime,
        vehicle: Optional[VehicleSchedule] = None,
    ) -> ScheduledTimeTable:
        return self.ask(TimeTableRequest(line_id, origin, destination, weekday, departure_time, vehicle))

    def handle(self, request: Union[DepartureTimesRequest, TimeTableRequest]):
        return self._answer(request, self._timetable_for(request.line_id, request.origin, request.destination))

    def fallback(self, request: Union[DepartureTimesRequest, TimeTableRequest]):
        timetable = self._client.fetch_timetable(
            request.line_id, request.origin, request.destination, self._today()
        )
        return self._answer(request, timetable)

    def _timetable_for(self, line_id: str, origin: str, destination: str) -> TimetableByDayOfWeek:
        key = (line_id, origin, destination)
        today = self._today()
        cached = self._cache.get(key)
        if cached is not None and not cached.is_stale(today):
            return cached
        if cached is not None:
            logger.info(f"timetable for {line_id} from {origin} to {destination} is stale, refetching")
        timetable = self._client.fetch_timetable(line_id, origin, destination, today)
        self._cache[key] = timetable
        return timetable

    def _answer(self, request, timetable: TimetableByDayOfWeek):
        if isinstance(request, TimeTableRequest):
            return self._scheduled_timetable(request, timetable)
        return departure_times_for(timetable, request.origin, request.destination, request.weekday)

    def _scheduled_timetable(self, request: TimeTableRequest, timetable: TimetableByDayOfWeek) -> ScheduledTimeTable:
        details = timetable.details_for(request.weekday)
        departure_time = request.departure_time
        journey = details.journeys.get(departure_time.key)
        if journey is None:
            raise TimetableError(
                f"no journey found for departure time: {departure_time.etd()} "
                f"({request.line_id} from {request.origin} to {request.destination})"
            )
        vehicle = request.vehicle
        result = ScheduledTimeTable(
            from_station=timetable.station(request.origin),
            to_station=timetable.station(request.destination),
            departure_time=departure_time,
            stops=resolve_journey(journey, departure_time, vehicle, now=self._now(), tz=self._tz),
        )
        if vehicle is not None:
            result.vehicle_id = vehicle.vehicle_id
            result.vehicle_location = vehicle.cleansed_current_location
        return result


def departure_times_for(
    timetable: TimetableByDayOfWeek, origin: str, destination: str, weekday: int
) -> ScheduledDepartureTimes:
    details = timetable.details_for(weekday)
    return ScheduledDepartureTimes(
        from_station=timetable.station(origin),
        to_station=timetable.station(destination),
        departure_times=list(details.scheduled_departures),
    )
