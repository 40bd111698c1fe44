"""Build weekly timetables from TfL timetable responses."""

import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple

from .exceptions import TimetableError
from .models import (
    DepartureTime,
    Journey,
    JourneyStop,
    Station,
    TimetableByDayOfWeek,
    TimetableDetails,
)
from .wire import Schedule, TimetableResponse

logger = logging.getLogger(__name__)


def calculate_eta(departure_time: DepartureTime, time_to_arrival: timedelta) -> str:
    """
    Clock time (HH:MM) at which a stop is reached.

    >>> calculate_eta(DepartureTime(hour="25", minute="50"), timedelta(minutes=15))
    '02:05'
    """
    hour, minute = departure_time.clock()
    eta = datetime(2000, 1, 1, hour, minute) + time_to_arrival
    return eta.strftime("%H:%M")


def bucket_for_schedule(name: str) -> str:
    """Map a schedule name such as "Monday to Thursday" onto a day bucket."""
    lowered = name.lower()
    if "friday" in lowered:
        return "fri"
    if "sunday" in lowered:
        return "sun"
    if "monday" in lowered:
        return "mon_to_thu"
    return "sat_others"


def build_timetable(
    response: TimetableResponse, line_id: str, origin: str, destination: str, today: date
) -> TimetableByDayOfWeek:
    """
    Turn a decoded timetable response into a TimetableByDayOfWeek.

    Args:
        response: Decoded timetable body.
        line_id, origin, destination: Used for error and log messages.
        today: Creation date recorded on the result.

    Raises:
        TimetableError: If the response has no routes or schedules, or
            refers to stops or intervals it does not define.
    """
    where = f"{line_id} from {origin} to {destination}"
    stops = {s.id: Station(id=s.id, name=s.name) for s in response.stops}

    if not response.routes:
        raise TimetableError(f"no routes found for {where} in timetable")
    if len(response.routes) != 1:
        logger.warning(f"timetable for {where}, found multiple routes")
    route = response.routes[0]
    if not route.schedules:
        raise TimetableError(f"no schedules found for {where} in timetable")

    journeys: Dict[str, Journey] = {}
    for station_interval in route.station_intervals:
        journey = Journey(interval_id=station_interval.id)
        for interval in station_interval.intervals:
            station = stops.get(interval.stop_id)
            if station is None:
                raise TimetableError(
                    f"station {interval.stop_id} not found in cache while fetching timetable for {where}"
                )
            journey.stops.append(
                JourneyStop(station=station, time_to_arrival=timedelta(minutes=int(interval.time_to_arrival)))
            )
        journeys[station_interval.id] = journey

    buckets: Dict[str, TimetableDetails] = {}
    last_processed: Optional[TimetableDetails] = None
    for schedule in route.schedules:
        last_processed = _details_for_schedule(schedule, journeys, where)
        buckets[bucket_for_schedule(schedule.name)] = last_processed

    mon_to_thu = buckets.get("mon_to_thu")
    if mon_to_thu is None:
        # TODO: pick the fallback by schedule name once a real timetable with
        # several unmatched schedules shows which one TfL intends
        logger.warning(f"no schedules found for Mon-Thu for {where} in timetable")
        mon_to_thu = last_processed

    def bucket_or_default(key: str, label: str) -> TimetableDetails:
        details = buckets.get(key)
        if details is None:
            logger.warning(f"no schedules found for {label} for {where} in timetable")
            return mon_to_thu
        return details

    return TimetableByDayOfWeek(
        stops=stops,
        mon_to_thu=mon_to_thu,
        fri=bucket_or_default("fri", "Fri"),
        sat_others=bucket_or_default("sat_others", "Sat/Others"),
        sun=bucket_or_default("sun", "Sun"),
        created_on=today,
    )


def _details_for_schedule(
    schedule: Schedule, journeys: Dict[str, Journey], where: str
) -> TimetableDetails:
    departures: List[DepartureTime] = []
    by_departure: Dict[Tuple[str, str], Journey] = {}
    for known in schedule.known_journeys:
        journey = journeys.get(known.interval_id)
        if journey is None:
            raise TimetableError(
                f"didn't find interval ID: {known.interval_id} when processing timetable for {where}"
            )
        departure = DepartureTime(hour=known.hour, minute=known.minute)
        if journey.stops:
            last_stop = journey.stops[-1]
            departure.destination = last_stop.station
            departure.destination_eta = calculate_eta(departure, last_stop.time_to_arrival)
        departures.append(departure)
        by_departure[departure.key] = journey
    return TimetableDetails(
        schedule_name=schedule.name,
        scheduled_departures=departures,
        journeys=by_departure,
    )
