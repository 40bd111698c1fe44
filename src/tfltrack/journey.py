"""Resolve a scheduled journey into per-stop ETAs, optionally overlaying live data."""

import logging
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Dict, List, Optional

from .models import DepartureTime, Journey, ScheduledStop, VehicleSchedule, VehicleStop
from .timeutil import to_display_time

logger = logging.getLogger(__name__)

JOURNEY_NA = "journeyNA"
JOURNEY_OK = "journeyOK"
JOURNEY_DELAYED = "journeyDelayed"

# Unconfirmed stops further in the past than this are dropped
PAST_CUTOFF = timedelta(minutes=2)
# Live arrivals later than schedule by more than this count as delayed
DELAY_TOLERANCE = timedelta(minutes=2)


def resolve_journey(
    journey: Journey,
    departure_time: DepartureTime,
    vehicle: Optional[VehicleSchedule] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> List[ScheduledStop]:
    """
    Compute the stops of one scheduled departure.

    Without a vehicle every stop gets its scheduled ETA. With a vehicle,
    stops the vehicle is predicted to call at get the live ETA and a delay
    status; stops without a prediction that are already behind the cutoff
    are left out.

    Args:
        journey: The scheduled journey.
        departure_time: Departure from the origin; hours past 23 wrap.
        vehicle: Live snapshot of the vehicle running this journey.
        now: Current time, defaults to the wall clock.
        tz: Display timezone, defaults to Europe/London.
    """
    now_local = to_display_time(now or datetime.now(timezone.utc), tz)
    departed = _departure_nearest(departure_time, now_local)

    if vehicle is None:
        return [
            ScheduledStop(
                station=stop.station,
                time_to_arrival=stop.time_to_arrival,
                eta=(departed + stop.time_to_arrival).strftime("%H:%M"),
            )
            for stop in journey.stops
        ]

    logger.debug(f"overlaying vehicle {vehicle.vehicle_id} on departure {departure_time.etd()}")
    live = _first_visit_by_station(vehicle.stops)
    cutoff = now_local - PAST_CUTOFF
    result: List[ScheduledStop] = []
    for stop in journey.stops:
        scheduled = departed + stop.time_to_arrival
        eta = scheduled.strftime("%H:%M")
        match = live.get(stop.station.id)
        if match is None:
            if scheduled < cutoff:
                continue
            result.append(ScheduledStop(station=stop.station, time_to_arrival=stop.time_to_arrival, eta=eta))
            continue
        expected = to_display_time(match.expected_arrival, tz)
        status = JOURNEY_DELAYED if expected > scheduled + DELAY_TOLERANCE else JOURNEY_OK
        result.append(
            ScheduledStop(
                station=stop.station,
                time_to_arrival=stop.time_to_arrival,
                eta=eta,
                journey_eta=expected.strftime("%H:%M"),
                journey_status=status,
            )
        )
    return result


def _departure_nearest(departure_time: DepartureTime, now_local: datetime) -> datetime:
    """
    Place a clock-only departure on the service day closest to now.

    A 23:55 train seen at 00:05 left yesterday, and a 24:02 train seen at
    23:59 leaves tomorrow.
    """
    hour, minute = departure_time.clock()
    candidates = [
        datetime.combine(now_local.date() + timedelta(days=offset), time(hour, minute), tzinfo=now_local.tzinfo)
        for offset in (0, -1, 1)
    ]
    return min(candidates, key=lambda d: abs(d - now_local))


def _first_visit_by_station(stops: List[VehicleStop]) -> Dict[str, VehicleStop]:
    visits: Dict[str, VehicleStop] = {}
    for stop in sorted(stops, key=lambda s: s.time_to_station):
        if stop.station_id not in visits:
            visits[stop.station_id] = stop
    return visits
