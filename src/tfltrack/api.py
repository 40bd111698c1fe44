"""Main entry point: the query API handed to the presentation layer."""

import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from .actors import LineCache, RouteCache, StationCache
from .config import Settings
from .exceptions import TflError
from .models import (
    UNTRACKABLE_VEHICLE_ID,
    Arrivals,
    DepartureTime,
    Line,
    Route,
    ScheduledDepartureTimes,
    ScheduledTimeTable,
    Station,
    VehicleSchedule,
)
from .tfl_client import TflClient
from .timetable import TimetableManager
from .timeutil import display_timezone

logger = logging.getLogger(__name__)


class TflAPI:
    """
    Lines, stations, routes, live arrivals and timetables from TfL.

    Construct one instance at startup and share it. It owns one worker per
    cached resource kind (lines, stations, routes, timetables); call close()
    when done, or use it as a context manager.

    Example:
        with TflAPI() as api:
            for line in api.lines("tube", include_status=True):
                print(line.name, line.status)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[TflClient] = None,
        today: Optional[Callable[[], date]] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the API and start its workers.

        Args:
            settings: Runtime settings; read from the environment if omitted.
            client: Fetcher to use instead of one built from settings.
            today: Clock used for timetable staleness, defaults to the display zone date.
            now: Clock used when overlaying live vehicle data.
        """
        self.settings = settings or Settings()
        self.client = client or TflClient(
            base_url=self.settings.TFL_BASE_URL,
            timeout=self.settings.TFL_HTTP_TIMEOUT_SEC,
            app_id=self.settings.TFL_APP_ID,
            app_key=self.settings.TFL_APP_KEY,
        )
        timeout = self.settings.TFL_ACTOR_TIMEOUT_SEC
        queue_size = self.settings.TFL_QUEUE_SIZE
        self.line_cache = LineCache(self.client, timeout=timeout, queue_size=queue_size)
        self.station_cache = StationCache(self.client, timeout=timeout, queue_size=queue_size)
        self.route_cache = RouteCache(self.client, timeout=timeout, queue_size=queue_size)
        self.timetables = TimetableManager(
            self.client,
            timeout=timeout,
            queue_size=queue_size,
            today=today,
            now=now,
            tz=display_timezone(self.settings.TFL_DISPLAY_TIMEZONE),
        )

    def lines(self, mode: str, include_status: bool = False) -> List[Line]:
        """All lines of a mode (e.g. "tube"), sorted by id."""
        return self.line_cache.lines(mode, include_status)

    def line_details(self, mode: str, line_id: str) -> Line:
        return self.line_cache.line_details(mode, line_id)

    def stations(self, line_id: str) -> List[Station]:
        """Stations served by a line, sorted by name."""
        return self.station_cache.stations(line_id)

    def routes(self, line_id: str) -> List[Route]:
        return self.route_cache.routes(line_id)

    def arrivals_for(self, line_id: str, station_id: str) -> Arrivals:
        """
        Live arrivals for a station on a line, grouped by platform.

        Raises:
            TflError: If the upstream request or decoding fails.
        """
        return self.client.fetch_arrivals(line_id, station_id)

    def vehicle_schedule_for(self, line_id: str, vehicle_id: str) -> VehicleSchedule:
        """
        Upcoming stops of a vehicle on a line.

        Returns:
            VehicleSchedule; `found` is False if the vehicle is not running
            on the line.

        Raises:
            TflError: If the upstream request or decoding fails.
        """
        return self.client.fetch_vehicle_schedule(line_id, vehicle_id)

    def scheduled_departure_times(
        self, line_id: str, origin: str, destination: str, weekday: int
    ) -> ScheduledDepartureTimes:
        """
        Departures from origin towards destination on a weekday.

        Args:
            weekday: As returned by date.weekday(), Monday is 0.

        Raises:
            TflError: If the timetable cannot be fetched or parsed.
        """
        return self.timetables.scheduled_departure_times(line_id, origin, destination, weekday)

    def scheduled_timetable(
        self,
        line_id: str,
        origin: str,
        destination: str,
        weekday: int,
        departure_time: DepartureTime,
        vehicle_id: str = "",
    ) -> ScheduledTimeTable:
        """
        Per-stop ETAs for one departure.

        When a trackable vehicle id is given, its live predictions are
        overlaid on the schedule. If the vehicle cannot be found the
        schedule is returned without live data.

        Raises:
            TflError: If the timetable cannot be fetched, or has no journey
                leaving at departure_time.
        """
        vehicle = self._tracked_vehicle(line_id, vehicle_id)
        return self.timetables.scheduled_timetable(
            line_id, origin, destination, weekday, departure_time, vehicle
        )

    def _tracked_vehicle(self, line_id: str, vehicle_id: str) -> Optional[VehicleSchedule]:
        if not vehicle_id or vehicle_id == UNTRACKABLE_VEHICLE_ID:
            return None
        try:
            vehicle = self.client.fetch_vehicle_schedule(line_id, vehicle_id)
        except TflError as e:
            logger.warning(f"unable to track vehicle {vehicle_id} on {line_id}: {e}")
            return None
        if not vehicle.found:
            logger.warning(f"vehicle {vehicle_id} not found on {line_id}")
            return None
        return vehicle

    def close(self) -> None:
        """Stop the workers and release the HTTP session."""
        for actor in (self.line_cache, self.station_cache, self.route_cache, self.timetables):
            actor.stop(timeout=self.settings.TFL_ACTOR_TIMEOUT_SEC)
        self.client.close()
        logger.info("Stopped TfL API workers")

    def __enter__(self) -> "TflAPI":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
