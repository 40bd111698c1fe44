"""TfL unified API fetcher and decoder."""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from .exceptions import DecodeError, FetchError
from .models import Arrivals, Line, Route, Station, TimetableByDayOfWeek, VehicleSchedule
from .schedule import build_timetable
from .timeutil import local_today
from .trackers import arrivals_from_records, vehicle_schedule_from_records
from .wire import (
    StationArrival,
    TimetableResponse,
    VehicleArrival,
    expect_list,
    get_field,
    get_list,
)

logger = logging.getLogger(__name__)

TFL_BASE_URL = "https://api.tfl.gov.uk"

# Endpoint templates, relative to the base URL
LINE_ROUTES_API = "/Line/Mode/{mode}/Route?serviceTypes=Regular"
LINE_STATIONS_API = "/Line/{line}/StopPoints"
LINE_STATUS_API = "/Line/Mode/{mode}/Status"
LINE_ARRIVALS_API = "/Line/{line}/Arrivals/{station}"
LINE_STATION_SEQUENCE_API = "/Line/{line}/Route/Sequence/all"
VEHICLE_ARRIVALS_API = "/Vehicle/{vehicle}/Arrivals"
TIMETABLES_API = "/Line/{line}/Timetable/{origin}/to/{destination}"


class TflClient:
    """
    Fetches and decodes TfL resources.

    Each method issues exactly one GET (routes issue two, stations first) and
    never caches or retries.
    """

    def __init__(
        self,
        base_url: str = TFL_BASE_URL,
        timeout: float = 5.0,
        app_id: Optional[str] = None,
        app_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self._params: Dict[str, str] = {}
        if app_id:
            self._params["app_id"] = app_id
        if app_key:
            self._params["app_key"] = app_key

    def fetch_lines(self, mode: str) -> List[Line]:
        payload = self._get_json(LINE_ROUTES_API.format(mode=mode), "lines data")
        lines = [
            Line(id=str(get_field(r, "id", "")), name=str(get_field(r, "name", "")))
            for r in expect_list(payload, "lines")
        ]
        lines.sort(key=lambda line: line.id)
        return lines

    def fetch_stations(self, line_id: str) -> List[Station]:
        payload = self._get_json(
            LINE_STATIONS_API.format(line=line_id), f"station data for {line_id}"
        )
        try:
            stations = [
                Station(
                    id=str(get_field(s, "id", "")),
                    name=str(get_field(s, "commonName", "")),
                    latitude=float(get_field(s, "lat", 0.0)),
                    longitude=float(get_field(s, "lon", 0.0)),
                )
                for s in expect_list(payload, "stations")
            ]
        except (TypeError, ValueError) as e:
            raise DecodeError(f"problem parsing station data for {line_id} from TfL: {e}") from e
        stations.sort(key=lambda s: s.name)
        return stations

    def fetch_routes(self, line_id: str) -> List[Route]:
        """
        Fetch ordered station sequences for a line.

        Stops referenced by a route but missing from the line's station list
        are logged and skipped.
        """
        try:
            all_stations = self.fetch_stations(line_id)
        except FetchError as e:
            raise FetchError(f"error fetching stations while fetching routes: {e}", status=e.status) from e
        except DecodeError as e:
            raise DecodeError(f"error fetching stations while fetching routes: {e}") from e
        stations_by_id = {s.id: s for s in all_stations}

        payload = self._get_json(
            LINE_STATION_SEQUENCE_API.format(line=line_id), f"routes data for {line_id}"
        )
        routes: List[Route] = []
        for i, line_route in enumerate(get_list(payload, "orderedLineRoutes")):
            name = str(get_field(line_route, "name", ""))
            stations = []
            for station_id in get_list(line_route, "naptanIds"):
                station = stations_by_id.get(station_id)
                if station is None:
                    logger.warning(
                        f"station with ID {station_id} found in route {name} but not in collection"
                    )
                    continue
                stations.append(station)
            routes.append(Route(id=f"route{line_id}{i}", name=name, stations=stations))
        return routes

    def fetch_status(self, mode: str) -> Dict[str, List[str]]:
        """
        Fetch current status descriptions keyed by line id.

        A line status contributes its reason when present, otherwise its
        severity description. Duplicates are dropped keeping the first.
        """
        payload = self._get_json(LINE_STATUS_API.format(mode=mode), "status data")
        result: Dict[str, List[str]] = {}
        for line_status in expect_list(payload, "statuses"):
            descriptions: List[str] = []
            for status in get_list(line_status, "lineStatuses"):
                text = str(get_field(status, "reason", "")) or str(
                    get_field(status, "statusSeverityDescription", "")
                )
                if text not in descriptions:
                    descriptions.append(text)
            result[str(get_field(line_status, "id", ""))] = descriptions
        return result

    def fetch_timetable(
        self, line_id: str, origin: str, destination: str, today: Optional[date] = None
    ) -> TimetableByDayOfWeek:
        payload = self._get_json(
            TIMETABLES_API.format(line=line_id, origin=origin, destination=destination),
            f"timetable data for {line_id} from {origin} to {destination}",
        )
        response = TimetableResponse.from_json(payload)
        return build_timetable(response, line_id, origin, destination, today or local_today())

    def fetch_arrivals(self, line_id: str, station_id: str) -> Arrivals:
        """
        Fetch live arrivals for a station on a line.

        TfL answers 400 when the line does not currently serve the station;
        that is returned as an empty Arrivals rather than an error.
        """
        what = f"arrivals data for {line_id} at {station_id}"
        response = self._get(LINE_ARRIVALS_API.format(line=line_id, station=station_id), what)
        if response.status_code == 400:
            logger.debug(f"no arrivals for {line_id} at {station_id}")
            return Arrivals()
        payload = self._decode(response, what)
        records = [StationArrival.from_json(r) for r in expect_list(payload, "arrivals")]
        return arrivals_from_records(records)

    def fetch_vehicle_schedule(self, line_id: str, vehicle_id: str) -> VehicleSchedule:
        payload = self._get_json(
            VEHICLE_ARRIVALS_API.format(vehicle=vehicle_id),
            f"arrivals data for vehicle {vehicle_id}",
        )
        records = [VehicleArrival.from_json(r) for r in expect_list(payload, "vehicle arrivals")]
        return vehicle_schedule_from_records(line_id, vehicle_id, records)

    def close(self) -> None:
        self.session.close()

    def _get_json(self, path: str, what: str) -> Any:
        return self._decode(self._get(path, what), what)

    def _get(self, path: str, what: str) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url}")
        try:
            return self.session.get(url, params=self._params, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"problem fetching {what} from API: {e}") from e

    @staticmethod
    def _decode(response: requests.Response, what: str) -> Any:
        if not response.ok:
            raise FetchError(
                f"problem fetching {what} from API: HTTP {response.status_code}",
                status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"problem parsing {what} from TfL: {e}") from e
