"""Shared test data and fakes."""

from datetime import date, datetime, timedelta, timezone
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tfltrack.exceptions import FetchError
from tfltrack.models import Line, Station, VehicleSchedule, VehicleStop
from tfltrack.schedule import build_timetable
from tfltrack.wire import TimetableResponse

BRIXTON = "940GZZLUBXN"
STOCKWELL = "940GZZLUSKW"
VAUXHALL = "940GZZLUVXL"
WALTHAMSTOW = "940GZZLUWWL"


def schedule_json(name, journeys):
    return {
        "name": name,
        "knownJourneys": [{"hour": h, "minute": m, "intervalId": i} for h, m, i in journeys],
    }


def timetable_json(schedules=None):
    """
    Victoria line timetable from Brixton.

    Interval 0 runs Brixton (+0) -> Stockwell (+5) -> Vauxhall (+12).
    Interval 1 runs Brixton (+0) -> Walthamstow Central (+32).
    """
    if schedules is None:
        schedules = [
            schedule_json("Monday to Thursday", [("08", "00", 0), ("08", "04", 1)]),
            schedule_json("Friday", [("08", "01", 0)]),
            schedule_json("Saturday (also see Sundays)", [("09", "00", 0)]),
            schedule_json("Sunday", [("10", "00", 0), ("25", "10", 1)]),
        ]
    return {
        "stops": [
            {"id": BRIXTON, "name": "Brixton Underground Station"},
            {"id": STOCKWELL, "name": "Stockwell Underground Station"},
            {"id": VAUXHALL, "name": "Vauxhall Underground Station"},
            {"id": WALTHAMSTOW, "name": "Walthamstow Central Underground Station"},
        ],
        "timetable": {
            "routes": [
                {
                    "stationIntervals": [
                        {
                            "id": "0",
                            "intervals": [
                                {"stopId": BRIXTON, "timeToArrival": 0},
                                {"stopId": STOCKWELL, "timeToArrival": 5},
                                {"stopId": VAUXHALL, "timeToArrival": 12},
                            ],
                        },
                        {
                            "id": "1",
                            "intervals": [
                                {"stopId": BRIXTON, "timeToArrival": 0},
                                {"stopId": WALTHAMSTOW, "timeToArrival": 32.0},
                            ],
                        },
                    ],
                    "schedules": schedules,
                }
            ]
        },
    }


def vehicle_schedule(*stops):
    """Build a VehicleSchedule from (station_id, minutes_away, expected_arrival) tuples."""
    return VehicleSchedule(
        vehicle_id="201",
        line="Victoria",
        destination="Walthamstow Central",
        current_location="Between Brixton and Stockwell",
        stops=[
            VehicleStop(
                station_id=station_id,
                station_name=station_id,
                time_to_station=timedelta(minutes=minutes),
                expected_arrival=expected,
            )
            for station_id, minutes, expected in stops
        ],
    )


def utc(hour, minute, second=0):
    # January, so London is on GMT
    return datetime(2024, 1, 15, hour, minute, second, tzinfo=timezone.utc)


class FakeClient:
    """Stands in for TflClient and counts remote calls."""

    def __init__(self):
        self.calls = {}
        self.fail = set()
        self.lines = [Line(id="bakerloo", name="Bakerloo"), Line(id="victoria", name="Victoria")]
        self.statuses = {"victoria": ["Good Service"]}
        self.timetable = timetable_json()
        self.vehicle = vehicle_schedule()

    def _called(self, kind):
        self.calls[kind] = self.calls.get(kind, 0) + 1
        if kind in self.fail:
            raise FetchError(f"problem fetching {kind} from API: HTTP 500", status=500)

    def fetch_lines(self, mode):
        self._called("lines")
        return [Line(id=line.id, name=line.name) for line in self.lines]

    def fetch_status(self, mode):
        self._called("status")
        return dict(self.statuses)

    def fetch_stations(self, line_id):
        self._called("stations")
        return [Station(id=BRIXTON, name="Brixton Underground Station")]

    def fetch_routes(self, line_id):
        self._called("routes")
        return []

    def fetch_timetable(self, line_id, origin, destination, today=None):
        self._called("timetable")
        response = TimetableResponse.from_json(self.timetable)
        return build_timetable(response, line_id, origin, destination, today or date.today())

    def fetch_vehicle_schedule(self, line_id, vehicle_id):
        self._called("vehicle")
        return self.vehicle

    def close(self):
        pass
