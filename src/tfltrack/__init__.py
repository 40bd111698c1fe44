"""tfltrack - TfL lines, stations, live arrivals and timetables."""

__version__ = "0.1.0"

from .models import (
    Line,
    Station,
    Route,
    Arrival,
    Arrivals,
    Platform,
    VehicleSchedule,
    VehicleStop,
    DepartureTime,
    ScheduledDepartureTimes,
    ScheduledStop,
    ScheduledTimeTable,
)
from .exceptions import TflError, FetchError, DecodeError, TimetableError
from .config import Settings
from .tfl_client import TflClient
from .api import TflAPI

__all__ = [
    "TflAPI",
    "TflClient",
    "Settings",
    "Line",
    "Station",
    "Route",
    "Arrival",
    "Arrivals",
    "Platform",
    "VehicleSchedule",
    "VehicleStop",
    "DepartureTime",
    "ScheduledDepartureTimes",
    "ScheduledStop",
    "ScheduledTimeTable",
    "TflError",
    "FetchError",
    "DecodeError",
    "TimetableError",
]
