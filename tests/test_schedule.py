"""Tests for timetable parsing and day bucketing."""

import unittest
from datetime import date, timedelta
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from fixtures import BRIXTON, VAUXHALL, WALTHAMSTOW, schedule_json, timetable_json
from tfltrack.exceptions import TimetableError
from tfltrack.models import DepartureTime
from tfltrack.schedule import bucket_for_schedule, build_timetable, calculate_eta
from tfltrack.wire import TimetableResponse

TODAY = date(2024, 1, 15)


def build(payload):
    return build_timetable(TimetableResponse.from_json(payload), "victoria", BRIXTON, WALTHAMSTOW, TODAY)


class TestDepartureTime(unittest.TestCase):
    """Test departure time formatting."""

    def test_hour_wraps_after_midnight(self):
        self.assertEqual(DepartureTime(hour="25", minute="10").etd(), "01:10")
        self.assertEqual(DepartureTime(hour="24", minute="00").etd(), "00:00")
        self.assertEqual(DepartureTime(hour="8", minute="5").etd(), "08:05")

    def test_unparseable_time(self):
        with self.assertLogs("tfltrack.models", level="WARNING"):
            self.assertEqual(DepartureTime(hour="", minute="10").etd(), "00:00")

    def test_calculate_eta_crosses_midnight(self):
        self.assertEqual(calculate_eta(DepartureTime(hour="23", minute="50"), timedelta(minutes=20)), "00:10")
        self.assertEqual(calculate_eta(DepartureTime(hour="25", minute="50"), timedelta(minutes=15)), "02:05")


class TestBucketing(unittest.TestCase):
    """Test mapping schedule names to day buckets."""

    def test_bucket_names(self):
        self.assertEqual(bucket_for_schedule("Monday to Thursday"), "mon_to_thu")
        self.assertEqual(bucket_for_schedule("FRIDAY"), "fri")
        self.assertEqual(bucket_for_schedule("Saturday (also see Sundays)"), "sun")
        self.assertEqual(bucket_for_schedule("Saturday"), "sat_others")
        self.assertEqual(bucket_for_schedule("Bank Holiday"), "sat_others")

    def test_friday_checked_before_monday(self):
        self.assertEqual(bucket_for_schedule("Monday - Friday"), "fri")


class TestBuildTimetable(unittest.TestCase):
    """Test building a weekly timetable from a response."""

    def test_buckets_and_departures(self):
        timetable = build(timetable_json())

        self.assertEqual(timetable.created_on, TODAY)
        self.assertEqual(timetable.mon_to_thu.schedule_name, "Monday to Thursday")
        self.assertEqual(timetable.fri.schedule_name, "Friday")
        self.assertEqual(timetable.sun.schedule_name, "Sunday")
        # "Saturday (also see Sundays)" contains "sunday" and so lands on
        # Sunday before the real Sunday schedule overwrites it
        self.assertEqual(timetable.sat_others.schedule_name, "Monday to Thursday")

        first = timetable.mon_to_thu.scheduled_departures[0]
        self.assertEqual((first.hour, first.minute), ("08", "00"))
        self.assertEqual(first.destination.id, VAUXHALL)
        self.assertEqual(first.destination_eta, "08:12")
        second = timetable.mon_to_thu.scheduled_departures[1]
        self.assertEqual(second.destination.id, WALTHAMSTOW)
        self.assertEqual(second.destination_eta, "08:36")

        late = timetable.sun.scheduled_departures[1]
        self.assertEqual(late.etd(), "01:10")
        self.assertEqual(late.destination_eta, "01:42")

    def test_weekday_lookup(self):
        timetable = build(timetable_json())

        for weekday in (0, 1, 2, 3):
            self.assertIs(timetable.details_for(weekday), timetable.mon_to_thu)
        self.assertIs(timetable.details_for(4), timetable.fri)
        self.assertIs(timetable.details_for(5), timetable.sat_others)
        self.assertIs(timetable.details_for(6), timetable.sun)

    def test_journeys_keyed_by_departure(self):
        timetable = build(timetable_json())

        journey = timetable.mon_to_thu.journeys[("08", "00")]
        self.assertEqual([s.time_to_arrival for s in journey.stops],
                         [timedelta(0), timedelta(minutes=5), timedelta(minutes=12)])

    def test_missing_days_fall_back_to_monday(self):
        payload = timetable_json([schedule_json("Monday to Friday", [("08", "00", 0)]),
                                  schedule_json("Monday to Thursday", [("07", "00", 0)])])

        with self.assertLogs("tfltrack.schedule", level="WARNING") as logs:
            timetable = build(payload)

        self.assertIs(timetable.sun, timetable.mon_to_thu)
        self.assertIs(timetable.sat_others, timetable.mon_to_thu)
        self.assertEqual(timetable.fri.schedule_name, "Monday to Friday")
        self.assertEqual(len(logs.records), 2)

    def test_missing_monday_uses_last_processed_schedule(self):
        """
        Without a Monday schedule the last schedule in the response is used,
        so the result depends on the order TfL sends schedules in.
        """
        forwards = timetable_json([schedule_json("Saturday", [("09", "00", 0)]),
                                   schedule_json("Sunday", [("10", "00", 0)])])
        backwards = timetable_json([schedule_json("Sunday", [("10", "00", 0)]),
                                    schedule_json("Saturday", [("09", "00", 0)])])

        with self.assertLogs("tfltrack.schedule", level="WARNING"):
            self.assertEqual(build(forwards).mon_to_thu.schedule_name, "Sunday")
        with self.assertLogs("tfltrack.schedule", level="WARNING"):
            self.assertEqual(build(backwards).mon_to_thu.schedule_name, "Saturday")

    def test_duplicate_bucket_last_wins(self):
        payload = timetable_json([schedule_json("Monday to Thursday", [("07", "00", 0)]),
                                  schedule_json("Monday to Thursday (revised)", [("07", "30", 0)])])

        with self.assertLogs("tfltrack.schedule", level="WARNING"):
            timetable = build(payload)

        self.assertEqual(timetable.mon_to_thu.schedule_name, "Monday to Thursday (revised)")

    def test_no_schedules(self):
        with self.assertRaises(TimetableError) as ctx:
            build(timetable_json([]))
        self.assertIn("no schedules found for victoria", str(ctx.exception))

    def test_unknown_interval(self):
        payload = timetable_json([schedule_json("Monday to Thursday", [("07", "00", 7)])])

        with self.assertRaises(TimetableError) as ctx:
            build(payload)
        self.assertIn("interval ID: 7", str(ctx.exception))

    def test_unknown_stop(self):
        payload = timetable_json()
        payload["stops"] = payload["stops"][:2]

        with self.assertRaises(TimetableError) as ctx:
            build(payload)
        self.assertIn(VAUXHALL, str(ctx.exception))
        self.assertIn(f"from {BRIXTON} to {WALTHAMSTOW}", str(ctx.exception))

    def test_multiple_routes_uses_first(self):
        payload = timetable_json()
        routes = payload["timetable"]["routes"]
        routes.append({"stationIntervals": [], "schedules": []})

        with self.assertLogs("tfltrack.schedule", level="WARNING"):
            timetable = build(payload)
        self.assertEqual(len(timetable.mon_to_thu.scheduled_departures), 2)

    def test_staleness(self):
        timetable = build(timetable_json())
        self.assertFalse(timetable.is_stale(TODAY))
        self.assertTrue(timetable.is_stale(TODAY + timedelta(days=1)))


if __name__ == "__main__":
    unittest.main()
