"""Errors raised by the TfL data layer."""

from typing import Optional


class TflError(Exception):
    """Base class for all tfltrack failures."""


class FetchError(TflError):
    """The upstream request failed or returned a non-success status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class DecodeError(TflError):
    """The upstream response body was not the JSON shape we expect."""


class TimetableError(TflError):
    """A timetable could not be built or queried."""
