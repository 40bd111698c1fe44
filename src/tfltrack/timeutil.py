"""Time helpers shared by the trackers and the timetable engine."""

import logging
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

DISPLAY_TIMEZONE = "Europe/London"

# Stand-in for timestamps that could not be parsed
ZERO_TIME = datetime(1970, 1, 1, tzinfo=timezone.utc)

_display_tz = ZoneInfo(DISPLAY_TIMEZONE)


def display_timezone(name: Optional[str] = None) -> tzinfo:
    """Return the zone used for rendering clock times."""
    if name is None or name == DISPLAY_TIMEZONE:
        return _display_tz
    return ZoneInfo(name)


def local_today(tz: Optional[tzinfo] = None) -> date:
    """Today's date in the display zone."""
    return datetime.now(tz or _display_tz).date()


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp as sent by TfL.

    Unparseable values are logged and returned as ZERO_TIME so a single bad
    record does not break a whole listing.
    """
    try:
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        # fromisoformat only accepts 3 or 6 fractional digits before 3.11
        if "." in text:
            head, _, rest = text.partition(".")
            digits = ""
            while rest and rest[0].isdigit():
                digits, rest = digits + rest[0], rest[1:]
            text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
        parsed = datetime.fromisoformat(text)
    except (AttributeError, ValueError) as e:
        logger.warning(f"unable to parse {value!r} as date: {e}")
        return ZERO_TIME
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_display_time(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert an aware datetime into the display timezone."""
    return value.astimezone(tz or _display_tz)


def format_clock(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """Render an absolute time as HH:MM in the display timezone."""
    return to_display_time(value, tz).strftime("%H:%M")


def format_duration(value: timedelta) -> str:
    """Render a duration compactly, e.g. 4m30s or 45s."""
    total = int(value.total_seconds())
    sign = "-" if total < 0 else ""
    total = abs(total)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"
