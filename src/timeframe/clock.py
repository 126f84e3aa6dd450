"""Timezone-aware clock and civil-calendar helpers.

All helpers work on aware local datetimes in a ``ZoneInfo`` zone. Day, week
and month boundaries are computed on calendar dates and then re-anchored at
local midnight, so they stay correct across daylight-saving transitions.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = "America/New_York"

# ZoneInfo raises ZoneInfoNotFoundError (a KeyError) for unknown keys and
# ValueError for malformed ones such as absolute paths.
TIMEZONE_ERRORS = (ZoneInfoNotFoundError, ValueError)


def get_zone(tz: str) -> ZoneInfo:
    """Look up an IANA zone. Unknown names raise, they are never sanitized."""
    return ZoneInfo(tz)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_local(instant: datetime, zone: ZoneInfo) -> datetime:
    """Convert an instant to local time in ``zone``. Naive values are UTC."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(zone)


def to_utc(local: datetime) -> datetime:
    return local.astimezone(timezone.utc)


def local_midnight(day: date, zone: ZoneInfo) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=zone)


def start_of_day(local: datetime) -> datetime:
    return local_midnight(local.date(), local.tzinfo)


def start_of_week(local: datetime) -> datetime:
    """Monday 00:00 of the week containing ``local``."""
    monday = local.date() - timedelta(days=local.weekday())
    return local_midnight(monday, local.tzinfo)


def start_of_month(local: datetime) -> datetime:
    return local_midnight(local.date().replace(day=1), local.tzinfo)


class Clock:
    """Source of "now", injectable so window resolution is deterministic."""

    def __init__(self, now_fn: Optional[Callable[[], datetime]] = None):
        self._now_fn = now_fn or utc_now

    def now(self, zone: ZoneInfo) -> datetime:
        """Current instant expressed in ``zone``."""
        return to_local(self._now_fn(), zone)


class FixedClock(Clock):
    """Clock pinned to a single reference instant."""

    def __init__(self, instant: datetime):
        super().__init__(lambda: instant)


SYSTEM_CLOCK = Clock()
