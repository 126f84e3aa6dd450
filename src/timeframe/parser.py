"""Timeframe parser.

Maps loosely structured timeframe expressions ("today", "this-week",
"2024-09-01", "from:2024-08-01 to:2024-08-15", "last 10 days") onto a
half-open UTC interval ``[posted_after, posted_before)``.

Resolution never fails on content: anything unrecognized resolves like
"today". An unknown timezone is not content and raises from ``zoneinfo``.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from timeframe.clock import (
    DEFAULT_TIMEZONE,
    SYSTEM_CLOCK,
    Clock,
    get_zone,
    local_midnight,
    start_of_day,
    start_of_month,
    start_of_week,
    to_local,
    to_utc,
)
from utils.logging_config import get_logger

logger = get_logger("timeframe")

ROLLING_MIN_DAYS = 1
ROLLING_MAX_DAYS = 31

_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})$")
_RANGE_RE = re.compile(
    r"from\s*[:=]\s*(\d{4}-\d{2}-\d{2}).*?to\s*[:=]\s*(\d{4}-\d{2}-\d{2})"
)
_ROLLING_RE = re.compile(r"\b(?:past|last)\s+(-?\d+)\s*days?\b")
# Bare "week"/"month" count as the current period unless they read "last ...".
_THIS_WEEK_RE = re.compile(r"(?<!last )(?<!last-)week")
_THIS_MONTH_RE = re.compile(r"(?<!last )(?<!last-)month")
# Windows that end at the reference instant instead of a local midnight.
OPEN_ENDED_LABELS = ("this-week", "this-month")
_ROLLING_LABEL_RE = re.compile(r"^last-\d+-days$")


def format_instant(instant: datetime) -> str:
    """ISO-8601 UTC with a ``Z`` suffix."""
    instant = instant.astimezone(timezone.utc)
    spec = "seconds" if instant.microsecond == 0 else "milliseconds"
    return instant.isoformat(timespec=spec).replace("+00:00", "Z")


@dataclass(frozen=True)
class TimeWindow:
    """Resolved half-open UTC interval plus the label of the rule that built it."""

    posted_after: datetime
    posted_before: datetime
    label: str

    def __post_init__(self):
        if not self.posted_after < self.posted_before:
            raise ValueError(
                f"empty window: {self.posted_after} >= {self.posted_before}"
            )

    @property
    def open_ended(self) -> bool:
        return self.label in OPEN_ENDED_LABELS or bool(_ROLLING_LABEL_RE.match(self.label))

    def to_dict(self) -> dict:
        return {
            "postedAfter": format_instant(self.posted_after),
            "postedBefore": format_instant(self.posted_before),
            "label": self.label,
        }


@dataclass(frozen=True)
class _Context:
    zone: ZoneInfo
    now: datetime  # local wall-clock time in ``zone``


@dataclass(frozen=True)
class Rule:
    label: str
    match: Callable[[str], Any]
    resolve: Callable[[Any, _Context], tuple[datetime, datetime, str]]


def normalize(timeframe: Optional[str]) -> str:
    return " ".join((timeframe or "").split()).lower()


def _parse_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _match_day(text: str) -> Optional[date]:
    m = _DATE_RE.match(text)
    return _parse_date(m.group(1)) if m else None


def _match_range(text: str) -> Optional[tuple[date, date]]:
    m = _RANGE_RE.search(text)
    if not m:
        return None
    first, last = _parse_date(m.group(1)), _parse_date(m.group(2))
    if first is None or last is None:
        return None
    return (first, last) if first <= last else (last, first)


def _match_rolling(text: str) -> Optional[int]:
    m = _ROLLING_RE.search(text)
    if not m:
        return None
    return max(ROLLING_MIN_DAYS, min(ROLLING_MAX_DAYS, int(m.group(1))))


def _contains(*needles: str) -> Callable[[str], bool]:
    return lambda text: any(n in text for n in needles)


def _resolve_day(day: date, ctx: _Context):
    start = local_midnight(day, ctx.zone)
    return start, local_midnight(day + timedelta(days=1), ctx.zone), "day"


def _resolve_range(bounds: tuple[date, date], ctx: _Context):
    first, last = bounds
    return (
        local_midnight(first, ctx.zone),
        local_midnight(last + timedelta(days=1), ctx.zone),
        "range",
    )


def _resolve_today(_, ctx: _Context):
    start = start_of_day(ctx.now)
    return start, local_midnight(start.date() + timedelta(days=1), ctx.zone), "today"


def _resolve_yesterday(_, ctx: _Context):
    today = start_of_day(ctx.now)
    return local_midnight(today.date() - timedelta(days=1), ctx.zone), today, "yesterday"


def _resolve_this_week(_, ctx: _Context):
    return start_of_week(ctx.now), ctx.now, "this-week"


def _resolve_last_week(_, ctx: _Context):
    monday = start_of_week(ctx.now)
    return local_midnight(monday.date() - timedelta(days=7), ctx.zone), monday, "last-week"


def _resolve_this_month(_, ctx: _Context):
    return start_of_month(ctx.now), ctx.now, "this-month"


def _resolve_last_month(_, ctx: _Context):
    first = start_of_month(ctx.now)
    previous = first.date() - relativedelta(months=1)
    return local_midnight(previous, ctx.zone), first, "last-month"


def _resolve_rolling(days: int, ctx: _Context):
    # Wall-clock subtraction on an aware datetime keeps whole calendar days.
    return ctx.now - timedelta(days=days), ctx.now, f"last-{days}-days"


# First match wins.
RULES: tuple[Rule, ...] = (
    Rule("day", _match_day, _resolve_day),
    Rule("range", _match_range, _resolve_range),
    Rule("today", lambda text: text == "" or "today" in text, _resolve_today),
    Rule("yesterday", _contains("yesterday"), _resolve_yesterday),
    Rule("this-week", _THIS_WEEK_RE.search, _resolve_this_week),
    Rule("last-week", _contains("last week", "last-week"), _resolve_last_week),
    Rule("this-month", _THIS_MONTH_RE.search, _resolve_this_month),
    Rule("last-month", _contains("last month", "last-month"), _resolve_last_month),
    Rule("last-n-days", _match_rolling, _resolve_rolling),
)


def resolve_timeframe(
    timeframe: Optional[str] = None,
    tz: Optional[str] = DEFAULT_TIMEZONE,
    now: Optional[datetime] = None,
    clock: Clock = SYSTEM_CLOCK,
) -> TimeWindow:
    """Resolve a timeframe expression into a UTC ``TimeWindow``.

    Args:
        timeframe: Free-form expression; None or empty means today.
        tz: IANA timezone the expression is interpreted in.
        now: Reference instant. Naive values are taken as UTC. When omitted
            the instant comes from ``clock``.
        clock: Clock used when ``now`` is not given.

    Returns:
        TimeWindow with inclusive ``posted_after`` and exclusive
        ``posted_before``.

    Raises:
        zoneinfo.ZoneInfoNotFoundError: ``tz`` is not a known zone.
    """
    zone = get_zone(tz or DEFAULT_TIMEZONE)
    local_now = to_local(now, zone) if now is not None else clock.now(zone)
    ctx = _Context(zone=zone, now=local_now)
    text = normalize(timeframe)

    for rule in RULES:
        matched = rule.match(text)
        if matched:
            start, end, label = rule.resolve(matched, ctx)
            break
    else:
        start, end, label = _resolve_today(None, ctx)

    # "this week"/"this month" resolved exactly at the period start
    if end <= start:
        end = start + timedelta(seconds=1)

    window = TimeWindow(to_utc(start), to_utc(end), label)
    logger.debug("Resolved timeframe %r in %s -> %s", timeframe, zone.key, window.to_dict())
    return window
