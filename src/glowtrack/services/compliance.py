"""Routine compliance calculations: deadlines, status and date applicability.

Everything here is pure. Deadlines are anchored to local wall-clock times in
the subscriber's timezone (noon for morning steps, end of day for evening
steps) and returned as UTC instants. The grace period is a fixed 24 hours
added to the resolved UTC deadline.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Optional, Protocol, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..constants.routine import (
    DAILY,
    EVENING,
    FREQUENCY_VALUES,
    LATE,
    MISSED,
    MORNING,
    ON_TIME,
    WEEKDAY_NAMES,
)
from ..errors import InvalidScheduleValue, InvalidTimezone

GRACE_PERIOD = timedelta(hours=24)

_LOCAL_DEADLINES = {
    MORNING: time(12, 0, 0, 0),
    EVENING: time(23, 59, 59, 999000),
}


class ScheduledProduct(Protocol):
    """Anything carrying a frequency policy (RoutineProduct satisfies this)."""

    frequency: str
    days: Optional[Sequence[str]]


@dataclass(frozen=True)
class Deadlines:
    on_time_deadline: datetime
    grace_period_end: datetime


def resolve_timezone(name: str) -> ZoneInfo:
    """Return the ZoneInfo for an IANA identifier or raise InvalidTimezone."""

    if not isinstance(name, str) or not name.strip():
        raise InvalidTimezone(str(name))
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise InvalidTimezone(name) from exc


def _as_calendar_date(value: date) -> date:
    # datetime is a date subclass; keep only its calendar fields
    return date(value.year, value.month, value.day)


def _local_deadline_time(time_of_day: str) -> time:
    try:
        return _LOCAL_DEADLINES[time_of_day]
    except (KeyError, TypeError):
        raise InvalidScheduleValue("time_of_day", time_of_day) from None


def _deadlines_in_zone(scheduled_date: date, time_of_day: str, zone: ZoneInfo) -> Deadlines:
    local = datetime.combine(_as_calendar_date(scheduled_date), _local_deadline_time(time_of_day), tzinfo=zone)
    on_time = local.astimezone(timezone.utc)
    return Deadlines(on_time_deadline=on_time, grace_period_end=on_time + GRACE_PERIOD)


def calculate_deadlines(scheduled_date: date, time_of_day: str, tz_name: str) -> Deadlines:
    """Compute the on-time and grace-period deadlines for one occurrence.

    Args:
        scheduled_date: Calendar date of the occurrence. A datetime is reduced to
            its year/month/day; its clock time and tzinfo are ignored.
        time_of_day: ``"morning"`` (local noon) or ``"evening"`` (local 23:59:59.999)
        tz_name: IANA timezone identifier of the subscriber

    Returns:
        Deadlines with both instants in UTC. ``grace_period_end`` is exactly
        24 hours after ``on_time_deadline``.

    Raises:
        InvalidTimezone: the identifier is unknown or malformed
        InvalidScheduleValue: ``time_of_day`` is not a recognised value
    """
    return _deadlines_in_zone(scheduled_date, time_of_day, resolve_timezone(tz_name))


def make_deadline_cache(tz_name: str) -> Callable[[date, str], Deadlines]:
    """Return a memoising deadline calculator bound to one timezone.

    Bulk generation asks for the same (date, time_of_day) pair once per
    product; the cache keeps that to one zone conversion per pair.
    """
    zone = resolve_timezone(tz_name)
    cache: dict[tuple[date, str], Deadlines] = {}

    def get_deadlines(scheduled_date: date, time_of_day: str) -> Deadlines:
        key = (_as_calendar_date(scheduled_date), time_of_day)
        hit = cache.get(key)
        if hit is None:
            hit = _deadlines_in_zone(key[0], time_of_day, zone)
            cache[key] = hit
        return hit

    return get_deadlines


def determine_status(
    completed_at: datetime, on_time_deadline: datetime, grace_period_end: datetime
) -> str:
    """Classify a completion instant against its deadlines.

    Both boundaries are inclusive: completing exactly at the on-time deadline
    is ``on-time`` and exactly at the grace-period end is ``late``.
    """
    if completed_at <= on_time_deadline:
        return ON_TIME
    if completed_at <= grace_period_end:
        return LATE
    return MISSED


def local_date(now: datetime, tz_name: str) -> date:
    """Calendar date of the instant ``now`` as seen in the given timezone."""

    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    return now.astimezone(resolve_timezone(tz_name)).date()


def weekday_name(day: date) -> str:
    """Full English weekday name of a calendar date, e.g. ``"Monday"``."""

    return WEEKDAY_NAMES[day.weekday()]


def should_generate_for_date(product: ScheduledProduct, day: date) -> bool:
    """Return True when the product is scheduled on ``day``.

    ``day`` is a calendar date in the subscriber's own timezone; its weekday
    is taken as given. Daily products always apply. Any other frequency
    applies only on the weekday names listed in ``product.days`` (exact,
    case-sensitive match) and never when that list is empty or missing.
    """
    frequency = product.frequency
    if frequency not in FREQUENCY_VALUES:
        raise InvalidScheduleValue("frequency", frequency)
    if frequency == DAILY:
        return True

    days = getattr(product, "days", None)
    if not days:
        return False
    return weekday_name(day) in days


__all__ = [
    "Deadlines",
    "GRACE_PERIOD",
    "ScheduledProduct",
    "calculate_deadlines",
    "determine_status",
    "local_date",
    "make_deadline_cache",
    "resolve_timezone",
    "should_generate_for_date",
    "weekday_name",
]
