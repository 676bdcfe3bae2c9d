"""Current-streak aggregation over persisted completion records."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Protocol, Sequence

from ..constants.routine import COMPLETED_STATUSES
from ..logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_FETCH_DAYS = 60


class CompletionRecord(Protocol):
    scheduled_date: date
    status: str


class CompletionRangeReader(Protocol):
    """The slice of the completion store the aggregator reads from."""

    def list_for_user_between(
        self, user_profile_id: int, start_date: date, end_date: date
    ) -> Sequence[CompletionRecord]:
        """Records whose scheduled_date lies in [start_date, end_date]."""
        ...


def parse_calendar_date(value: date | str) -> date:
    """Accept a date, a datetime (date part kept) or a ``YYYY-MM-DD`` string."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise TypeError(f"Expected a date or YYYY-MM-DD string, got {type(value).__name__}")


def is_perfect_day(records: Iterable[CompletionRecord]) -> bool:
    """A day is perfect when it has records and every one is on-time or late."""

    statuses = [record.status for record in records]
    return bool(statuses) and all(status in COMPLETED_STATUSES for status in statuses)


def get_current_streak(
    store: CompletionRangeReader,
    user_profile_id: int,
    today: date | str,
    *,
    fetch_days: int = DEFAULT_FETCH_DAYS,
) -> int:
    """Count consecutive perfect days walking backwards from ``today`` inclusive.

    The first day with no records, or with any pending/missed record, stops
    the walk and is not counted. Records are fetched ``fetch_days`` at a time;
    an older window is only requested when the whole current window was
    perfect. Storage errors propagate as ``StorageUnavailable``.
    """
    if fetch_days < 1:
        raise ValueError("fetch_days must be at least 1")

    cursor = parse_calendar_date(today)
    streak = 0
    while True:
        window_start = cursor - timedelta(days=fetch_days - 1)
        records = store.list_for_user_between(user_profile_id, window_start, cursor)

        by_day: dict[date, list[CompletionRecord]] = defaultdict(list)
        for record in records:
            by_day[record.scheduled_date].append(record)

        while cursor >= window_start:
            if not is_perfect_day(by_day.get(cursor, ())):
                logger.debug(
                    "Streak walk stopped",
                    extra={"user_profile_id": user_profile_id, "streak": streak, "stopped_on": cursor},
                )
                return streak
            streak += 1
            cursor -= timedelta(days=1)


__all__ = [
    "CompletionRangeReader",
    "DEFAULT_FETCH_DAYS",
    "get_current_streak",
    "is_perfect_day",
    "parse_calendar_date",
]
