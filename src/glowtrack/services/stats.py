"""Consumer dashboard stats: today's progress, current streak, weekly compliance."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

from ..constants.routine import is_completed_status
from ..context import AppContext
from ..errors import NotFound
from ..logging_config import get_logger
from .compliance import local_date
from .streaks import get_current_streak

logger = get_logger(__name__)


@dataclass(frozen=True)
class Progress:
    completed: int
    total: int

    @property
    def percentage(self) -> int:
        return rounded_percentage(self.completed, self.total)

    def to_dict(self) -> dict[str, int]:
        return {"completed": self.completed, "total": self.total, "percentage": self.percentage}


@dataclass(frozen=True)
class StatsSummary:
    today: date
    timezone: str
    today_progress: Progress
    current_streak: int
    weekly_compliance: Progress

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the camelCase keys the consumer app expects."""
        return {
            "todayProgress": self.today_progress.to_dict(),
            "currentStreak": {"days": self.current_streak},
            "weeklyCompliance": self.weekly_compliance.to_dict(),
        }


def rounded_percentage(completed: int, total: int) -> int:
    """Whole-number percentage rounded half up; 0 when there is nothing to do."""

    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


def week_start(day: date) -> date:
    """Monday of the ISO week containing ``day``."""

    return day - timedelta(days=day.weekday())


def summarize(records: Iterable[Any]) -> Progress:
    statuses = [record.status for record in records]
    return Progress(
        completed=sum(1 for status in statuses if is_completed_status(status)),
        total=len(statuses),
    )


def get_stats(
    ctx: AppContext, user_profile_id: int, now: Optional[datetime] = None
) -> StatsSummary:
    """Build the dashboard stats for a subscriber as of ``now``.

    "Today" is the subscriber's local calendar date; the week starts on Monday.

    Raises:
        NotFound: unknown profile
        StorageUnavailable: the completion store failed
    """
    profile = ctx.user_profile_repo.get_by_id(user_profile_id)
    if profile is None:
        raise NotFound(f"User profile {user_profile_id} not found")

    tz_name = profile.timezone or ctx.config.DEFAULT_TIMEZONE
    today = local_date(now or ctx.now(), tz_name)
    monday = week_start(today)

    week_records = ctx.completion_repo.list_for_user_between(user_profile_id, monday, today)
    today_records = [record for record in week_records if record.scheduled_date == today]
    streak = get_current_streak(
        ctx.completion_repo,
        user_profile_id,
        today,
        fetch_days=ctx.config.STREAK_FETCH_DAYS,
    )

    summary = StatsSummary(
        today=today,
        timezone=tz_name,
        today_progress=summarize(today_records),
        current_streak=streak,
        weekly_compliance=summarize(week_records),
    )
    logger.debug(
        "Computed stats",
        extra={"user_profile_id": user_profile_id, "today": today, "streak": streak},
    )
    return summary


__all__ = [
    "Progress",
    "StatsSummary",
    "get_stats",
    "rounded_percentage",
    "summarize",
    "week_start",
]
