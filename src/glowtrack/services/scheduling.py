"""Generation of scheduled step records from routine products."""

from __future__ import annotations

from calendar import monthrange
from datetime import date, timedelta
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..constants.routine import (
    EVENING,
    FREQUENCY_VALUES,
    MISSED,
    MORNING,
    PENDING,
    ROUTINE_PUBLISHED,
    TIMES_OF_DAY,
    WEEKDAY_NAMES,
)
from ..context import AppContext
from ..errors import InvalidScheduleValue, NotFound, RoutineStateError
from ..logging_config import get_logger
from ..models.completion import RoutineStepCompletion
from ..models.routine import RoutineProduct, SkincareRoutine
from .compliance import local_date, make_deadline_cache, should_generate_for_date

logger = get_logger(__name__)

SCHEDULE_FIELDS = frozenset({"frequency", "days", "time_of_day"})
PRODUCT_FIELDS = SCHEDULE_FIELDS | {"routine_step", "product_name", "instructions", "order"}
ROUTINE_DATE_FIELDS = frozenset({"start_date", "end_date"})


def add_months(day: date, months: int) -> date:
    """Shift ``day`` by whole months, clamping to the target month's last day."""

    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, monthrange(year, month)[1]))


def iter_days(start: date, end: date) -> Iterable[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def build_occurrences(
    products: Sequence[RoutineProduct],
    user_profile_id: int,
    tz_name: str,
    start: date,
    end: date,
) -> list[RoutineStepCompletion]:
    """Create pending completion records for every applicable (product, day).

    Days are local calendar dates of the subscriber. Morning products are
    emitted before evening products within each day.
    """
    get_deadlines = make_deadline_cache(tz_name)

    by_time: dict[str, list[RoutineProduct]] = {MORNING: [], EVENING: []}
    for product in products:
        if product.time_of_day not in TIMES_OF_DAY:
            raise InvalidScheduleValue("time_of_day", product.time_of_day)
        by_time[product.time_of_day].append(product)

    occurrences: list[RoutineStepCompletion] = []
    for day in iter_days(start, end):
        for time_of_day in TIMES_OF_DAY:
            scheduled = [p for p in by_time[time_of_day] if should_generate_for_date(p, day)]
            if not scheduled:
                continue
            deadlines = get_deadlines(day, time_of_day)
            for product in scheduled:
                occurrences.append(
                    RoutineStepCompletion(
                        routine_product_id=product.id,
                        user_profile_id=user_profile_id,
                        scheduled_date=day,
                        scheduled_time_of_day=time_of_day,
                        on_time_deadline=deadlines.on_time_deadline,
                        grace_period_end=deadlines.grace_period_end,
                        status=PENDING,
                        completed_at=None,
                    )
                )
    return occurrences


def _load_routine_and_timezone(ctx: AppContext, routine_id: int) -> tuple[SkincareRoutine, str]:
    routine = ctx.routine_repo.get_by_id(routine_id)
    if routine is None:
        raise NotFound(f"Routine {routine_id} not found")
    profile = ctx.user_profile_repo.get_by_id(routine.user_profile_id)
    if profile is None:
        raise NotFound(f"User profile {routine.user_profile_id} not found")
    return routine, profile.timezone or ctx.config.DEFAULT_TIMEZONE


def _product_window(ctx: AppContext, routine: SkincareRoutine, today: date) -> tuple[date, date]:
    start = max(routine.start_date, today)
    end = routine.end_date or add_months(today, ctx.config.ONGOING_ROUTINE_MONTHS)
    return start, end


def _check_schedule_values(product: RoutineProduct) -> None:
    if product.frequency not in FREQUENCY_VALUES:
        raise InvalidScheduleValue("frequency", product.frequency)
    if product.time_of_day not in TIMES_OF_DAY:
        raise InvalidScheduleValue("time_of_day", product.time_of_day)
    for day in product.days or []:
        if day not in WEEKDAY_NAMES:
            raise InvalidScheduleValue("days", day)


def generate_scheduled_steps(ctx: AppContext, routine_id: int) -> int:
    """Create records for a whole routine, start date to end date.

    Routines without an end date are scheduled ``ONGOING_ROUTINE_MONTHS`` ahead
    of their start date. Occurrences that already have a record are skipped.
    Returns the number of records created.
    """
    routine, tz_name = _load_routine_and_timezone(ctx, routine_id)
    products = ctx.product_repo.list_for_routine(routine_id)
    if not products:
        return 0

    end = routine.end_date or add_months(routine.start_date, ctx.config.ONGOING_ROUTINE_MONTHS)
    occurrences = build_occurrences(products, routine.user_profile_id, tz_name, routine.start_date, end)
    count = ctx.completion_repo.create_many(occurrences)
    logger.info("Generated scheduled steps", extra={"routine_id": routine_id, "count": count})
    return count


def generate_scheduled_steps_for_product(
    ctx: AppContext, routine_id: int, product_id: int, today: date
) -> int:
    """Create records for one product added to a live routine.

    Scheduling starts at ``today`` or the routine start, whichever is later.
    Occurrences that already have a record are skipped.
    """

    routine, tz_name = _load_routine_and_timezone(ctx, routine_id)
    product = ctx.product_repo.get_by_id(product_id)
    if product is None or product.routine_id != routine_id:
        raise NotFound(f"Product {product_id} not found in routine {routine_id}")

    start, end = _product_window(ctx, routine, today)
    occurrences = build_occurrences([product], routine.user_profile_id, tz_name, start, end)
    count = ctx.completion_repo.create_many(occurrences)
    logger.info(
        "Generated scheduled steps for product",
        extra={"routine_id": routine_id, "product_id": product_id, "count": count},
    )
    return count


def delete_scheduled_steps_for_product(ctx: AppContext, product_id: int, today: date) -> int:
    """Drop a product's pending and missed records from ``today`` onwards.

    Completed history is kept.
    """
    count = ctx.completion_repo.delete_for_product_from(product_id, today, [PENDING, MISSED])
    logger.info("Deleted scheduled steps", extra={"product_id": product_id, "count": count})
    return count


def publish_window(
    routine: SkincareRoutine, today: date, window_days: int
) -> tuple[date, Optional[date]]:
    """Return the (start, end) of the rolling publish window, end None when empty."""

    start = max(routine.start_date, today)
    end = start + timedelta(days=window_days - 1)
    if routine.end_date is not None:
        end = min(end, routine.end_date)
    if end < start:
        return start, None
    return start, end


def publish_routine(
    ctx: AppContext, routine_id: int, today: Optional[date] = None
) -> SkincareRoutine:
    """Publish a draft routine and schedule its rolling window of steps.

    The status change and the inserted steps are committed together. ``today``
    defaults to the subscriber's local date per the injected clock.

    Raises:
        NotFound: unknown routine or subscriber profile
        RoutineStateError: already published, or no products to schedule
    """
    routine, tz_name = _load_routine_and_timezone(ctx, routine_id)
    if routine.status == ROUTINE_PUBLISHED:
        raise RoutineStateError("Routine is already published")

    products = ctx.product_repo.list_for_routine(routine_id)
    if not products:
        raise RoutineStateError("Cannot publish routine without products")

    if today is None:
        today = local_date(ctx.now(), tz_name)
    start, end = publish_window(routine, today, ctx.config.GENERATION_WINDOW_DAYS)
    occurrences: list[RoutineStepCompletion] = []
    if end is not None:
        occurrences = build_occurrences(products, routine.user_profile_id, tz_name, start, end)

    published = ctx.routine_repo.publish(routine_id, occurrences, published_at=ctx.now())
    logger.info(
        "Routine published",
        extra={"routine_id": routine_id, "steps": len(occurrences), "window_start": start},
    )
    return published


def reschedule_product(
    ctx: AppContext,
    product_id: int,
    updates: Mapping[str, Any],
    today: Optional[date] = None,
) -> RoutineProduct:
    """Edit a routine product and rebuild its upcoming steps when its schedule changed.

    For a published routine, a change to frequency, days or time of day
    replaces the product's pending and missed records from ``today`` on with
    freshly generated ones, in the same transaction as the edit. Completed
    records are kept. ``today`` defaults to the subscriber's local date.

    Raises:
        NotFound: unknown product, routine or subscriber profile
        InvalidScheduleValue: unknown field, frequency, weekday or time of day
    """
    for field in updates:
        if field not in PRODUCT_FIELDS:
            raise InvalidScheduleValue("field", field)

    product = ctx.product_repo.get_by_id(product_id)
    if product is None:
        raise NotFound(f"Product {product_id} not found")
    edited = RoutineProduct(**{**product.model_dump(), **updates})
    _check_schedule_values(edited)

    routine, tz_name = _load_routine_and_timezone(ctx, product.routine_id)
    if routine.status != ROUTINE_PUBLISHED or not SCHEDULE_FIELDS.intersection(updates):
        return ctx.product_repo.update(product_id, updates)

    if today is None:
        today = local_date(ctx.now(), tz_name)
    start, end = _product_window(ctx, routine, today)
    occurrences = build_occurrences([edited], routine.user_profile_id, tz_name, start, end)
    saved = ctx.product_repo.update(
        product_id, updates, reschedule_from=today, completions=occurrences
    )
    logger.info(
        "Product rescheduled",
        extra={"product_id": product_id, "from_date": today, "generated": len(occurrences)},
    )
    return saved


def reschedule_routine(
    ctx: AppContext,
    routine_id: int,
    changes: Mapping[str, Optional[date]],
    today: Optional[date] = None,
) -> SkincareRoutine:
    """Move a routine's start and/or end date.

    ``changes`` holds ``start_date`` and/or ``end_date``; an ``end_date`` of
    None makes the routine ongoing. For a published routine, pending records
    outside the new range are deleted and the rolling window from
    ``max(start_date, today)`` is filled in where records are missing. Past
    days are never backfilled.

    Raises:
        NotFound: unknown routine or subscriber profile
        InvalidScheduleValue: unknown field, missing start date, or end before start
    """
    for field in changes:
        if field not in ROUTINE_DATE_FIELDS:
            raise InvalidScheduleValue("field", field)
    if "start_date" in changes and changes["start_date"] is None:
        raise InvalidScheduleValue("start_date", None)

    routine, tz_name = _load_routine_and_timezone(ctx, routine_id)
    moved = SkincareRoutine(**{**routine.model_dump(), **changes})
    if moved.end_date is not None and moved.end_date < moved.start_date:
        raise InvalidScheduleValue("end_date", moved.end_date)

    occurrences: list[RoutineStepCompletion] = []
    if routine.status == ROUTINE_PUBLISHED:
        if today is None:
            today = local_date(ctx.now(), tz_name)
        start, end = publish_window(moved, today, ctx.config.GENERATION_WINDOW_DAYS)
        if end is not None:
            products = ctx.product_repo.list_for_routine(routine_id)
            occurrences = build_occurrences(products, routine.user_profile_id, tz_name, start, end)

    updated = ctx.routine_repo.update_dates(
        routine_id, changes, updated_at=ctx.now(), completions=occurrences
    )
    logger.info(
        "Routine dates changed",
        extra={
            "routine_id": routine_id,
            "start_date": updated.start_date,
            "end_date": updated.end_date,
            "generated": len(occurrences),
        },
    )
    return updated


__all__ = [
    "add_months",
    "build_occurrences",
    "delete_scheduled_steps_for_product",
    "generate_scheduled_steps",
    "generate_scheduled_steps_for_product",
    "publish_routine",
    "publish_window",
    "reschedule_product",
    "reschedule_routine",
]
