"""Admin compliance report: adherence totals, AM/PM split and per-product rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Sequence

from ..constants.routine import EVENING, LATE, MISSED, MORNING, ON_TIME, PENDING, frequency_label
from ..context import AppContext
from ..errors import InvalidScheduleValue
from ..models.completion import RoutineStepCompletion
from ..models.routine import RoutineProduct
from .compliance import weekday_name


@dataclass
class Tally:
    prescribed: int = 0
    on_time: int = 0
    late: int = 0
    missed: int = 0

    @property
    def completed(self) -> int:
        return self.on_time + self.late

    def add(self, status: str) -> None:
        self.prescribed += 1
        if status == ON_TIME:
            self.on_time += 1
        elif status == LATE:
            self.late += 1
        elif status == MISSED:
            self.missed += 1
        else:
            raise InvalidScheduleValue("status", status)

    def to_dict(self) -> dict[str, int]:
        return {
            "prescribed": self.prescribed,
            "completed": self.completed,
            "onTime": self.on_time,
            "late": self.late,
            "missed": self.missed,
        }


@dataclass
class ProductCompliance:
    routine_product_id: int
    routine_step: str
    product_name: str
    time_of_day: str
    frequency: str
    tally: Tally = field(default_factory=Tally)
    missed_dates: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "routineProductId": self.routine_product_id,
            "routineStep": self.routine_step,
            "productName": self.product_name,
            "timeOfDay": self.time_of_day,
            "frequency": self.frequency,
            "frequencyLabel": frequency_label(self.frequency),
            **self.tally.to_dict(),
            "missedDates": list(self.missed_dates),
        }


@dataclass
class ComplianceReport:
    overall: Tally
    am: Tally
    pm: Tally
    steps: list[ProductCompliance]

    def to_dict(self) -> dict[str, Any]:
        overall = self.overall.to_dict()
        overall.pop("completed")
        return {
            "overall": overall,
            "am": self.am.to_dict(),
            "pm": self.pm.to_dict(),
            "steps": [step.to_dict() for step in self.steps],
        }


def format_missed_date(day: date) -> str:
    """Render e.g. ``Monday, Jan 6, 2025``."""
    return f"{weekday_name(day)}, {day:%b} {day.day}, {day.year}"


def build_compliance_report(
    completions: Sequence[RoutineStepCompletion],
    products: Sequence[RoutineProduct],
) -> ComplianceReport:
    """Aggregate resolved completions; pending records are not counted."""

    products_by_id = {product.id: product for product in products}
    overall, am, pm = Tally(), Tally(), Tally()
    rows: dict[int, ProductCompliance] = {}

    for completion in completions:
        if completion.status == PENDING:
            continue
        overall.add(completion.status)
        if completion.scheduled_time_of_day == MORNING:
            am.add(completion.status)
        elif completion.scheduled_time_of_day == EVENING:
            pm.add(completion.status)

        product = products_by_id.get(completion.routine_product_id)
        if product is None:
            continue
        row = rows.get(product.id)
        if row is None:
            row = rows[product.id] = ProductCompliance(
                routine_product_id=product.id,
                routine_step=product.routine_step,
                product_name=product.product_name,
                time_of_day=product.time_of_day,
                frequency=product.frequency,
            )
        row.tally.add(completion.status)
        if completion.status == MISSED:
            row.missed_dates.append(format_missed_date(completion.scheduled_date))

    return ComplianceReport(overall=overall, am=am, pm=pm, steps=list(rows.values()))


def get_compliance_report(
    ctx: AppContext, user_profile_id: int, start: date, end: date
) -> ComplianceReport:
    """Load a subscriber's completions in [start, end] and aggregate them."""

    if end < start:
        raise ValueError("end date must not be before start date")
    completions = ctx.completion_repo.list_for_user_between(user_profile_id, start, end)
    # Oldest first so missed dates read chronologically
    completions = sorted(completions, key=lambda c: (c.scheduled_date, c.id or 0))
    product_ids = sorted({c.routine_product_id for c in completions if c.status != PENDING})
    products = ctx.product_repo.list_by_ids(product_ids)
    return build_compliance_report(completions, products)


__all__ = [
    "ComplianceReport",
    "ProductCompliance",
    "Tally",
    "build_compliance_report",
    "format_missed_date",
    "get_compliance_report",
]
