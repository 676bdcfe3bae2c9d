"""Per-occurrence completion records for routine products."""

from __future__ import annotations

from datetime import date, datetime
from typing import ClassVar, Optional

from sqlalchemy import Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from ..constants.routine import PENDING
from .types import UTCDateTime, utcnow


class RoutineStepCompletion(SQLModel, table=True):
    """One scheduled occurrence of a routine product and its outcome.

    ``grace_period_end`` is always ``on_time_deadline + 24h``. ``status`` stays
    ``pending`` until ``completed_at`` is recorded or the expiry sweep marks
    the record ``missed``. A product has at most one record per
    (date, time of day).
    """

    __tablename__: ClassVar[str] = "routine_step_completion"
    __table_args__ = (
        UniqueConstraint(
            "routine_product_id",
            "scheduled_date",
            "scheduled_time_of_day",
            name="uq_routine_step_completion_occurrence",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    routine_product_id: int = Field(foreign_key="routine_product.id", nullable=False, index=True)
    user_profile_id: int = Field(foreign_key="user_profile.id", nullable=False, index=True)
    scheduled_date: date = Field(nullable=False, index=True)
    scheduled_time_of_day: str = Field(nullable=False, max_length=16)
    on_time_deadline: datetime = Field(sa_column=Column(UTCDateTime(), nullable=False))
    grace_period_end: datetime = Field(sa_column=Column(UTCDateTime(), nullable=False, index=True))
    status: str = Field(default=PENDING, nullable=False, max_length=16, index=True)
    completed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(UTCDateTime(), nullable=True)
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UTCDateTime(), nullable=False),
    )
