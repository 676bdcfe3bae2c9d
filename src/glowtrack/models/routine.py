"""Skincare routine and routine product tables."""

from __future__ import annotations

from datetime import date, datetime
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from ..constants.routine import DAILY, MORNING, ROUTINE_DRAFT
from .types import UTCDateTime, utcnow


class SkincareRoutine(SQLModel, table=True):
    """A coached routine assigned to one subscriber."""

    __tablename__: ClassVar[str] = "skincare_routine"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_profile_id: int = Field(foreign_key="user_profile.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=120)
    start_date: date = Field(nullable=False)
    end_date: Optional[date] = Field(default=None)
    status: str = Field(default=ROUTINE_DRAFT, nullable=False, max_length=16, index=True)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UTCDateTime(), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UTCDateTime(), nullable=False),
    )


class RoutineProduct(SQLModel, table=True):
    """One scheduled skincare action within a routine."""

    __tablename__: ClassVar[str] = "routine_product"

    id: Optional[int] = Field(default=None, primary_key=True)
    routine_id: int = Field(foreign_key="skincare_routine.id", nullable=False, index=True)
    user_profile_id: int = Field(foreign_key="user_profile.id", nullable=False, index=True)
    routine_step: str = Field(nullable=False, max_length=80)
    product_name: str = Field(default="", max_length=160)
    instructions: str = Field(default="", max_length=500)
    frequency: str = Field(default=DAILY, nullable=False, max_length=32)
    # Full English weekday names; ignored for daily products
    days: Optional[list[str]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    time_of_day: str = Field(default=MORNING, nullable=False, max_length=16)
    order: int = Field(default=0, nullable=False)
