"""Subscriber profile model."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import Column
from sqlmodel import Field, SQLModel

from .types import UTCDateTime, utcnow


class UserProfile(SQLModel, table=True):
    """A subscriber whose routines and progress are coached."""

    __tablename__: ClassVar[str] = "user_profile"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(nullable=False, unique=True, index=True, max_length=255)
    first_name: str = Field(default="", max_length=80)
    last_name: str = Field(default="", max_length=80)
    # IANA identifier used for every deadline computed for this profile
    timezone: str = Field(default="Europe/London", nullable=False, max_length=64)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UTCDateTime(), nullable=False),
    )
