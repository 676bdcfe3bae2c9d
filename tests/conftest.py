"""Pytest configuration and shared fixtures for GlowTrack tests.

This module provides database fixtures, a controllable clock, an AppContext
wired to a throwaway SQLite file, and factories for profiles, routines,
products and completion records.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest
from sqlmodel import Session, SQLModel, create_engine

from glowtrack.app import create_app
from glowtrack.config import TestConfig
from glowtrack.constants.routine import DAILY, MORNING, PENDING
from glowtrack.context import AppContext
from glowtrack.infra.database import create_session_factory
from glowtrack.infra.repositories import (
    SQLModelCompletionRepository,
    SQLModelRoutineProductRepository,
    SQLModelRoutineRepository,
    SQLModelUserProfileRepository,
)

# Import all models to ensure they're registered with SQLModel metadata
from glowtrack.models import RoutineProduct, RoutineStepCompletion, SkincareRoutine, UserProfile
from glowtrack.services.compliance import calculate_deadlines

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(
        f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False}
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Plain session for inspecting rows directly."""
    session = Session(db_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one the repositories receive in production."""
    return create_session_factory(db_engine)


# =============================================================================
# Clock and Context
# =============================================================================


class FrozenClock:
    """Callable clock whose current instant only moves when told to."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def __call__(self) -> datetime:
        return self.instant

    def set(self, instant: datetime) -> None:
        self.instant = instant

    def advance(self, **kwargs) -> None:
        self.instant = self.instant + timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    """Frozen at Wednesday 2025-01-15 09:00 UTC (09:00 in London)."""
    return FrozenClock(datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def test_config(tmp_path, monkeypatch) -> TestConfig:
    monkeypatch.setenv("GLOWTRACK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("GLOWTRACK_DEV_MODE", "true")
    monkeypatch.delenv("GLOWTRACK_API_KEY", raising=False)
    monkeypatch.delenv("GLOWTRACK_DATABASE_URL", raising=False)
    return TestConfig()


@pytest.fixture
def ctx(test_config, session_factory, clock) -> AppContext:
    """AppContext backed by the per-test database and the frozen clock."""
    return AppContext(
        config=test_config,
        session_factory=session_factory,
        user_profile_repo=SQLModelUserProfileRepository(session_factory),
        routine_repo=SQLModelRoutineRepository(session_factory),
        product_repo=SQLModelRoutineProductRepository(session_factory),
        completion_repo=SQLModelCompletionRepository(session_factory),
        now=clock,
    )


@pytest.fixture
def app(ctx):
    flask_app = create_app(ctx=ctx)
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def profile_factory(ctx):
    """Factory for creating subscriber profiles."""

    counter = {"n": 0}

    def _create_profile(
        email: Optional[str] = None,
        timezone_name: str = "Europe/London",
        first_name: str = "Test",
    ) -> UserProfile:
        counter["n"] += 1
        profile = UserProfile(
            email=email or f"subscriber{counter['n']}@example.com",
            first_name=first_name,
            last_name="Subscriber",
            timezone=timezone_name,
        )
        return ctx.user_profile_repo.create(profile)

    return _create_profile


@pytest.fixture
def routine_factory(ctx):
    """Factory for creating draft routines."""

    def _create_routine(
        profile: UserProfile,
        start_date: date = date(2025, 1, 13),
        end_date: Optional[date] = None,
        name: str = "Barrier repair",
        status: str = "draft",
    ) -> SkincareRoutine:
        routine = SkincareRoutine(
            user_profile_id=profile.id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            status=status,
        )
        return ctx.routine_repo.create(routine)

    return _create_routine


@pytest.fixture
def product_factory(ctx):
    """Factory for creating routine products."""

    def _create_product(
        routine: SkincareRoutine,
        routine_step: str = "Cleanser",
        product_name: str = "Gentle Foaming Cleanser",
        frequency: str = DAILY,
        days: Optional[list[str]] = None,
        time_of_day: str = MORNING,
        order: int = 0,
    ) -> RoutineProduct:
        product = RoutineProduct(
            routine_id=routine.id,
            user_profile_id=routine.user_profile_id,
            routine_step=routine_step,
            product_name=product_name,
            frequency=frequency,
            days=days,
            time_of_day=time_of_day,
            order=order,
        )
        return ctx.product_repo.create(product)

    return _create_product


@pytest.fixture
def completion_factory(session_factory):
    """Factory for creating completion records with correctly derived deadlines."""

    def _create_completion(
        product: RoutineProduct,
        scheduled_date: date,
        time_of_day: str = MORNING,
        status: str = PENDING,
        completed_at: Optional[datetime] = None,
        tz_name: str = "Europe/London",
    ) -> RoutineStepCompletion:
        deadlines = calculate_deadlines(scheduled_date, time_of_day, tz_name)
        completion = RoutineStepCompletion(
            routine_product_id=product.id,
            user_profile_id=product.user_profile_id,
            scheduled_date=scheduled_date,
            scheduled_time_of_day=time_of_day,
            on_time_deadline=deadlines.on_time_deadline,
            grace_period_end=deadlines.grace_period_end,
            status=status,
            completed_at=completed_at,
        )
        with session_factory() as session:
            session.add(completion)
            session.commit()
            session.refresh(completion)
            session.expunge(completion)
        return completion

    return _create_completion


@pytest.fixture
def subscriber(profile_factory, routine_factory, product_factory):
    """A London subscriber with a published-looking routine and one daily product."""

    profile = profile_factory(email="ana@example.com")
    routine = routine_factory(profile)
    product = product_factory(routine)
    return profile, routine, product


# =============================================================================
# In-memory stores
# =============================================================================


@dataclass
class FakeRecord:
    scheduled_date: date
    status: str


class FakeCompletionStore:
    """Range reader over an in-memory list that remembers every query."""

    def __init__(self, records: Optional[list[FakeRecord]] = None, error: Optional[Exception] = None):
        self.records = list(records or [])
        self.error = error
        self.calls: list[tuple[int, date, date]] = []

    def add_day(self, day: date, *statuses: str) -> None:
        for status in statuses:
            self.records.append(FakeRecord(day, status))

    def list_for_user_between(self, user_profile_id: int, start_date: date, end_date: date):
        self.calls.append((user_profile_id, start_date, end_date))
        if self.error is not None:
            raise self.error
        return [r for r in self.records if start_date <= r.scheduled_date <= end_date]


@pytest.fixture
def fake_store() -> FakeCompletionStore:
    return FakeCompletionStore()
