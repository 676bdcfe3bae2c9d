"""Tests for the SQLModel repository implementations."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlmodel import create_engine

from glowtrack.errors import NotFound, RoutineStateError, StorageUnavailable
from glowtrack.infra.database import create_session_factory
from glowtrack.infra.repositories import (
    SQLModelCompletionRepository,
    SQLModelUserProfileRepository,
)
from glowtrack.models import RoutineStepCompletion, UserProfile

UTC = timezone.utc


class TestUserProfileRepository:
    def test_email_is_normalised(self, ctx, profile_factory):
        profile = profile_factory(email="  Ana.Smith@Example.COM ")

        assert profile.email == "ana.smith@example.com"
        assert ctx.user_profile_repo.get_by_email("ANA.SMITH@example.com").id == profile.id

    def test_missing_profile(self, ctx):
        assert ctx.user_profile_repo.get_by_id(1) is None
        assert ctx.user_profile_repo.get_by_email("nobody@example.com") is None


class TestRoutineRepositories:
    def test_days_round_trip_as_list(self, ctx, subscriber, product_factory):
        _, routine, _ = subscriber
        product = product_factory(routine, frequency="specific_days", days=["Monday", "Friday"])

        assert ctx.product_repo.get_by_id(product.id).days == ["Monday", "Friday"]

    def test_products_listed_in_display_order(self, ctx, profile_factory, routine_factory, product_factory):
        routine = routine_factory(profile_factory())
        second = product_factory(routine, routine_step="Moisturise", order=2)
        first = product_factory(routine, routine_step="Cleanse", order=1)

        assert [p.id for p in ctx.product_repo.list_for_routine(routine.id)] == [first.id, second.id]

    def test_list_by_ids(self, ctx, subscriber, product_factory):
        _, routine, product = subscriber
        other = product_factory(routine, routine_step="Protect")

        assert {p.id for p in ctx.product_repo.list_by_ids([product.id, other.id])} == {product.id, other.id}
        assert ctx.product_repo.list_by_ids([]) == []

    def test_publish_unknown_routine(self, ctx, clock):
        with pytest.raises(NotFound):
            ctx.routine_repo.publish(999, [], published_at=clock())

    def test_publish_rechecks_status_in_transaction(
        self, ctx, clock, profile_factory, routine_factory, product_factory
    ):
        from glowtrack.services.scheduling import build_occurrences

        profile = profile_factory()
        routine = routine_factory(profile, status="published")
        product = product_factory(routine)
        records = build_occurrences([product], profile.id, "Europe/London", date(2025, 1, 15), date(2025, 1, 16))

        with pytest.raises(RoutineStateError):
            ctx.routine_repo.publish(routine.id, records, published_at=clock())

        assert ctx.completion_repo.list_for_user_between(profile.id, date(2025, 1, 1), date(2025, 1, 31)) == []


class TestCompletionRepository:
    def test_instants_round_trip_as_aware_utc(self, ctx, subscriber, completion_factory):
        _, _, product = subscriber
        completed_at = datetime(2025, 1, 15, 10, 30, tzinfo=timezone(timedelta(hours=2)))
        step = completion_factory(product, date(2025, 1, 15))

        ctx.completion_repo.record_completion(step.id, completed_at=completed_at, status="on-time")
        stored = ctx.completion_repo.get_by_id(step.id)

        assert stored.completed_at == datetime(2025, 1, 15, 8, 30, tzinfo=UTC)
        assert stored.completed_at.utcoffset() == timedelta(0)
        assert stored.on_time_deadline == datetime(2025, 1, 15, 12, 0, tzinfo=UTC)

    def test_record_completion_only_writes_pending(self, ctx, subscriber, completion_factory):
        _, _, product = subscriber
        step = completion_factory(product, date(2025, 1, 15), status="missed")

        result = ctx.completion_repo.record_completion(
            step.id, completed_at=datetime(2025, 1, 15, 9, 0, tzinfo=UTC), status="on-time"
        )

        assert result.status == "missed"
        assert result.completed_at is None

    def test_record_completion_unknown_id(self, ctx):
        assert (
            ctx.completion_repo.record_completion(
                1, completed_at=datetime(2025, 1, 15, tzinfo=UTC), status="on-time"
            )
            is None
        )

    def test_range_is_inclusive_and_newest_first(self, ctx, subscriber, completion_factory):
        profile, _, product = subscriber
        for day in (10, 11, 12, 13, 14):
            completion_factory(product, date(2025, 1, day))

        rows = ctx.completion_repo.list_for_user_between(profile.id, date(2025, 1, 11), date(2025, 1, 13))

        assert [r.scheduled_date for r in rows] == [date(2025, 1, 13), date(2025, 1, 12), date(2025, 1, 11)]

    def test_create_many(self, ctx, subscriber):
        from glowtrack.services.scheduling import build_occurrences

        profile, _, product = subscriber
        records = build_occurrences([product], profile.id, "Europe/London", date(2025, 1, 1), date(2025, 1, 5))

        assert ctx.completion_repo.create_many(records) == 5
        assert ctx.completion_repo.create_many([]) == 0
        assert len(ctx.completion_repo.list_for_user_between(profile.id, date(2025, 1, 1), date(2025, 1, 5))) == 5

    def test_create_many_skips_stored_occurrences(self, ctx, subscriber, completion_factory):
        from glowtrack.services.scheduling import build_occurrences

        profile, _, product = subscriber
        completion_factory(product, date(2025, 1, 2), status="missed")
        records = build_occurrences([product], profile.id, "Europe/London", date(2025, 1, 1), date(2025, 1, 3))
        repeat = build_occurrences([product], profile.id, "Europe/London", date(2025, 1, 3), date(2025, 1, 4))

        assert ctx.completion_repo.create_many(records + repeat) == 3
        rows = ctx.completion_repo.list_for_user_between(profile.id, date(2025, 1, 1), date(2025, 1, 4))
        assert sorted((r.scheduled_date.day, r.status) for r in rows) == [
            (1, "pending"),
            (2, "missed"),
            (3, "pending"),
            (4, "pending"),
        ]

    def test_one_record_per_occurrence(self, db_session, subscriber, completion_factory):
        _, _, product = subscriber
        first = completion_factory(product, date(2025, 1, 15))
        completion_factory(product, date(2025, 1, 15), time_of_day="evening")
        db_session.add(
            RoutineStepCompletion(
                routine_product_id=product.id,
                user_profile_id=product.user_profile_id,
                scheduled_date=date(2025, 1, 15),
                scheduled_time_of_day="morning",
                on_time_deadline=first.on_time_deadline,
                grace_period_end=first.grace_period_end,
            )
        )

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_record_completion_is_a_single_conditional_update(
        self, ctx, db_engine, subscriber, completion_factory
    ):
        _, _, product = subscriber
        step = completion_factory(product, date(2025, 1, 15))
        statements = []

        def capture(conn, cursor, statement, parameters, context, executemany):
            statements.append(statement)

        event.listen(db_engine, "before_cursor_execute", capture)
        try:
            ctx.completion_repo.record_completion(
                step.id, completed_at=datetime(2025, 1, 15, 9, 0, tzinfo=UTC), status="on-time"
            )
        finally:
            event.remove(db_engine, "before_cursor_execute", capture)

        updates = [s for s in statements if s.lstrip().upper().startswith("UPDATE")]
        assert len(updates) == 1
        assert "status" in updates[0].split("WHERE", 1)[1]
        assert "completed_at IS NULL" in updates[0]
        assert ctx.completion_repo.get_by_id(step.id).status == "on-time"



class TestStorageErrors:
    """Database failures surface as StorageUnavailable."""

    @pytest.fixture
    def broken_factory(self, tmp_path):
        # Schema never created, so every query fails
        engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
        yield create_session_factory(engine)
        engine.dispose()

    def test_range_query_failure(self, broken_factory):
        repo = SQLModelCompletionRepository(broken_factory)

        with pytest.raises(StorageUnavailable):
            repo.list_for_user_between(1, date(2025, 1, 1), date(2025, 1, 31))

    def test_sweep_failure(self, broken_factory):
        repo = SQLModelCompletionRepository(broken_factory)

        with pytest.raises(StorageUnavailable):
            repo.mark_overdue(datetime(2025, 1, 15, tzinfo=UTC))

    def test_create_failure(self, broken_factory):
        repo = SQLModelUserProfileRepository(broken_factory)

        with pytest.raises(StorageUnavailable):
            repo.create(UserProfile(email="a@example.com"))
