"""Tests for the background missed-step sweep."""

from __future__ import annotations

from datetime import date, timedelta

from glowtrack.app import create_app
from glowtrack.errors import StorageUnavailable
from glowtrack.scheduler import SWEEP_JOB_ID, create_scheduler


class _BrokenCompletionRepo:
    def mark_overdue(self, now, *, user_profile_id=None):
        raise StorageUnavailable("database is locked")


def test_run_sweep_marks_expired_steps(ctx, subscriber, completion_factory):
    _, _, product = subscriber
    expired = completion_factory(product, date(2025, 1, 12))
    completion_factory(product, date(2025, 1, 15))

    assert create_scheduler(ctx).run_sweep() == 1
    assert ctx.completion_repo.get_by_id(expired.id).status == "missed"


def test_run_sweep_survives_storage_failure(ctx):
    ctx.completion_repo = _BrokenCompletionRepo()

    assert create_scheduler(ctx).run_sweep() == 0


def test_start_registers_interval_job(ctx):
    ctx.config.MISSED_SWEEP_MINUTES = 5
    scheduler = create_scheduler(ctx, auto_start=True)
    try:
        assert scheduler.running
        job = scheduler.scheduler.get_job(SWEEP_JOB_ID)
        assert job is not None
        assert job.trigger.interval == timedelta(minutes=5)
    finally:
        scheduler.stop()

    assert not scheduler.running


def test_stop_without_start_is_noop(ctx):
    scheduler = create_scheduler(ctx)

    scheduler.stop()

    assert not scheduler.running


def test_app_can_start_scheduler(ctx):
    app = create_app(ctx=ctx, start_scheduler=True)
    scheduler = app.extensions["glowtrack_scheduler"]
    try:
        assert scheduler.running
    finally:
        scheduler.stop()
