"""Tests for the Flask CLI commands."""

from __future__ import annotations

from datetime import date, datetime, timezone


def test_sweep_command(app, subscriber, completion_factory):
    _, _, product = subscriber
    completion_factory(product, date(2025, 1, 11))
    completion_factory(product, date(2025, 1, 12))

    result = app.test_cli_runner().invoke(args=["glowtrack-sweep"])

    assert result.exit_code == 0
    assert "Marked 2 step(s) as missed." in result.output


def test_streak_command_with_explicit_today(app, subscriber, completion_factory):
    profile, _, product = subscriber
    done = datetime(2025, 1, 10, 8, 0, tzinfo=timezone.utc)
    for day in (8, 9, 10):
        completion_factory(product, date(2025, 1, day), status="on-time", completed_at=done)

    result = app.test_cli_runner().invoke(
        args=["glowtrack-streak", str(profile.id), "--today", "2025-01-10"]
    )

    assert result.exit_code == 0
    assert "Current streak: 3 day(s)" in result.output


def test_streak_command_defaults_to_local_today(app, subscriber):
    profile, _, _ = subscriber

    result = app.test_cli_runner().invoke(args=["glowtrack-streak", str(profile.id)])

    assert result.exit_code == 0
    assert "Current streak: 0 day(s)" in result.output


def test_publish_command(app, ctx, subscriber):
    _, routine, _ = subscriber

    result = app.test_cli_runner().invoke(args=["glowtrack-publish", str(routine.id)])

    assert result.exit_code == 0
    assert f"Routine {routine.id} is now published." in result.output
    assert ctx.routine_repo.get_by_id(routine.id).status == "published"
