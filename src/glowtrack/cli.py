"""Flask CLI commands for GlowTrack."""

from __future__ import annotations

import click

from .blueprints.common import current_context


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("glowtrack-sweep")
    @click.option("--user-profile-id", type=int, default=None, help="Limit the sweep to one subscriber")
    def glowtrack_sweep(user_profile_id: int | None) -> None:
        """Mark expired pending steps as missed."""

        from .services.completions import mark_overdue_as_missed

        ctx = current_context()
        count = mark_overdue_as_missed(ctx.completion_repo, ctx.now(), user_profile_id=user_profile_id)
        click.echo(f"Marked {count} step(s) as missed.")

    @app.cli.command("glowtrack-streak")
    @click.argument("user_profile_id", type=int)
    @click.option("--today", default=None, help="Reference date (YYYY-MM-DD); defaults to the subscriber's local today")
    def glowtrack_streak(user_profile_id: int, today: str | None) -> None:
        """Print a subscriber's current streak."""

        from .services.stats import get_stats
        from .services.streaks import get_current_streak

        ctx = current_context()
        if today is None:
            streak = get_stats(ctx, user_profile_id).current_streak
        else:
            streak = get_current_streak(
                ctx.completion_repo, user_profile_id, today, fetch_days=ctx.config.STREAK_FETCH_DAYS
            )
        click.echo(f"Current streak: {streak} day(s)")

    @app.cli.command("glowtrack-publish")
    @click.argument("routine_id", type=int)
    def glowtrack_publish(routine_id: int) -> None:
        """Publish a routine and schedule its first window of steps."""

        from .services.scheduling import publish_routine

        routine = publish_routine(current_context(), routine_id)
        click.echo(f"Routine {routine.id} is now {routine.status}.")
