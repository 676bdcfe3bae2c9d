from datetime import date

from glowtrack.config import DevConfig
from glowtrack.context import create_app_context
from glowtrack.models import RoutineProduct, SkincareRoutine, UserProfile
from glowtrack.services.scheduling import publish_routine


def seed():
    ctx = create_app_context(DevConfig())
    profile = ctx.user_profile_repo.get_by_email("demo@glowtrack.test")
    if profile is None:
        profile = ctx.user_profile_repo.create(
            UserProfile(email="demo@glowtrack.test", first_name="Demo", last_name="Subscriber")
        )

    routine = ctx.routine_repo.create(
        SkincareRoutine(user_profile_id=profile.id, name="Starter routine", start_date=date.today())
    )
    for order, (step, name, frequency, days, time_of_day) in enumerate(
        [
            ("Cleanse", "Gentle Foaming Cleanser", "daily", None, "morning"),
            ("Protect", "SPF 50 Fluid", "daily", None, "morning"),
            ("Cleanse", "Cleansing Balm", "daily", None, "evening"),
            ("Treat", "Retinal 0.1%", "3x per week", ["Monday", "Wednesday", "Friday"], "evening"),
            ("Moisturise", "Barrier Cream", "daily", None, "evening"),
        ]
    ):
        ctx.product_repo.create(
            RoutineProduct(
                routine_id=routine.id,
                user_profile_id=profile.id,
                routine_step=step,
                product_name=name,
                frequency=frequency,
                days=days,
                time_of_day=time_of_day,
                order=order,
            )
        )

    publish_routine(ctx, routine.id)
    print(f"Seeded demo data for user profile {profile.id}.")


if __name__ == "__main__":
    seed()
