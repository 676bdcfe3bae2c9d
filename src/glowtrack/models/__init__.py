"""SQLModel table exports."""

from .completion import RoutineStepCompletion
from .routine import RoutineProduct, SkincareRoutine
from .user_profile import UserProfile

__all__ = [
    "RoutineProduct",
    "RoutineStepCompletion",
    "SkincareRoutine",
    "UserProfile",
]
