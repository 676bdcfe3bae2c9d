"""Repository protocol definitions for domain layer."""

from .completion import CompletionRepository
from .routine import RoutineProductRepository, RoutineRepository
from .user_profile import UserProfileRepository

__all__ = [
    "CompletionRepository",
    "RoutineProductRepository",
    "RoutineRepository",
    "UserProfileRepository",
]
