"""Concrete repository implementations using SQLModel."""

from .completion import SQLModelCompletionRepository
from .routine import SQLModelRoutineProductRepository, SQLModelRoutineRepository
from .user_profile import SQLModelUserProfileRepository

__all__ = [
    "SQLModelCompletionRepository",
    "SQLModelRoutineProductRepository",
    "SQLModelRoutineRepository",
    "SQLModelUserProfileRepository",
]
