"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from .config import BaseConfig
from .domain.repositories import (
    CompletionRepository,
    RoutineProductRepository,
    RoutineRepository,
    UserProfileRepository,
)
from .infra.database import SessionFactory, bootstrap_database
from .infra.repositories import (
    SQLModelCompletionRepository,
    SQLModelRoutineProductRepository,
    SQLModelRoutineRepository,
    SQLModelUserProfileRepository,
)
from .models.types import utcnow


@dataclass
class AppContext:
    """Centralized application context with configuration and repositories."""

    config: BaseConfig
    session_factory: Optional[SessionFactory]

    user_profile_repo: UserProfileRepository
    routine_repo: RoutineRepository
    product_repo: RoutineProductRepository
    completion_repo: CompletionRepository

    # Injected clock so services never read the wall clock directly
    now: Callable[[], datetime] = field(default=utcnow)


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create the engine, initialise the schema and wire the repositories."""

    if config is None:
        config = BaseConfig()

    _, session_factory = bootstrap_database(config)

    return AppContext(
        config=config,
        session_factory=session_factory,
        user_profile_repo=SQLModelUserProfileRepository(session_factory),
        routine_repo=SQLModelRoutineRepository(session_factory),
        product_repo=SQLModelRoutineProductRepository(session_factory),
        completion_repo=SQLModelCompletionRepository(session_factory),
    )
