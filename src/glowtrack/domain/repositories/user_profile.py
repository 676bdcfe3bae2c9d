"""User profile repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.user_profile import UserProfile


class UserProfileRepository(Protocol):
    """Repository for subscriber profiles."""

    def get_by_id(self, user_profile_id: int) -> Optional[UserProfile]:
        """Retrieve a profile by ID."""
        ...

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        """Retrieve a profile by email address."""
        ...

    def create(self, profile: UserProfile) -> UserProfile:
        """Create a new profile."""
        ...
