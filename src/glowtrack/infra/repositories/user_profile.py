"""SQLModel implementation of the user profile repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.user_profile import UserProfile
from ..database import SessionFactory
from .base import storage_errors


class SQLModelUserProfileRepository:
    """SQLModel-based user profile repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, user_profile_id: int) -> Optional[UserProfile]:
        """Retrieve a profile by ID."""
        with storage_errors("user_profile.get_by_id"), self.session_factory() as session:
            obj = session.get(UserProfile, user_profile_id)
            if obj:
                session.expunge(obj)
            return obj

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        """Retrieve a profile by email address."""
        with storage_errors("user_profile.get_by_email"), self.session_factory() as session:
            obj = session.exec(
                select(UserProfile).where(UserProfile.email == email.strip().lower())
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def create(self, profile: UserProfile) -> UserProfile:
        """Create a new profile."""
        with storage_errors("user_profile.create"), self.session_factory() as session:
            profile.email = profile.email.strip().lower()
            session.add(profile)
            session.commit()
            session.refresh(profile)
            session.expunge(profile)
            return profile


__all__ = ["SQLModelUserProfileRepository"]
