"""Routine step completion repository protocol."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Protocol, Sequence

from ...models.completion import RoutineStepCompletion


class CompletionRepository(Protocol):
    """Store of per-occurrence completion records.

    Implementations raise ``StorageUnavailable`` when the backing store fails.
    """

    def get_by_id(self, completion_id: int) -> Optional[RoutineStepCompletion]:
        """Retrieve a completion record by ID."""
        ...

    def list_by_ids(
        self, completion_ids: Sequence[int], *, user_profile_id: int
    ) -> list[RoutineStepCompletion]:
        """Retrieve several of a subscriber's records at once."""
        ...

    def list_for_user_on_date(
        self, user_profile_id: int, scheduled_date: date
    ) -> list[RoutineStepCompletion]:
        """All records scheduled for a subscriber on one date."""
        ...

    def list_for_user_between(
        self, user_profile_id: int, start_date: date, end_date: date
    ) -> list[RoutineStepCompletion]:
        """All records scheduled for a subscriber within [start_date, end_date]."""
        ...

    def create_many(self, completions: Iterable[RoutineStepCompletion]) -> int:
        """Insert pending records, skipping stored occurrences; returns the number inserted."""
        ...

    def record_completion(
        self, completion_id: int, *, completed_at: datetime, status: str
    ) -> Optional[RoutineStepCompletion]:
        """Persist a completion instant and status if the record is still pending."""
        ...

    def mark_overdue(self, now: datetime, *, user_profile_id: Optional[int] = None) -> int:
        """Flip pending records whose grace period ended before ``now`` to missed."""
        ...

    def delete_for_product_from(
        self, routine_product_id: int, from_date: date, statuses: Sequence[str]
    ) -> int:
        """Delete a product's records on/after ``from_date`` having one of ``statuses``."""
        ...
