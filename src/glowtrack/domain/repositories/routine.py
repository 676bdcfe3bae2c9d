"""Routine and routine product repository protocols."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ...models.completion import RoutineStepCompletion
from ...models.routine import RoutineProduct, SkincareRoutine


class RoutineRepository(Protocol):
    """Repository for skincare routines."""

    def get_by_id(self, routine_id: int) -> Optional[SkincareRoutine]:
        """Retrieve a routine by ID."""
        ...

    def create(self, routine: SkincareRoutine) -> SkincareRoutine:
        """Create a new routine."""
        ...

    def publish(
        self,
        routine_id: int,
        completions: Sequence[RoutineStepCompletion],
        *,
        published_at: datetime,
    ) -> SkincareRoutine:
        """Mark a draft routine published and insert its scheduled steps atomically."""
        ...

    def update_dates(
        self,
        routine_id: int,
        changes: Mapping[str, Optional[date]],
        *,
        updated_at: datetime,
        completions: Sequence[RoutineStepCompletion] = (),
    ) -> SkincareRoutine:
        """Change a routine's dates and, when published, its pending records atomically."""
        ...


class RoutineProductRepository(Protocol):
    """Repository for products scheduled within routines."""

    def get_by_id(self, product_id: int) -> Optional[RoutineProduct]:
        """Retrieve a product by ID."""
        ...

    def list_for_routine(self, routine_id: int) -> list[RoutineProduct]:
        """List a routine's products in display order."""
        ...

    def list_by_ids(self, product_ids: Sequence[int]) -> list[RoutineProduct]:
        """Retrieve several products at once."""
        ...

    def create(self, product: RoutineProduct) -> RoutineProduct:
        """Create a new product."""
        ...

    def update(
        self,
        product_id: int,
        changes: Mapping[str, Any],
        *,
        reschedule_from: Optional[date] = None,
        completions: Sequence[RoutineStepCompletion] = (),
    ) -> RoutineProduct:
        """Apply product changes, optionally replacing upcoming open records atomically."""
        ...
