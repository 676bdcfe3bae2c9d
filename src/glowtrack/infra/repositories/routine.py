"""SQLModel implementations of the routine and routine product repositories."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import delete, or_
from sqlmodel import col, select

from ...constants.routine import MISSED, PENDING, ROUTINE_PUBLISHED
from ...errors import NotFound, RoutineStateError
from ...models.completion import RoutineStepCompletion
from ...models.routine import RoutineProduct, SkincareRoutine
from ..database import SessionFactory
from .base import storage_errors
from .completion import add_new_occurrences


class SQLModelRoutineRepository:
    """SQLModel-based routine repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, routine_id: int) -> Optional[SkincareRoutine]:
        """Retrieve a routine by ID."""
        with storage_errors("routine.get_by_id"), self.session_factory() as session:
            obj = session.get(SkincareRoutine, routine_id)
            if obj:
                session.expunge(obj)
            return obj

    def create(self, routine: SkincareRoutine) -> SkincareRoutine:
        """Create a new routine."""
        with storage_errors("routine.create"), self.session_factory() as session:
            session.add(routine)
            session.commit()
            session.refresh(routine)
            session.expunge(routine)
            return routine

    def publish(
        self,
        routine_id: int,
        completions: Sequence[RoutineStepCompletion],
        *,
        published_at: datetime,
    ) -> SkincareRoutine:
        """Mark a routine published and insert its scheduled steps in one transaction.

        Raises RoutineStateError when the stored routine is already published.
        """
        with storage_errors("routine.publish"), self.session_factory() as session:
            routine = session.get(SkincareRoutine, routine_id)
            if routine is None:
                raise NotFound(f"Routine {routine_id} not found")
            if routine.status == ROUTINE_PUBLISHED:
                raise RoutineStateError("Routine is already published")
            routine.status = ROUTINE_PUBLISHED
            routine.updated_at = published_at
            session.add(routine)
            add_new_occurrences(session, completions)
            session.commit()
            session.refresh(routine)
            session.expunge(routine)
            return routine

    def update_dates(
        self,
        routine_id: int,
        changes: Mapping[str, Optional[date]],
        *,
        updated_at: datetime,
        completions: Sequence[RoutineStepCompletion] = (),
    ) -> SkincareRoutine:
        """Change a routine's start and/or end date.

        For a published routine the same transaction deletes pending records
        outside the new date range and adds ``completions`` that are not
        already stored. Completed and missed records are kept.
        """
        with storage_errors("routine.update_dates"), self.session_factory() as session:
            routine = session.get(SkincareRoutine, routine_id)
            if routine is None:
                raise NotFound(f"Routine {routine_id} not found")
            for field, value in changes.items():
                setattr(routine, field, value)
            routine.updated_at = updated_at
            session.add(routine)

            if routine.status == ROUTINE_PUBLISHED:
                scheduled = col(RoutineStepCompletion.scheduled_date)
                outside = scheduled < routine.start_date
                if routine.end_date is not None:
                    outside = or_(outside, scheduled > routine.end_date)
                product_ids = select(RoutineProduct.id).where(RoutineProduct.routine_id == routine_id)
                session.execute(
                    delete(RoutineStepCompletion)
                    .where(col(RoutineStepCompletion.routine_product_id).in_(product_ids))
                    .where(col(RoutineStepCompletion.status) == PENDING)
                    .where(outside),
                    execution_options={"synchronize_session": False},
                )
                add_new_occurrences(session, completions)

            session.commit()
            session.refresh(routine)
            session.expunge(routine)
            return routine


class SQLModelRoutineProductRepository:
    """SQLModel-based routine product repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, product_id: int) -> Optional[RoutineProduct]:
        """Retrieve a product by ID."""
        with storage_errors("routine_product.get_by_id"), self.session_factory() as session:
            obj = session.get(RoutineProduct, product_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_for_routine(self, routine_id: int) -> list[RoutineProduct]:
        """List a routine's products in display order."""
        with storage_errors("routine_product.list_for_routine"), self.session_factory() as session:
            statement = (
                select(RoutineProduct)
                .where(RoutineProduct.routine_id == routine_id)
                .order_by(col(RoutineProduct.order), col(RoutineProduct.id))
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_by_ids(self, product_ids: Sequence[int]) -> list[RoutineProduct]:
        """Retrieve several products at once."""
        if not product_ids:
            return []
        with storage_errors("routine_product.list_by_ids"), self.session_factory() as session:
            statement = select(RoutineProduct).where(col(RoutineProduct.id).in_(list(product_ids)))
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, product: RoutineProduct) -> RoutineProduct:
        """Create a new product."""
        with storage_errors("routine_product.create"), self.session_factory() as session:
            session.add(product)
            session.commit()
            session.refresh(product)
            session.expunge(product)
            return product

    def update(
        self,
        product_id: int,
        changes: Mapping[str, Any],
        *,
        reschedule_from: Optional[date] = None,
        completions: Sequence[RoutineStepCompletion] = (),
    ) -> RoutineProduct:
        """Apply ``changes`` to a product in one transaction.

        With ``reschedule_from`` set, the product's pending and missed records
        on or after that date are replaced by ``completions``.
        """
        with storage_errors("routine_product.update"), self.session_factory() as session:
            product = session.get(RoutineProduct, product_id)
            if product is None:
                raise NotFound(f"Product {product_id} not found")
            for field, value in changes.items():
                setattr(product, field, value)
            session.add(product)

            if reschedule_from is not None:
                session.execute(
                    delete(RoutineStepCompletion)
                    .where(col(RoutineStepCompletion.routine_product_id) == product_id)
                    .where(col(RoutineStepCompletion.scheduled_date) >= reschedule_from)
                    .where(col(RoutineStepCompletion.status).in_([PENDING, MISSED])),
                    execution_options={"synchronize_session": False},
                )
                add_new_occurrences(session, completions)

            session.commit()
            session.refresh(product)
            session.expunge(product)
            return product


__all__ = ["SQLModelRoutineProductRepository", "SQLModelRoutineRepository"]
