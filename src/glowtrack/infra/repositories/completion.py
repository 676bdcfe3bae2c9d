"""SQLModel implementation of the completion record store."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from sqlalchemy import delete, update
from sqlmodel import Session, col, select

from ...constants.routine import MISSED, PENDING
from ...logging_config import get_logger
from ...models.completion import RoutineStepCompletion
from ..database import SessionFactory
from .base import storage_errors

logger = get_logger(__name__)


def add_new_occurrences(session: Session, completions: Iterable[RoutineStepCompletion]) -> int:
    """Add records whose (product, date, time of day) is not stored yet.

    Duplicates within ``completions`` collapse to the first. Returns the number added.
    """
    rows = list(completions)
    if not rows:
        return 0

    product_ids = list({r.routine_product_id for r in rows})
    statement = (
        select(
            RoutineStepCompletion.routine_product_id,
            RoutineStepCompletion.scheduled_date,
            RoutineStepCompletion.scheduled_time_of_day,
        )
        .where(col(RoutineStepCompletion.routine_product_id).in_(product_ids))
        .where(RoutineStepCompletion.scheduled_date >= min(r.scheduled_date for r in rows))
        .where(RoutineStepCompletion.scheduled_date <= max(r.scheduled_date for r in rows))
    )
    taken = {tuple(key) for key in session.exec(statement).all()}

    fresh: list[RoutineStepCompletion] = []
    for row in rows:
        key = (row.routine_product_id, row.scheduled_date, row.scheduled_time_of_day)
        if key in taken:
            continue
        taken.add(key)
        fresh.append(row)
    session.add_all(fresh)
    return len(fresh)


class SQLModelCompletionRepository:
    """SQLModel-based completion repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, completion_id: int) -> Optional[RoutineStepCompletion]:
        """Retrieve a completion record by ID."""
        with storage_errors("completion.get_by_id"), self.session_factory() as session:
            obj = session.get(RoutineStepCompletion, completion_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_by_ids(
        self, completion_ids: Sequence[int], *, user_profile_id: int
    ) -> list[RoutineStepCompletion]:
        """Retrieve several of a subscriber's records at once."""
        if not completion_ids:
            return []
        with storage_errors("completion.list_by_ids"), self.session_factory() as session:
            statement = (
                select(RoutineStepCompletion)
                .where(RoutineStepCompletion.user_profile_id == user_profile_id)
                .where(col(RoutineStepCompletion.id).in_(list(completion_ids)))
                .order_by(col(RoutineStepCompletion.id))
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_for_user_on_date(
        self, user_profile_id: int, scheduled_date: date
    ) -> list[RoutineStepCompletion]:
        """All records scheduled for a subscriber on one date."""
        return self.list_for_user_between(user_profile_id, scheduled_date, scheduled_date)

    def list_for_user_between(
        self, user_profile_id: int, start_date: date, end_date: date
    ) -> list[RoutineStepCompletion]:
        """All records scheduled for a subscriber within [start_date, end_date]."""
        with storage_errors("completion.list_for_user_between"), self.session_factory() as session:
            statement = (
                select(RoutineStepCompletion)
                .where(RoutineStepCompletion.user_profile_id == user_profile_id)
                .where(RoutineStepCompletion.scheduled_date >= start_date)
                .where(RoutineStepCompletion.scheduled_date <= end_date)
                .order_by(
                    col(RoutineStepCompletion.scheduled_date).desc(),
                    col(RoutineStepCompletion.id),
                )
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows


    def create_many(self, completions: Iterable[RoutineStepCompletion]) -> int:
        """Insert pending records, skipping occurrences already stored.

        Returns the number inserted.
        """
        rows = list(completions)
        if not rows:
            return 0
        with storage_errors("completion.create_many"), self.session_factory() as session:
            count = add_new_occurrences(session, rows)
            session.commit()
            return count

    def record_completion(
        self, completion_id: int, *, completed_at: datetime, status: str
    ) -> Optional[RoutineStepCompletion]:
        """Persist a completion instant and its computed status.

        The write is a single conditional UPDATE, so only a record that is still
        pending is changed; anything else is returned as stored.
        """
        with storage_errors("completion.record_completion"), self.session_factory() as session:
            result = session.execute(
                update(RoutineStepCompletion)
                .where(col(RoutineStepCompletion.id) == completion_id)
                .where(col(RoutineStepCompletion.status) == PENDING)
                .where(col(RoutineStepCompletion.completed_at).is_(None))
                .values(completed_at=completed_at, status=status, updated_at=completed_at),
                execution_options={"synchronize_session": False},
            )
            obj = session.get(RoutineStepCompletion, completion_id)
            session.commit()
            if obj is None:
                return None
            if not result.rowcount:
                logger.info(
                    "Completion not recorded, step is no longer pending",
                    extra={"step_id": completion_id, "status": obj.status},
                )
            session.expunge(obj)
            return obj

    def mark_overdue(self, now: datetime, *, user_profile_id: Optional[int] = None) -> int:
        """Flip pending records whose grace period ended before ``now`` to missed."""
        with storage_errors("completion.mark_overdue"), self.session_factory() as session:
            statement = (
                update(RoutineStepCompletion)
                .where(col(RoutineStepCompletion.status) == PENDING)
                .where(col(RoutineStepCompletion.completed_at).is_(None))
                .where(col(RoutineStepCompletion.grace_period_end) < now)
            )
            if user_profile_id is not None:
                statement = statement.where(
                    col(RoutineStepCompletion.user_profile_id) == user_profile_id
                )
            result = session.execute(
                statement.values(status=MISSED, updated_at=now),
                execution_options={"synchronize_session": False},
            )
            session.commit()
            return result.rowcount or 0

    def delete_for_product_from(
        self, routine_product_id: int, from_date: date, statuses: Sequence[str]
    ) -> int:
        """Delete a product's records on/after ``from_date`` having one of ``statuses``."""
        with storage_errors("completion.delete_for_product_from"), self.session_factory() as session:
            statement = (
                delete(RoutineStepCompletion)
                .where(col(RoutineStepCompletion.routine_product_id) == routine_product_id)
                .where(col(RoutineStepCompletion.scheduled_date) >= from_date)
                .where(col(RoutineStepCompletion.status).in_(list(statuses)))
            )
            result = session.execute(statement, execution_options={"synchronize_session": False})
            session.commit()
            return result.rowcount or 0


__all__ = ["SQLModelCompletionRepository"]
