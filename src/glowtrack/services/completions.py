"""Recording step completions and sweeping expired steps to missed."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..constants.routine import COMPLETED_STATUSES, MISSED
from ..domain.repositories import CompletionRepository
from ..errors import NotFound, StepNotCompletable
from ..logging_config import get_logger
from ..models.completion import RoutineStepCompletion
from .compliance import determine_status

logger = get_logger(__name__)


def _completion_blocker(step: RoutineStepCompletion, now: datetime) -> Optional[str]:
    """Return why ``step`` cannot be completed at ``now``, or None."""

    if step.completed_at is not None or step.status in COMPLETED_STATUSES:
        return "Step already completed"
    if step.status == MISSED:
        return "Step was missed"
    if now > step.grace_period_end:
        return "This step can no longer be completed (grace period expired)"
    return None


def mark_step_complete(
    repo: CompletionRepository,
    step_id: int,
    user_profile_id: int,
    now: datetime,
) -> RoutineStepCompletion:
    """Record that a subscriber completed one scheduled step at ``now``.

    Raises:
        NotFound: the step does not exist or belongs to another subscriber
        StepNotCompletable: already completed, already missed, or past its grace period
    """
    step = repo.get_by_id(step_id)
    if step is None or step.user_profile_id != user_profile_id:
        raise NotFound(f"Step {step_id} not found")

    blocker = _completion_blocker(step, now)
    if blocker:
        raise StepNotCompletable(blocker)

    status = determine_status(now, step.on_time_deadline, step.grace_period_end)
    updated = repo.record_completion(step_id, completed_at=now, status=status)
    if updated is None:
        raise NotFound(f"Step {step_id} not found")
    if updated.completed_at != now:
        # Completed or swept to missed since it was read
        raise StepNotCompletable(_completion_blocker(updated, now) or "Step already completed")

    logger.info(
        "Step completed",
        extra={"step_id": step_id, "user_profile_id": user_profile_id, "status": updated.status},
    )
    return updated


def complete_steps(
    repo: CompletionRepository,
    user_profile_id: int,
    now: datetime,
    *,
    step_ids: Optional[Sequence[int]] = None,
    day: Optional[date] = None,
) -> list[RoutineStepCompletion]:
    """Complete several steps selected by ``step_ids`` or by scheduled ``day``.

    Exactly one selector must be given. Steps that are already completed,
    missed or past their grace period are returned untouched.
    """
    if (step_ids is None) == (day is None):
        raise ValueError("Provide exactly one of step_ids or day")

    if step_ids is not None:
        steps = repo.list_by_ids(step_ids, user_profile_id=user_profile_id)
    else:
        steps = repo.list_for_user_on_date(user_profile_id, day)

    results: list[RoutineStepCompletion] = []
    updated_count = 0
    for step in steps:
        if _completion_blocker(step, now):
            results.append(step)
            continue
        status = determine_status(now, step.on_time_deadline, step.grace_period_end)
        updated = repo.record_completion(step.id, completed_at=now, status=status)
        results.append(updated or step)
        if updated is not None and updated.completed_at == now:
            updated_count += 1

    logger.info(
        "Bulk step completion",
        extra={
            "user_profile_id": user_profile_id,
            "selected": len(steps),
            "updated": updated_count,
        },
    )
    return results


def mark_overdue_as_missed(
    repo: CompletionRepository,
    now: datetime,
    *,
    user_profile_id: Optional[int] = None,
) -> int:
    """Mark pending steps whose grace period ended before ``now`` as missed."""

    count = repo.mark_overdue(now, user_profile_id=user_profile_id)
    if count:
        logger.info(
            "Marked overdue steps as missed",
            extra={"count": count, "user_profile_id": user_profile_id},
        )
    return count


__all__ = ["complete_steps", "mark_overdue_as_missed", "mark_step_complete"]
