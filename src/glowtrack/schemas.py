"""Request validation models and response serializers for the JSON API."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .models.completion import RoutineStepCompletion
from .models.routine import RoutineProduct, SkincareRoutine


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class StatsQuery(_Request):
    user_profile_id: int = Field(alias="userProfileId", gt=0)


class UpdateCompletionRequest(_Request):
    """Complete one step, several steps, or every step on a date (exactly one)."""

    user_profile_id: int = Field(alias="userProfileId", gt=0)
    step_id: Optional[int] = Field(default=None, alias="stepId", gt=0)
    step_ids: Optional[list[int]] = Field(default=None, alias="stepIds", min_length=1)
    day: Optional[date] = Field(default=None, alias="date")

    @model_validator(mode="after")
    def _exactly_one_selector(self) -> "UpdateCompletionRequest":
        provided = [v for v in (self.step_id, self.step_ids, self.day) if v is not None]
        if not provided:
            raise ValueError("Either stepId, stepIds, or date must be provided")
        if len(provided) > 1:
            raise ValueError("Cannot provide multiple of: stepId, stepIds, or date")
        return self


class ComplianceQuery(_Request):
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")

    @model_validator(mode="after")
    def _ordered(self) -> "ComplianceQuery":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class PublishRequest(_Request):
    today: Optional[date] = None


class ScheduleProductRequest(_Request):
    today: date


class UpdateProductRequest(_Request):
    """Partial product edit; ``days: null`` clears the weekday list."""

    routine_step: Optional[str] = Field(default=None, alias="routineStep", min_length=1, max_length=80)
    product_name: Optional[str] = Field(default=None, alias="productName", max_length=160)
    instructions: Optional[str] = Field(default=None, max_length=500)
    frequency: Optional[str] = None
    days: Optional[list[str]] = None
    time_of_day: Optional[str] = Field(default=None, alias="timeOfDay")
    order: Optional[int] = None
    today: Optional[date] = None

    @model_validator(mode="after")
    def _has_changes(self) -> "UpdateProductRequest":
        if not self.changes():
            raise ValueError("No product fields to update")
        return self

    def changes(self) -> dict[str, Any]:
        provided = self.model_dump(exclude_unset=True, exclude={"today"})
        return {k: v for k, v in provided.items() if v is not None or k == "days"}


class UpdateRoutineDatesRequest(_Request):
    """``endDate: null`` makes the routine ongoing."""

    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    today: Optional[date] = None

    @model_validator(mode="after")
    def _has_changes(self) -> "UpdateRoutineDatesRequest":
        if not self.changes():
            raise ValueError("Provide startDate and/or endDate")
        return self

    def changes(self) -> dict[str, Optional[date]]:
        return self.model_dump(exclude_unset=True, exclude={"today"})


def completion_to_dict(completion: RoutineStepCompletion) -> dict[str, Any]:
    return {
        "id": completion.id,
        "routineProductId": completion.routine_product_id,
        "userProfileId": completion.user_profile_id,
        "scheduledDate": completion.scheduled_date.isoformat(),
        "scheduledTimeOfDay": completion.scheduled_time_of_day,
        "onTimeDeadline": completion.on_time_deadline.isoformat(),
        "gracePeriodEnd": completion.grace_period_end.isoformat(),
        "status": completion.status,
        "completedAt": completion.completed_at.isoformat() if completion.completed_at else None,
    }


def product_to_dict(product: RoutineProduct) -> dict[str, Any]:
    return {
        "id": product.id,
        "routineId": product.routine_id,
        "routineStep": product.routine_step,
        "productName": product.product_name,
        "instructions": product.instructions,
        "frequency": product.frequency,
        "days": product.days,
        "timeOfDay": product.time_of_day,
        "order": product.order,
    }


def routine_to_dict(routine: SkincareRoutine) -> dict[str, Any]:
    return {
        "id": routine.id,
        "userProfileId": routine.user_profile_id,
        "name": routine.name,
        "startDate": routine.start_date.isoformat(),
        "endDate": routine.end_date.isoformat() if routine.end_date else None,
        "status": routine.status,
    }
