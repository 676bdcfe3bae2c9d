"""Admin routes for a subscriber's routines and compliance."""

from __future__ import annotations

from flask import jsonify, request

from ...constants.routine import DAYS_OF_WEEK, FREQUENCIES, ROUTINE_STEPS, TIMES_OF_DAY
from ...schemas import (
    ComplianceQuery,
    PublishRequest,
    ScheduleProductRequest,
    UpdateProductRequest,
    UpdateRoutineDatesRequest,
    product_to_dict,
    routine_to_dict,
)
from ...services.completions import mark_overdue_as_missed
from ...services.compliance_report import get_compliance_report
from ...services.scheduling import (
    delete_scheduled_steps_for_product,
    generate_scheduled_steps_for_product,
    publish_routine,
    reschedule_product,
    reschedule_routine,
)
from ..common import current_context, json_body
from . import bp


@bp.get("/routine-options")
def routine_options():
    """Reference values for building a routine."""

    return jsonify(
        {
            "success": True,
            "data": {
                "steps": ROUTINE_STEPS,
                "frequencies": FREQUENCIES,
                "daysOfWeek": DAYS_OF_WEEK,
                "timesOfDay": list(TIMES_OF_DAY),
            },
        }
    )


@bp.get("/<int:user_profile_id>/compliance")
def compliance(user_profile_id: int):
    """Adherence report for a date range, refreshed with a lazy missed sweep."""

    query = ComplianceQuery.model_validate(request.args.to_dict())
    ctx = current_context()
    mark_overdue_as_missed(ctx.completion_repo, ctx.now(), user_profile_id=user_profile_id)
    report = get_compliance_report(ctx, user_profile_id, query.start_date, query.end_date)
    return jsonify({"success": True, "data": report.to_dict()})


@bp.post("/<int:user_profile_id>/sweep-missed")
def sweep_missed(user_profile_id: int):
    """Mark this subscriber's expired pending steps as missed."""

    ctx = current_context()
    count = mark_overdue_as_missed(ctx.completion_repo, ctx.now(), user_profile_id=user_profile_id)
    return jsonify({"success": True, "data": {"count": count}})


@bp.post("/routines/<int:routine_id>/publish")
def publish(routine_id: int):
    """Publish a draft routine and schedule its first window of steps."""

    payload = PublishRequest.model_validate(json_body())
    routine = publish_routine(current_context(), routine_id, payload.today)
    return jsonify({"success": True, "data": routine_to_dict(routine)})


@bp.post("/routines/<int:routine_id>/products/<int:product_id>/scheduled-steps")
def schedule_product(routine_id: int, product_id: int):
    """Schedule a product added to an already published routine."""

    payload = ScheduleProductRequest.model_validate(json_body())
    count = generate_scheduled_steps_for_product(
        current_context(), routine_id, product_id, payload.today
    )
    return jsonify({"success": True, "data": {"count": count}}), 201


@bp.delete("/products/<int:product_id>/scheduled-steps")
def unschedule_product(product_id: int):
    """Remove a product's upcoming pending/missed steps from a given day."""

    payload = ScheduleProductRequest.model_validate(request.args.to_dict())
    count = delete_scheduled_steps_for_product(current_context(), product_id, payload.today)
    return jsonify({"success": True, "data": {"count": count}})


@bp.patch("/routines/<int:routine_id>")
def update_routine_dates(routine_id: int):
    """Move a routine's start/end date; a published routine's steps follow."""

    payload = UpdateRoutineDatesRequest.model_validate(json_body())
    routine = reschedule_routine(current_context(), routine_id, payload.changes(), payload.today)
    return jsonify({"success": True, "data": routine_to_dict(routine)})


@bp.patch("/products/<int:product_id>")
def update_product(product_id: int):
    """Edit a product; schedule changes rebuild its upcoming steps."""

    payload = UpdateProductRequest.model_validate(json_body())
    product = reschedule_product(current_context(), product_id, payload.changes(), payload.today)
    return jsonify({"success": True, "data": product_to_dict(product)})
