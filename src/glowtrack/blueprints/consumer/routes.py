"""Consumer app routes: dashboard stats and step completion."""

from __future__ import annotations

from flask import jsonify, request

from ...schemas import StatsQuery, UpdateCompletionRequest, completion_to_dict
from ...services.completions import complete_steps, mark_step_complete
from ...services.stats import get_stats
from ..common import current_context, json_body
from . import bp


@bp.get("/stats")
def stats():
    """Today's progress, current streak and weekly compliance for a subscriber."""

    query = StatsQuery.model_validate(request.args.to_dict())
    ctx = current_context()
    summary = get_stats(ctx, query.user_profile_id)
    return jsonify({"success": True, "data": summary.to_dict()})


@bp.post("/dashboard/routine-steps")
def update_completion():
    """Mark one step, several steps, or a whole day's steps complete."""

    payload = UpdateCompletionRequest.model_validate(json_body())
    ctx = current_context()
    now = ctx.now()

    if payload.step_id is not None:
        step = mark_step_complete(ctx.completion_repo, payload.step_id, payload.user_profile_id, now)
        return jsonify({"success": True, "data": completion_to_dict(step)})

    steps = complete_steps(
        ctx.completion_repo,
        payload.user_profile_id,
        now,
        step_ids=payload.step_ids,
        day=payload.day,
    )
    return jsonify({"success": True, "data": [completion_to_dict(step) for step in steps]})
