"""Helpers shared by the JSON API blueprints."""

from __future__ import annotations

import hmac
from typing import Any, Optional

from flask import current_app, jsonify, request

from ..context import AppContext

EXTENSION_KEY = "glowtrack"


def current_context() -> AppContext:
    """Return the AppContext attached to the running Flask app."""
    return current_app.extensions[EXTENSION_KEY]


def require_api_key() -> Optional[Any]:
    """Reject the request unless it carries the configured API key.

    No key configured means the check is disabled (local development).
    """
    ctx = current_context()
    expected = ctx.config.API_KEY
    if not expected:
        return None
    supplied = request.headers.get(ctx.config.API_KEY_HEADER, "")
    if not hmac.compare_digest(supplied.encode(), expected.encode()):
        return error_response("Unauthorized", 401)
    return None


def error_response(message: str, status: int, **extra: Any):
    payload = {"success": False, "error": message}
    payload.update(extra)
    return jsonify(payload), status


def json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}
