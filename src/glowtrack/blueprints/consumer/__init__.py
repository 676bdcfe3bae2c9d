"""Consumer app API blueprint package."""

from __future__ import annotations

from flask import Blueprint

from ..common import require_api_key

bp = Blueprint("consumer", __name__, url_prefix="/api/consumer-app")
bp.before_request(require_api_key)

from . import routes  # noqa: E402,F401 - import routes for registration

__all__ = ["bp"]
