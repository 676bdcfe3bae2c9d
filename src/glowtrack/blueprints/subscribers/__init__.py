"""Admin subscriber API blueprint package."""

from __future__ import annotations

from flask import Blueprint

from ..common import require_api_key

bp = Blueprint("subscribers", __name__, url_prefix="/api/subscribers")
bp.before_request(require_api_key)

from . import routes  # noqa: E402,F401

__all__ = ["bp"]
