"""Flask application factory."""

from __future__ import annotations

from typing import Optional

from flask import Flask
from pydantic import ValidationError

from . import cli
from .blueprints import consumer, subscribers
from .blueprints.common import EXTENSION_KEY, error_response
from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import (
    InvalidScheduleValue,
    InvalidTimezone,
    NotFound,
    RoutineStateError,
    StepNotCompletable,
    StorageUnavailable,
)
from .logging_config import get_logger, setup_logging
from .scheduler import create_scheduler

logger = get_logger(__name__)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation_error(exc: ValidationError):
        details = exc.errors(include_url=False, include_context=False, include_input=False)
        return error_response("Invalid request", 400, details=details)

    @app.errorhandler(NotFound)
    def _not_found(exc: NotFound):
        return error_response(str(exc), 404)

    @app.errorhandler(StepNotCompletable)
    @app.errorhandler(RoutineStateError)
    def _conflict(exc: Exception):
        return error_response(str(exc), 409)

    @app.errorhandler(InvalidTimezone)
    @app.errorhandler(InvalidScheduleValue)
    def _bad_schedule(exc: Exception):
        logger.error("Invalid schedule data", extra={"error": str(exc)})
        return error_response(str(exc), 422)

    @app.errorhandler(StorageUnavailable)
    def _storage_unavailable(exc: StorageUnavailable):
        return error_response("Storage unavailable", 503)


def create_app(
    config: Optional[BaseConfig] = None,
    *,
    ctx: Optional[AppContext] = None,
    start_scheduler: bool = False,
) -> Flask:
    """Build the Flask app around an AppContext.

    Args:
        config: Configuration; a fresh BaseConfig when omitted
        ctx: Pre-built context (tests inject fakes or a temp database)
        start_scheduler: Start the background missed-step sweep
    """
    config = config or (ctx.config if ctx is not None else BaseConfig())
    setup_logging(config)
    ctx = ctx or create_app_context(config)

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=config.SECRET_KEY,
        TESTING=getattr(config, "TESTING", False),
        GLOWTRACK_CONFIG=config,
    )
    app.extensions[EXTENSION_KEY] = ctx

    app.register_blueprint(consumer.bp)
    app.register_blueprint(subscribers.bp)
    _register_error_handlers(app)
    cli.init_app(app)

    if start_scheduler:
        app.extensions["glowtrack_scheduler"] = create_scheduler(ctx, auto_start=True)

    logger.info("Application created", extra={"dev_mode": config.DEV_MODE})
    return app
