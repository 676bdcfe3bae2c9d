"""Helpers shared by the SQLModel repositories."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError

from ...errors import StorageUnavailable
from ...logging_config import get_logger

logger = get_logger(__name__)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as StorageUnavailable."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Storage operation failed", extra={"operation": operation}, exc_info=True)
        raise StorageUnavailable(f"{operation} failed: {exc.__class__.__name__}") from exc
