"""Blueprint exports."""

from . import consumer, subscribers

__all__ = ["consumer", "subscribers"]
