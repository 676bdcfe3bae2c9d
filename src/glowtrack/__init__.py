"""GlowTrack skincare routine compliance backend."""

from __future__ import annotations

from .app import create_app
from .config import BaseConfig, DevConfig, TestConfig
from .context import create_app_context

__all__ = ["BaseConfig", "DevConfig", "TestConfig", "create_app", "create_app_context"]
