"""Service module exports."""

from . import (
    completions,
    compliance,
    compliance_report,
    scheduling,
    stats,
    streaks,
)

__all__ = [
    "completions",
    "compliance",
    "compliance_report",
    "scheduling",
    "stats",
    "streaks",
]
