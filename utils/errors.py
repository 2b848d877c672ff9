"""utils/errors.py - Exception types for board construction.

Only misconfiguration raises.  Rejected placements are reported as
``engine.capture.MoveOutcome`` values, and numerical drift is corrected by
renormalisation rather than surfaced as an error.
"""

from __future__ import annotations
from typing import Any

__all__ = [
    "HyperGoError",
    "ConfigurationError",
]


class HyperGoError(Exception):
    """Base exception for the engine.

    Attributes:
        code: Machine-readable error code
        message: Human-readable description
        context: Extra values for debugging
    """
    code: str = "HYPERGO_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"


class ConfigurationError(HyperGoError, ValueError):
    """Board or geometry parameters that cannot produce a consistent tiling."""
    code: str = "CONFIGURATION_ERROR"
