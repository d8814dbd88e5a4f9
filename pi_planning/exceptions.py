"""
pi-planning exception hierarchy.

All custom exceptions live here to avoid circular imports.
"""


class PlanningError(Exception):
    """Exit code 1 — validation, parse, unknown template, board file errors."""

    exit_code = 1


class CanvasError(PlanningError):
    """Raised by a canvas implementation for missing frames or board I/O."""


class FontError(CanvasError):
    """A styling resource (font) is not available. Never fatal."""
