"""
Process-lifetime state shared by import, export, and reconciliation.

One PlanningContext is created per client and passed explicitly; nothing
here is module-global.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field

from pi_planning._utils import error_message, log_event
from pi_planning.exceptions import CanvasError, PlanningError


@dataclass
class PlanningContext:
    fonts_loaded: bool = False
    # Frame ids already demoted to local copies (notify once per frame)
    seen_copies: set[str] = field(default_factory=set)
    busy: bool = False
    busy_operation: str | None = None

    def ensure_fonts(self, canvas):
        """Load fonts once per process. Failure degrades to default styling."""
        if self.fonts_loaded:
            return True
        try:
            canvas.load_fonts()
        except CanvasError as e:
            log_event("FONT", event="load_failed", error=error_message(e))
            canvas.notify_user(f"Fonts unavailable, using default styling: {error_message(e)}")
            return False
        self.fonts_loaded = True
        return True

    @contextmanager
    def busy_section(self, operation):
        """Mark an import/export as in flight so reconciliation stays out."""
        if self.busy:
            raise PlanningError(
                f"[ERROR] Cannot start {operation}: {self.busy_operation} is still running."
            )
        self.busy = True
        self.busy_operation = operation
        try:
            yield self
        finally:
            self.busy = False
            self.busy_operation = None
