"""pi-planning — PI planning cards on a canvas, imported from and exported to tracker CSV."""

from pi_planning.client import PlanningClient
from pi_planning.config import VERSION
from pi_planning.exceptions import CanvasError, FontError, PlanningError
from pi_planning.models import Card, Field
from pi_planning.types import (
    CardEntry,
    CardListResult,
    ExportResult,
    ImportResult,
    InsertResult,
    ReconcileResult,
    TemplateRow,
)

__all__ = [
    "VERSION",
    "PlanningClient",
    "PlanningError",
    "CanvasError",
    "FontError",
    "Card",
    "Field",
    "CardEntry",
    "CardListResult",
    "ExportResult",
    "ImportResult",
    "InsertResult",
    "ReconcileResult",
    "TemplateRow",
]
