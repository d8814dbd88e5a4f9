"""
PlanningClient — public Python API for PI planning boards.

Single entry point for the CLI, the message handler, and the MCP server.
All methods return flat dicts suitable for JSON serialization.
"""

from __future__ import annotations

from typing import Any

from pi_planning import config
from pi_planning._utils import error_message, export_filename, log_event
from pi_planning.canvas import MemoryCanvas
from pi_planning.context import PlanningContext
from pi_planning.exceptions import PlanningError
from pi_planning.extractor import card_from_frame
from pi_planning.mapper import column_value, map_row
from pi_planning.models import ExportResult, ImportReport
from pi_planning.reconciler import reconcile_duplicates
from pi_planning.serializer import EXCLUDED_KINDS, serialize_cards
from pi_planning.tabular import parse_csv
from pi_planning.templates import TEMPLATES, default_card, get_template, kind_of

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_card_frame(frame):
    return kind_of(frame.name) is not None


def _progress_step(total):
    """Rows between progress notices (~10%), or 0 for small imports."""
    if total <= config.PROGRESS_MIN_ROWS:
        return 0
    return max(1, total * config.PROGRESS_STEP_PERCENT // 100)


class GridPlacer:
    """Places imported cards left to right, wrapping every GRID_COLUMNS cards."""

    def __init__(self, origin, columns=None):
        self.origin = origin
        self.columns = columns or config.GRID_COLUMNS
        self.count = 0
        self.row_top = float(origin[1])
        self.row_height = 0.0

    def next_position(self):
        col = self.count % self.columns
        if col == 0 and self.count:
            self.row_top += self.row_height + config.GRID_GAP
            self.row_height = 0.0
        x = float(self.origin[0]) + col * (config.CARD_WIDTH + config.GRID_GAP)
        return (x, self.row_top)

    def record(self, height):
        self.count += 1
        self.row_height = max(self.row_height, float(height))


def _template_row(template):
    return {
        "key": template.key,
        "title": template.title,
        "issue_type": template.issue_type,
        "shape": template.shape,
        "large_number_field": template.large_number_field,
        "has_assignee": template.has_assignee,
        "fields": [{"label": f.label, "value": f.default} for f in template.fields],
    }


class PlanningClient:
    """Import, export, and reconcile planning cards on a canvas."""

    def __init__(self, canvas=None, board_path=None, context=None):
        self.board_path = board_path
        if canvas is None:
            canvas = MemoryCanvas.load(board_path) if board_path else MemoryCanvas()
        self.canvas = canvas
        self.context = context or PlanningContext()
        self.closed = False

    # -----------------------------------------------------------------------
    # Templates
    # -----------------------------------------------------------------------

    def list_templates(self) -> list[dict[str, Any]]:
        return [_template_row(t) for t in TEMPLATES]

    def insert_template(self, template_type) -> dict[str, Any]:
        """Drop a default card of *template_type* at the viewport center."""
        if template_type not in config.VALID_TEMPLATE_TYPES:
            raise PlanningError(
                f"[ERROR] Unknown template type '{template_type}'. "
                f"Valid: {', '.join(sorted(config.VALID_TEMPLATE_TYPES))}"
            )
        self.context.ensure_fonts(self.canvas)
        card = default_card(template_type)
        frame = self.canvas.create_card(card, self.canvas.viewport_center())
        self.canvas.scroll_to([frame])
        self.canvas.notify_user(f"✅ {get_template(template_type).title} template inserted!")
        return {"ok": True, "frame_id": frame.id, "kind": card.kind, "title": card.title}

    # -----------------------------------------------------------------------
    # Import
    # -----------------------------------------------------------------------

    def import_csv(self, csv_text) -> dict[str, Any]:
        """Create one card per usable CSV row.

        Rows with a blank Summary, rows that do not map to a card, and cards
        whose creation fails are counted as skipped; the batch always runs to
        the end and reports ``created``/``skipped`` counts.
        """
        report = ImportReport()
        rows = parse_csv(csv_text) if csv_text and csv_text.strip() else []
        if not rows:
            report.no_data = True
            self.canvas.notify_user("❌ No data found in CSV")
            return report.to_dict()

        report.total = len(rows)
        frames = []
        with self.context.busy_section("import"):
            self.context.ensure_fonts(self.canvas)
            placer = GridPlacer(self.canvas.viewport_center())
            step = _progress_step(len(rows))
            for index, row in enumerate(rows, 1):
                frame = self._import_row(index, row, placer, report)
                if frame is not None:
                    frames.append(frame)
                if step and index % step == 0 and index < len(rows):
                    pct = index * 100 // len(rows)
                    self.canvas.notify_user(f"Importing... {index}/{len(rows)} rows ({pct}%)")

        if frames:
            self.canvas.scroll_to(frames)
        self.canvas.notify_user(f"✅ {report.summary()}")
        log_event("IMPORT", event="done", created=report.created, skipped=report.skipped)
        return report.to_dict()

    def _import_row(self, index, row, placer, report):
        if not column_value(row, "Summary"):
            report.skip(index, "blank Summary")
            log_event("IMPORT", event="row_skipped", row=index, reason="blank Summary")
            return None
        card = map_row(row)
        if card is None:
            report.skip(index, "unclassified row")
            log_event("IMPORT", event="row_skipped", row=index, reason="unclassified row")
            return None
        try:
            frame = self.canvas.create_card(card, placer.next_position())
            if card.issue_key:
                self.canvas.set_frame_metadata(frame, config.META_ISSUE_KEY, card.issue_key)
        except Exception as e:  # one bad card never aborts the batch
            reason = f"card creation failed: {error_message(e)}"
            report.skip(index, reason)
            log_event("IMPORT", event="row_skipped", row=index, reason=reason)
            return None
        placer.record(frame.height)
        report.created += 1
        report.frame_ids.append(frame.id)
        return frame

    # -----------------------------------------------------------------------
    # Export
    # -----------------------------------------------------------------------

    def _read_cards(self):
        frames = sorted(self.canvas.enumerate_frames(_is_card_frame), key=lambda f: f.position)
        out = []
        for frame in frames:
            card = card_from_frame(self.canvas, frame)
            if card is not None:
                out.append((frame, card))
        return out

    def export_csv(self) -> dict[str, Any]:
        """Serialize every exportable card on the canvas to tracker CSV."""
        with self.context.busy_section("export"):
            cards = [card for _, card in self._read_cards()]
        exportable = [c for c in cards if c.kind not in EXCLUDED_KINDS]
        if not exportable:
            raise PlanningError("[ERROR] No cards found to export.")
        result = ExportResult(
            csv=serialize_cards(exportable),
            filename=export_filename(),
            card_count=len(exportable),
        )
        self.canvas.notify_user(f"✅ Exported {result.card_count} cards to {result.filename}")
        log_event("EXPORT", event="done", cards=result.card_count, filename=result.filename)
        return {"ok": True, **result.to_dict()}

    # -----------------------------------------------------------------------
    # Board inspection and duplicates
    # -----------------------------------------------------------------------

    def list_cards(self) -> dict[str, Any]:
        entries = []
        for frame, card in self._read_cards():
            entry = {"frame_id": frame.id, **card.to_dict(), "x": frame.x, "y": frame.y}
            entry["is_copy"] = (
                self.canvas.get_frame_metadata(frame, config.META_IS_COPY).lower() == "true"
            )
            entries.append(entry)
        return {"cards": entries}

    def reconcile(self) -> dict[str, Any]:
        return reconcile_duplicates(self.canvas, self.context).to_dict()

    def duplicate_card(self, frame_id, dx=40.0, dy=40.0) -> dict[str, Any]:
        """Copy a frame as the host would on paste (board canvases only)."""
        duplicate = getattr(self.canvas, "duplicate_frame", None)
        if duplicate is None:
            raise PlanningError("[ERROR] This canvas does not support copying frames.")
        frame = duplicate(frame_id, dx, dy)
        return {"ok": True, "frame_id": frame.id, "source_id": frame_id}

    def save_board(self):
        """Persist the board when the client was opened on a board file."""
        if self.board_path and hasattr(self.canvas, "save"):
            self.canvas.save(self.board_path)
