"""Board tools: templates, CSV import/export, card listing, duplicates (7 tools)."""

from __future__ import annotations

from typing import Literal

from pi_planning import PlanningError
from pi_planning.mcp_server._core import _call, _contract_error, _finalize_tool_result
from pi_planning.mcp_server._security import _sanitize_card, _validate_input

TemplateType = Literal[
    "theme", "milestone", "userStory", "epic", "initiative", "task", "spike", "test"
]


def list_templates() -> dict:
    """List card templates with their issue type, shape, and default fields.

    Returns:
        Dict with templates (list of {key, title, issue_type, shape, fields}).
    """
    result = _call("list_templates")
    if isinstance(result, list):
        result = {"templates": result}
    return _finalize_tool_result(result)


def insert_template(template_type: TemplateType) -> dict:
    """Insert a card with the template's default values at the viewport center.

    Returns:
        Dict with frame_id, kind, title.
    """
    try:
        template_type = _validate_input(template_type, "template_type")
    except PlanningError as e:
        return _contract_error(str(e))
    return _finalize_tool_result(_call("insert_template", template_type=template_type))


def import_csv(csv_text: str) -> dict:
    """Create one card per row of a tracker CSV export.

    Args:
        csv_text: Full CSV text including the header row.

    Returns:
        Dict with total, created, skipped, skip_reasons, frame_ids, message.
    """
    try:
        csv_text = _validate_input(csv_text, "csv_text")
    except PlanningError as e:
        return _contract_error(str(e))
    return _finalize_tool_result(_call("import_csv", csv_text=csv_text))


def export_csv() -> dict:
    """Export every non-milestone card on the board as tracker CSV.

    Returns:
        Dict with csv (text), filename (suggested), card_count.
    """
    return _finalize_tool_result(_call("export_csv"))


def list_cards(kind: TemplateType | None = None) -> dict:
    """List cards on the board in reading order (top to bottom, left to right).

    Returns:
        Dict with cards (list of {frame_id, kind, title, fields, issue_key, is_copy}).
    """
    result = _call("list_cards")
    if isinstance(result, dict) and result.get("ok") is not False:
        cards = result.get("cards", [])
        if kind:
            cards = [c for c in cards if c.get("kind") == kind]
        result = {**result, "cards": [_sanitize_card(c) for c in cards]}
    return _finalize_tool_result(result)


def reconcile_duplicates() -> dict:
    """Detach copied cards that share an issue key with an original.

    Returns:
        Dict with demoted (list of {frame_id, issue_key, original_id}), skipped_busy.
    """
    return _finalize_tool_result(_call("reconcile"))


def copy_card(frame_id: str, dx: float = 40.0, dy: float = 40.0) -> dict:
    """Duplicate a card frame, metadata included, offset by (dx, dy).

    Run reconcile_duplicates afterwards to detach the copy from its issue key.
    """
    try:
        frame_id = _validate_input(frame_id, "frame_id")
    except PlanningError as e:
        return _contract_error(str(e))
    return _finalize_tool_result(_call("duplicate_card", frame_id=frame_id, dx=dx, dy=dy))


def register(mcp):
    """Register all board tools with the FastMCP instance."""
    mcp.tool()(list_templates)
    mcp.tool()(insert_template)
    mcp.tool()(import_csv)
    mcp.tool()(export_csv)
    mcp.tool()(list_cards)
    mcp.tool()(reconcile_duplicates)
    mcp.tool()(copy_card)
