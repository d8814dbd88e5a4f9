"""Board and card formatters: templates, cards, import/export/reconcile reports."""

from pi_planning.formatters._table import _table, _trunc
from pi_planning.models import Card
from pi_planning.serializer import serialize_cards


def format_templates_table(templates):
    """Format PlanningClient.list_templates() output."""
    if not templates:
        return "No templates registered."
    cols = [("Key", 12), ("Title", 12), ("Issue Type", 10), ("Shape", 9), ("Fields", 0)]
    rows = []
    for t in templates:
        labels = [f["label"] for f in t.get("fields", [])]
        rows.append((t["key"], t["title"], t["issue_type"], t["shape"], ", ".join(labels)))
    return _table(cols, rows, f"Total: {len(templates)} templates")


def _field_value(card, label):
    for f in card.get("fields", []):
        if f.get("label") == label:
            return f.get("value", "")
    return ""


def format_cards_table(result):
    """Format cards as a readable table.

    Accepts {"cards": [entries]} from PlanningClient.list_cards().
    """
    cards = result.get("cards", [])
    if not cards:
        return "No cards found."
    cols = [
        ("Kind", 10),
        ("Title", 36),
        ("Key", 10),
        ("Status", 12),
        ("Pts", 4),
        ("Assignee", 14),
        ("Copy", 4),
        ("ID", 0),
    ]
    rows = []
    for card in cards:
        rows.append(
            (
                card.get("kind", ""),
                card.get("title", ""),
                card.get("issue_key") or "-",
                _field_value(card, "Status") or "-",
                _field_value(card, "Story Points") or _field_value(card, "Priority Rank") or "-",
                _field_value(card, "Assignee") or "-",
                "yes" if card.get("is_copy") else "",
                card.get("frame_id", ""),
            )
        )
    return _table(cols, rows, f"Total: {len(cards)} cards")


def format_cards_csv(result):
    """Render listed cards in the tracker import format."""
    cards = [Card.from_dict(c) for c in result.get("cards", [])]
    if not cards:
        return ""
    return serialize_cards(cards)


def format_card_detail(result):
    """Format one inserted or copied card."""
    lines = [f"Frame:  {result.get('frame_id', '')}"]
    if result.get("source_id"):
        lines.append(f"Source: {result['source_id']}")
    if result.get("kind"):
        lines.append(f"Kind:   {result['kind']}")
    if result.get("title"):
        lines.append(f"Title:  {result['title']}")
    return "\n".join(lines)


def format_import_report(report):
    lines = [report.get("message", "")]
    if report.get("no_data"):
        return lines[0]
    lines.append(f"Rows:    {report.get('total', 0)}")
    lines.append(f"Created: {report.get('created', 0)}")
    lines.append(f"Skipped: {report.get('skipped', 0)}")
    reasons = report.get("skip_reasons", [])
    if reasons:
        lines.append("")
        for r in reasons:
            lines.append(f"  row {r['row']}: {_trunc(r['reason'], 70)}")
    return "\n".join(lines)


def format_export_summary(result):
    lines = [f"Exported {result.get('card_count', 0)} cards"]
    if result.get("path"):
        lines.append(f"File: {result['path']}")
    else:
        lines.append(f"Suggested filename: {result.get('filename', '')}")
    return "\n".join(lines)


def format_reconcile_report(report):
    if report.get("skipped_busy"):
        return "Skipped: an import or export is in progress."
    demoted = report.get("demoted", [])
    if not demoted:
        return "No duplicate issue keys found."
    cols = [("Frame", 10), ("Issue Key", 14), ("Original", 0)]
    rows = [(d["frame_id"], d["issue_key"], d["original_id"]) for d in demoted]
    return _table(cols, rows, f"Detached: {len(demoted)} copies")
