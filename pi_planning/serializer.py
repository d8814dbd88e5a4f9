"""
Cards → tracker CSV.

Column order is deterministic: Summary, Issue key (only when some card has
one), Issue Type, the known tracker columns that are present, then any other
present columns alphabetically.
"""

import csv
import io

from pi_planning.models import Field
from pi_planning.templates import EXPORT_PRIORITY_COLUMNS, column_for, get_template

EXCLUDED_KINDS = {"milestone"}
LEADING_COLUMNS = ("Summary", "Issue key", "Issue Type")


def collapse_field_group(card):
    """Return the card's fields with any field group folded into Description.

    When at least one group label is on the card, the group is joined with
    the same sentence format used on import (missing parts fall back to the
    template default) and replaces any Description already present.
    """
    template = get_template(card.kind)
    fields = list(card.fields)
    group = template.field_group
    if not group or not any(f.label in group for f in fields):
        return fields
    values = [card.get(label, template.default_for(label)) for label in group]
    description = Field("Description", template.join_group(values))
    out = []
    for f in fields:
        if f.label in group:
            if f.label == group[0]:
                out.append(description)
            continue
        if f.label == "Description":
            continue
        out.append(f)
    return out


def _skip_label(label):
    return not label or not label.strip() or label.strip() == "?"


def card_to_row(card):
    """Flatten one card into a {column: value} dict."""
    template = get_template(card.kind)
    row = {
        "Summary": card.title,
        "Issue key": card.issue_key or "",
        "Issue Type": template.issue_type,
    }
    for f in collapse_field_group(card):
        if _skip_label(f.label):
            continue
        column = column_for(f.label.strip())
        if column in row:
            continue
        row[column] = f.value
    return row


def export_columns(rows, include_issue_key):
    present = set()
    for row in rows:
        present.update(row)
    columns = ["Summary"]
    if include_issue_key:
        columns.append("Issue key")
    columns.append("Issue Type")
    columns.extend(c for c in EXPORT_PRIORITY_COLUMNS if c in present)
    known = set(LEADING_COLUMNS) | set(EXPORT_PRIORITY_COLUMNS)
    columns.extend(sorted(c for c in present if c not in known))
    return columns


def serialize_cards(cards):
    """Render *cards* as CSV text with every value quoted."""
    exportable = [c for c in cards if c.kind not in EXCLUDED_KINDS]
    rows = [card_to_row(c) for c in exportable]
    include_key = any(c.issue_key for c in exportable)
    columns = export_columns(rows, include_key)

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([row.get(c, "") for c in columns])
    return buf.getvalue()
