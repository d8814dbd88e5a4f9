"""Output formatting package for pi-planning.

Re-exports all public names so consumers can do:
    from pi_planning.formatters import format_cards_table
"""

from pi_planning.formatters._cards import (
    format_card_detail,
    format_cards_csv,
    format_cards_table,
    format_export_summary,
    format_import_report,
    format_reconcile_report,
    format_templates_table,
)
from pi_planning.formatters._core import output, pretty_print
from pi_planning.formatters._table import _sanitize_str, _table, _trunc

__all__ = [
    "_sanitize_str",
    "_table",
    "_trunc",
    "format_card_detail",
    "format_cards_csv",
    "format_cards_table",
    "format_export_summary",
    "format_import_report",
    "format_reconcile_report",
    "format_templates_table",
    "output",
    "pretty_print",
]
