"""
Command implementations for pi-planning.
Each cmd_*() function receives an argparse.Namespace and handles one CLI command.

Business logic lives in client.py (PlanningClient). These thin wrappers
handle argparse → client calls, board persistence, and formatter dispatch.
"""

import asyncio
import json
import os
import sys

from pi_planning import config
from pi_planning.client import PlanningClient
from pi_planning.exceptions import PlanningError
from pi_planning.formatters import (
    format_card_detail,
    format_cards_csv,
    format_cards_table,
    format_export_summary,
    format_import_report,
    format_reconcile_report,
    format_templates_table,
    output,
)
from pi_planning.messages import handle_message
from pi_planning.scheduler import ReconcileScheduler

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _client(ns):
    return PlanningClient(board_path=getattr(ns, "board", None) or config.BOARD_PATH)


def _flush_notices(client):
    """Echo canvas notifications to stderr, then clear them."""
    notices = list(client.canvas.notifications)
    client.canvas.notifications.clear()
    if config.RUNTIME_QUIET:
        return
    for text in notices:
        print(text, file=sys.stderr)


def _read_input(path):
    """Read CSV text from *path*, or stdin for "-"."""
    if path == "-":
        text = sys.stdin.read()
    else:
        try:
            with open(path, encoding="utf-8-sig", newline="") as f:
                text = f.read()
        except OSError as e:
            raise PlanningError(f"[ERROR] Cannot read {path}: {e.strerror or e}") from None
    if len(text.encode("utf-8")) > config.MAX_CSV_BYTES:
        raise PlanningError(
            f"[ERROR] CSV input exceeds {config.MAX_CSV_BYTES} bytes. "
            "Split the file or raise PI_PLANNING_MAX_CSV_BYTES."
        )
    return text


# ---------------------------------------------------------------------------
# Read commands
# ---------------------------------------------------------------------------


def cmd_templates(ns):
    output(PlanningClient().list_templates(), format_templates_table, ns.format)


def cmd_cards(ns):
    client = _client(ns)
    result = client.list_cards()
    if ns.kind:
        result["cards"] = [c for c in result["cards"] if c["kind"] == ns.kind]
    output(result, format_cards_table, ns.format, csv_formatter=format_cards_csv)


def cmd_export(ns):
    client = _client(ns)
    try:
        result = client.export_csv()
    finally:
        _flush_notices(client)
    if ns.output == "-" or ns.format == "csv":
        print(result["csv"], end="")
        return
    path = ns.output or result["filename"]
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(result["csv"])
    summary = {k: v for k, v in result.items() if k != "csv"}
    summary["path"] = os.path.abspath(path)
    output(summary, format_export_summary, ns.format)


# ---------------------------------------------------------------------------
# Mutation commands (persist the board afterwards)
# ---------------------------------------------------------------------------


def cmd_insert(ns):
    client = _client(ns)
    try:
        result = client.insert_template(ns.template_type)
        client.save_board()
    finally:
        _flush_notices(client)
    output(result, format_card_detail, ns.format)


def cmd_import(ns):
    text = _read_input(ns.file)
    client = _client(ns)
    try:
        report = client.import_csv(text)
        client.save_board()
    finally:
        _flush_notices(client)
    output(report, format_import_report, ns.format)


def cmd_copy(ns):
    client = _client(ns)
    result = client.duplicate_card(ns.frame_id, ns.dx, ns.dy)
    client.save_board()
    output(result, format_card_detail, ns.format)


def cmd_reconcile(ns):
    client = _client(ns)
    try:
        report = client.reconcile()
        client.save_board()
    finally:
        _flush_notices(client)
    output(report, format_reconcile_report, ns.format)


def cmd_watch(ns):
    """Reconcile the board on an interval until interrupted or --passes is reached."""
    client = _client(ns)
    demoted = []

    def _on_report(report):
        demoted.extend(d.to_dict() for d in report.demoted)
        client.save_board()
        _flush_notices(client)

    scheduler = ReconcileScheduler(
        client.canvas, client.context, interval=ns.interval, on_report=_on_report
    )
    try:
        asyncio.run(scheduler.run(max_passes=ns.passes))
    except KeyboardInterrupt:
        scheduler.stop()
    _flush_notices(client)
    output(
        {"ok": True, "passes": scheduler.passes, "demoted": demoted, "skipped_busy": False},
        format_reconcile_report,
        ns.format,
    )


def cmd_message(ns):
    raw = sys.stdin.read() if ns.json_message == "-" else ns.json_message
    try:
        msg = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PlanningError(f"[ERROR] Invalid JSON message: {e.msg}") from None
    client = _client(ns)
    try:
        replies = handle_message(client, msg)
        client.save_board()
    finally:
        _flush_notices(client)
    output({"ok": True, "replies": replies, "closed": client.closed}, None, "json")
