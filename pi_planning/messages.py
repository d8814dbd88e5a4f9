"""
UI message protocol.

Inbound:  {"type": "insert-template", "templateType"}, {"type": "import-csv", "csvText"},
          {"type": "export-csv"}, {"type": "close"}
Outbound: {"type": "export-csv", "csv", "filename"}

``handle_message`` is the top-level handler: every error raised while serving
a message is caught here and turned into a user notification.
"""

from pi_planning._utils import error_message, log_event
from pi_planning.exceptions import PlanningError

_ACTION_LABELS = {
    "insert-template": "inserting template",
    "import-csv": "importing CSV",
    "export-csv": "exporting CSV",
}


def _insert_template(client, msg):
    template_type = msg.get("templateType")
    if not template_type:
        raise PlanningError("No template type specified")
    client.insert_template(template_type)
    return []


def _import_csv(client, msg):
    client.import_csv(msg.get("csvText") or "")
    return []


def _export_csv(client, msg):
    result = client.export_csv()
    return [{"type": "export-csv", "csv": result["csv"], "filename": result["filename"]}]


def _close(client, msg):
    client.closed = True
    return []


HANDLERS = {
    "insert-template": _insert_template,
    "import-csv": _import_csv,
    "export-csv": _export_csv,
    "close": _close,
}


def handle_message(client, msg):
    """Serve one inbound message. Returns the list of outbound messages."""
    if not isinstance(msg, dict):
        client.canvas.notify_user(f"❌ Ignoring malformed message: {msg!r}")
        return []
    msg_type = msg.get("type")
    handler = HANDLERS.get(msg_type)
    if handler is None:
        client.canvas.notify_user(f"❌ Unknown message type: {msg_type!r}")
        return []
    try:
        return handler(client, msg)
    except Exception as e:
        action = _ACTION_LABELS.get(msg_type, msg_type)
        text = error_message(e).removeprefix("[ERROR] ")
        log_event("MESSAGE", event="failed", type=msg_type, error=text)
        client.canvas.notify_user(f"❌ Error {action}: {text}")
        return []
