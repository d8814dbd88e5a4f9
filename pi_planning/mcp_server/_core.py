"""Core helpers: client caching, _call dispatcher, response contract."""

from __future__ import annotations

from pi_planning import PlanningClient, PlanningError, config
from pi_planning.config import CONTRACT_SCHEMA_VERSION

_client: PlanningClient | None = None


def _get_client() -> PlanningClient:
    """Return a cached PlanningClient on the configured board, creating one on first use."""
    global _client
    if _client is None:
        _client = PlanningClient(board_path=config.BOARD_PATH)
    return _client


def _reset_client() -> None:
    global _client
    _client = None


def _contract_error(message: str, error_type: str = "error") -> dict:
    """Return a stable MCP error envelope."""
    return {
        "ok": False,
        "schema_version": CONTRACT_SCHEMA_VERSION,
        "error": {"type": error_type, "message": message},
    }


def _finalize_tool_result(result):
    """Add contract metadata (ok/schema_version) to dict results."""
    if not isinstance(result, dict):
        return {"ok": True, "schema_version": CONTRACT_SCHEMA_VERSION, "data": result}
    out = dict(result)
    out.setdefault("schema_version", CONTRACT_SCHEMA_VERSION)
    out.setdefault("ok", True)
    return out


_READ_METHODS = {"list_templates", "list_cards", "export_csv"}
_MUTATING_METHODS = {"insert_template", "import_csv", "reconcile", "duplicate_card"}


def _call(method_name: str, **kwargs):
    """Call a PlanningClient method, converting exceptions to error dicts.

    Mutations are persisted to the board file; canvas notifications raised
    during the call are returned under ``notifications``.
    """
    if method_name not in _READ_METHODS | _MUTATING_METHODS:
        return _contract_error(f"Unknown method: {method_name}", "error")
    try:
        client = _get_client()
    except PlanningError as e:
        return _contract_error(str(e), "error")
    try:
        result = getattr(client, method_name)(**kwargs)
        if method_name in _MUTATING_METHODS:
            client.save_board()
    except PlanningError as e:
        result = _contract_error(str(e), "error")
    except Exception as e:
        result = _contract_error(f"Unexpected error: {e}", "error")
    notices = getattr(client.canvas, "notifications", None)
    if notices and isinstance(result, dict):
        result = {**result, "notifications": list(notices)}
        notices.clear()
    return result
