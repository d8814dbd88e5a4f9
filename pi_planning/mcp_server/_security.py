"""Security: injection detection, output tagging, input validation."""

from __future__ import annotations

import re

from pi_planning import PlanningError, config

_INJECTION_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"^(system|assistant|user)\s*:", re.IGNORECASE | re.MULTILINE),
        "role label",
    ),
    (
        re.compile(r"<\s*/?\s*(system|instruction|prompt|tool_call)", re.IGNORECASE),
        "XML-like directive tag",
    ),
    (
        re.compile(
            r"ignore\s+(all\s+)?(previous|prior|above)\s+(instructions|prompts|rules)",
            re.IGNORECASE,
        ),
        "override directive",
    ),
]

# CSV text keeps tabs and newlines; every other control character goes.
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_INPUT_LIMITS = {
    "template_type": 50,
    "frame_id": 100,
}


def _check_injection(text: str) -> list[str]:
    """Return descriptions of the injection patterns found in *text*."""
    if len(text) < 10:
        return []
    return [desc for pattern, desc in _INJECTION_PATTERNS if pattern.search(text)]


def _tag_user_text(text: str | None) -> str | None:
    """Wrap user-authored text in [USER_DATA] boundary markers."""
    if text is None:
        return None
    return f"[USER_DATA]{text}[/USER_DATA]"


def _sanitize_card(card: dict) -> dict:
    """Tag the title and field values of a listed card; flag suspicious text."""
    out = dict(card)
    warnings: list[str] = []
    if isinstance(out.get("title"), str):
        warnings.extend(f"title: {d}" for d in _check_injection(out["title"]))
        out["title"] = _tag_user_text(out["title"])
    fields = []
    for f in out.get("fields", []):
        value = f.get("value", "")
        warnings.extend(f"{f.get('label')}: {d}" for d in _check_injection(value))
        fields.append({"label": f.get("label"), "value": _tag_user_text(value)})
    out["fields"] = fields
    if warnings:
        out["_safety_warnings"] = warnings
    return out


def _validate_input(text: str, field: str) -> str:
    """Strip control characters and enforce length limits.

    Raises PlanningError if text is not a string or exceeds the field limit.
    """
    if not isinstance(text, str):
        raise PlanningError(f"[ERROR] {field} must be a string")
    cleaned = _CONTROL_RE.sub("", text)
    limit = _INPUT_LIMITS.get(field, config.MAX_CSV_BYTES)
    if len(cleaned) > limit:
        raise PlanningError(f"[ERROR] {field} exceeds maximum length of {limit} characters")
    return cleaned
