"""
Shared pure-utility functions for pi-planning.

These helpers have no business logic. The only side effect is stderr output
from the logging helpers, gated by config flags.
"""

import json
import re
import sys
from datetime import date

from pi_planning import config

# Digits, or the literal placeholders "?" and "#"
_NUMBERISH_RE = re.compile(r"^(\d+|\?|#)$")


def error_message(err):
    """Extract displayable message text from any exception."""
    msg = str(err).strip() if err is not None else ""
    if not msg:
        msg = type(err).__name__ if err is not None else "Unknown error"
    return msg


def log_event(tag, **fields):
    """Emit a structured log line to stderr when logging is enabled."""
    if not config.LOG_ENABLED:
        return
    print(f"[{tag}] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


def warn(message):
    """Print a warning to stderr unless --quiet."""
    if config.RUNTIME_QUIET:
        return
    print(f"[WARN] {message}", file=sys.stderr)


def is_numberish(text):
    """True for purely-digit text or the '?' / '#' placeholders."""
    if text is None:
        return False
    return bool(_NUMBERISH_RE.match(text.strip()))


def is_blank(value):
    return value is None or not str(value).strip()


def export_filename(today=None):
    """Return pi-planning-export-<ISO-date>.csv for *today* (default: now)."""
    day = today or date.today()
    return f"{config.EXPORT_FILENAME_PREFIX}{day.isoformat()}.csv"


def issue_link(issue_key):
    """Build a tracker deep link for an issue key, or None."""
    if is_blank(issue_key):
        return None
    return f"{config.TRACKER_BASE_URL.rstrip('/')}/browse/{issue_key.strip()}"
