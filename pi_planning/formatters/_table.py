"""Plain-text table rendering (stdlib only)."""

import re

_CONTROL_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]|[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _trunc(s, maxlen):
    """Cut *s* to *maxlen* characters, marking the cut with an ellipsis."""
    if not s:
        return ""
    if len(s) <= maxlen:
        return s
    return s[: maxlen - 1] + "…"


def _sanitize_str(s):
    """Drop terminal escape sequences and control characters, flatten newlines."""
    if not s:
        return s
    return _CONTROL_RE.sub("", str(s)).replace("\n", " ")


def _table(columns, rows, footer=None):
    """Render *rows* under *columns*.

    columns: list of (name, max_width) tuples; max_width 0 means unbounded.
    Column widths shrink to the widest cell (header included).
    """
    cells = [[_sanitize_str(str(v)) if v is not None else "" for v in row] for row in rows]
    widths = []
    for i, (name, max_width) in enumerate(columns):
        widest = max([len(name)] + [len(r[i]) for r in cells])
        widths.append(min(widest, max_width) if max_width else widest)

    def _line(values):
        parts = [_trunc(v, w).ljust(w) for v, w in zip(values, widths)]
        return "  ".join(parts).rstrip()

    header = _line([name for name, _ in columns])
    lines = [header, "-" * max(len(header), 40)]
    lines.extend(_line(r) for r in cells)
    if footer:
        lines.append("")
        lines.append(footer)
    return "\n".join(lines)
