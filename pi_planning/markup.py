"""
Tracker markup → plain card text.

Passes run in a fixed order; later passes rely on link and emphasis syntax
having been resolved already.
"""

import re

SEPARATOR = "─" * 24
BULLET = "• "

_LINK_RE = re.compile(r"\[([^\[\]|\n]+)\|([^\[\]\n]+)\]")
_BRACKET_RE = re.compile(r"\[([^\[\]\n]*)\]")
_BOLD_RE = re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*")
_EMPHASIS_RE = re.compile(r"\*(?=\S)([^*\n]+?)(?<=\S)\*")
_HEADING_RE = re.compile(r"^(\s*)(?:#{1,6}|h[1-6]\.)\s+", re.MULTILINE)
_RULE_RE = re.compile(r"^\s*----\s*$")
_LIST_RE = re.compile(r"^(\s*)[-*]\s+(.*)$")
_LABEL_LINE_RE = re.compile(r"^\s*[A-Z][\w-]*( [\w-]+)*:")
_URL_RE = re.compile(r"^(https?://|mailto:|www\.)", re.IGNORECASE)


def _looks_like_url(text):
    return bool(_URL_RE.match(text.strip()))


def _replace_link(match):
    url, label = match.group(1).strip(), match.group(2).strip()
    if _looks_like_url(label) and not _looks_like_url(url):
        url, label = label, url
    return f"{label} ({url})"


def _strip_emphasis(text):
    text = _BOLD_RE.sub(r"\1", text)
    return _EMPHASIS_RE.sub(r"\1", text)


def _collapse_blank_runs(lines):
    """Runs of three or more blank lines become a single blank line."""
    out = []
    run = []
    for line in lines:
        if not line.strip():
            run.append(line)
            continue
        out.extend(run if len(run) < 3 else [""])
        run = []
        out.append(line)
    out.extend(run if len(run) < 3 else [""])
    return out


def _trim_line(line):
    if line.lstrip().startswith(BULLET.strip()) or _LABEL_LINE_RE.match(line):
        return line.rstrip()
    return line.strip()


def normalize_markup(text):
    """Convert tracker markup in *text* into plain displayable text."""
    if text is None or not text.strip():
        return text
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    text = _LINK_RE.sub(_replace_link, text)
    text = _BRACKET_RE.sub(r"\1", text)
    text = _strip_emphasis(text)
    text = _HEADING_RE.sub(r"\1", text)

    lines = []
    for line in text.split("\n"):
        if _RULE_RE.match(line):
            lines.append(SEPARATOR)
            continue
        m = _LIST_RE.match(line)
        if m:
            lines.append(f"{m.group(1)}{BULLET}{m.group(2)}")
            continue
        lines.append(line)

    lines = _collapse_blank_runs(lines)
    return "\n".join(_trim_line(line) for line in lines).strip("\n")
