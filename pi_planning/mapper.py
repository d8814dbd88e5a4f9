"""
Tracker row → Card classification and field projection.

Classification is an ordered decision list: the first rule whose predicate
matches decides the card kind, regardless of any later rule.
"""

import math
import re
from collections.abc import Callable
from dataclasses import dataclass

from pi_planning._utils import is_blank
from pi_planning.markup import normalize_markup
from pi_planning.models import Card, Field
from pi_planning.templates import get_template, order_fields, source_columns

ISSUE_KEY_COLUMNS = ("Issue key", "Key", "Issue Key")
DUE_DATE_COLUMNS = ("Due date", "Due Date", "Fix Version/s", "Fix versions", "Fix Version")
NUMBER_PLACEHOLDERS = ("?", "#")

# (label, marker regex) per multi-part narrative, in sentence order
_NARRATIVE_MARKERS: dict[str, tuple[tuple[str, str], ...]] = {
    "userStory": (
        ("As a", r"as\s+an?"),
        ("I want", r"i\s+want"),
        ("So that", r"so\s+that"),
    ),
    "test": (
        ("Given", r"given"),
        ("When", r"when"),
        ("Then", r"then"),
    ),
}


# ---------------------------------------------------------------------------
# Row access helpers
# ---------------------------------------------------------------------------


def column_value(row, *names):
    """First non-blank value among *names* (exact column match), or ""."""
    for name in names:
        value = row.get(name)
        if not is_blank(value):
            return value.strip()
    return ""


def issue_type(row):
    return column_value(row, "Issue Type", "Issue type").lower()


def normalize_number(raw, default):
    """Round a numeric estimate to a whole number string.

    "?" and "#" pass through untouched; blank or unparsable input gives
    *default*. Halves round up (2.5 → "3").
    """
    if is_blank(raw):
        return default
    text = raw.strip()
    if text in NUMBER_PLACEHOLDERS:
        return text
    try:
        number = float(text)
    except ValueError:
        return default
    if not math.isfinite(number):
        return default
    return str(int(math.floor(number + 0.5)))


# ---------------------------------------------------------------------------
# Narrative (As a / I want / So that, Given / When / Then)
# ---------------------------------------------------------------------------


def _match_narrative(kind, text, strict):
    markers = _NARRATIVE_MARKERS.get(kind)
    if not markers or is_blank(text):
        return None
    matches = []
    for i, (_label, marker) in enumerate(markers):
        following = [m for _, m in markers[i + 1 :]]
        stop = rf"(?=\*?\b(?:{'|'.join(following)})\b)|" if following else ""
        lead = rf"\*({marker})\*" if strict else rf"\*?\b({marker})\b\*?"
        pattern = re.compile(rf"{lead}[ \t:]*(.*?)\s*(?:{stop}\n|$)", re.IGNORECASE)
        m = pattern.search(text)
        if not m:
            return None
        value = m.group(2).strip().rstrip(",;").strip().strip("*").strip()
        matches.append((m.group(1), value))
    return matches


def parse_narrative(kind, text, strict=False):
    """Pull the field-group parts for *kind* out of free text.

    Each part runs from its marker up to the next marker or the end of the
    line. Markers may be wrapped in ``*``; with *strict* they must be.
    Returns the parts in order, or None unless every marker is present.
    """
    matches = _match_narrative(kind, text, strict)
    if matches is None:
        return None
    return [value for _, value in matches]


def has_story_narrative(row):
    """True when Description carries all three emphasised story markers."""
    text = column_value(row, "Description")
    return parse_narrative("userStory", text, strict=True) is not None


# ---------------------------------------------------------------------------
# Classification rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    kind: str
    matches: Callable[[dict], bool]


def _type_is(*names):
    wanted = {n.lower() for n in names}
    return lambda row: issue_type(row) in wanted


def _has_due_date(row):
    return bool(column_value(row, *DUE_DATE_COLUMNS))


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule("epic", "epic", _type_is("Epic")),
    ClassificationRule(
        "story",
        "userStory",
        lambda row: _type_is("Story", "User Story")(row) or has_story_narrative(row),
    ),
    ClassificationRule("dated", "milestone", _has_due_date),
    ClassificationRule("task", "task", _type_is("Task")),
    ClassificationRule("spike", "spike", _type_is("Spike")),
    ClassificationRule("test", "test", _type_is("Test")),
    ClassificationRule("theme", "theme", _type_is("Theme")),
    ClassificationRule("fallback", "initiative", lambda row: True),
)


def classify_row(row, rules=CLASSIFICATION_RULES):
    """Return the template key of the first matching rule."""
    for rule in rules:
        if rule.matches(row):
            return rule.kind
    return None


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def _group_description(template, row):
    raw = column_value(row, "Description")
    matches = _match_narrative(template.key, raw, strict=False)
    if matches is not None:
        values = [normalize_markup(value) for _, value in matches]
        article = matches[0][0].split()[-1].lower()
        if article in ("a", "an"):
            return template.join_group(values, article=article)
        return template.join_group(values)
    if raw:
        return normalize_markup(raw)
    return template.join_group(template.default_for(label) for label in template.field_group)


def map_row(row):
    """Build a Card from one tracker row, or None when Summary is blank."""
    summary = column_value(row, "Summary")
    if not summary:
        return None
    kind = classify_row(row)
    if kind is None:
        return None
    template = get_template(kind)

    fields = []
    for fdef in template.fields:
        label = fdef.label
        if label in template.field_group:
            continue
        if label == "Name":
            value = summary
        elif label == template.large_number_field:
            value = normalize_number(column_value(row, *source_columns(label)), fdef.default)
        else:
            raw = column_value(row, *source_columns(label))
            value = normalize_markup(raw) if raw else fdef.default
        fields.append(Field(label, value))
    if template.field_group:
        fields.append(Field("Description", _group_description(template, row)))

    return Card(
        kind=kind,
        title=summary,
        fields=order_fields(kind, fields),
        issue_key=column_value(row, *ISSUE_KEY_COLUMNS) or None,
    )
