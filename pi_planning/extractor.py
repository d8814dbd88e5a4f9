"""
Rendered card → Card reconstruction.

Fragments carry no field tags. Identity is recovered from geometry: reading
order (top to bottom, then left to right within a row tolerance), the
trailing-colon label convention, and the bottom band where the large number
(right) and the assignee (left) are drawn without labels.
"""

from pi_planning import config
from pi_planning._utils import is_blank, is_numberish
from pi_planning.models import Card, Field
from pi_planning.templates import get_template, kind_of, order_fields


def group_rows(fragments, tolerance=config.ROW_TOLERANCE):
    """Group fragments into visual rows, top to bottom, each sorted left to right.

    A fragment joins the current row when its y is within *tolerance* of the
    row's first fragment.
    """
    rows: list[list] = []
    for frag in sorted(fragments, key=lambda f: (f.y, f.x)):
        if rows and frag.y - rows[-1][0].y <= tolerance:
            rows[-1].append(frag)
        else:
            rows.append([frag])
    return [sorted(row, key=lambda f: f.x) for row in rows]


def reading_order(fragments, tolerance=config.ROW_TOLERANCE):
    return [frag for row in group_rows(fragments, tolerance) for frag in row]


def label_text(fragment):
    """The label name if *fragment* reads as a label, else None."""
    text = fragment.text.strip()
    if text.endswith(":"):
        text = text[:-1].strip()
    if not text or is_numberish(text):
        return None
    return text


def _bottom_up(fragments, right_to_left):
    for row in reversed(group_rows(fragments)):
        yield from (reversed(row) if right_to_left else row)


def find_large_number(fragments, frame_width):
    """Bottom-most, right-most numeric fragment on the right half, or None."""
    half = frame_width / 2
    for frag in _bottom_up(fragments, right_to_left=True):
        if frag.x >= half and is_numberish(frag.text):
            return frag.text.strip()
    return None


def find_assignee(fragments, frame_width, frame_height):
    """Bottom-most, left-most non-numeric fragment in the left half of the bottom band.

    A blank fragment there is a cleared assignee and reads back as "".
    Returns None when the band holds no candidate.
    """
    half = frame_width / 2
    band_top = frame_height - config.BOTTOM_BAND
    for frag in _bottom_up(fragments, right_to_left=False):
        if frag.y < band_top or frag.x >= half:
            continue
        if not is_numberish(frag.text):
            return frag.text.strip()
    return None


def pair_fields(fragments):
    """Walk fragments in reading order as (label, value) pairs."""
    fields = []
    seen = set()
    i = 0
    while i < len(fragments) - 1:
        label = label_text(fragments[i])
        if label is None:
            i += 1
            continue
        if label not in seen:
            seen.add(label)
            fields.append(Field(label, fragments[i + 1].text.strip()))
        i += 2
    return fields


def extract_card(frame_name, fragments, frame_width, frame_height, issue_key=None):
    """Rebuild a Card from one frame's text fragments.

    Returns None when *frame_name* is not a known template title.
    """
    kind = kind_of(frame_name)
    if kind is None:
        return None
    template = get_template(kind)
    issue_key = None if is_blank(issue_key) else issue_key.strip()

    ordered = reading_order(fragments)
    if not ordered:
        return Card(kind=kind, title="", issue_key=issue_key)
    title = ordered[0].text.strip()
    rest = ordered[1:]
    if len(rest) < 2:
        return Card(kind=kind, title=title, issue_key=issue_key)

    band_top = frame_height - config.BOTTOM_BAND
    fields = pair_fields([f for f in rest if f.y < band_top])

    number_label = template.large_number_field
    if number_label:
        number = find_large_number(rest, frame_width)
        if number is not None:
            fields = [f for f in fields if f.label != number_label]
            fields.append(Field(number_label, number))

    if template.has_assignee and not any(f.label == "Assignee" for f in fields):
        assignee = find_assignee(rest, frame_width, frame_height)
        if assignee is not None:
            fields.append(Field("Assignee", assignee))

    return Card(
        kind=kind,
        title=title,
        fields=order_fields(kind, fields),
        issue_key=issue_key,
    )


def card_from_frame(canvas, frame):
    """Extract the Card for a canvas frame, or None for non-card frames."""
    return extract_card(
        frame.name,
        canvas.get_text_fragments(frame),
        frame.width,
        frame.height,
        canvas.get_frame_metadata(frame, config.META_ISSUE_KEY),
    )
