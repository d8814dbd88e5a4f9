"""
Card layout: turns a Card into positioned text fragments.

The extractor reads cards back using the same geometry constants, so the
two must agree on where the title, label/value pairs, and the bottom band
(large number on the right, assignee on the left) are placed.
"""

from pi_planning import config
from pi_planning._utils import issue_link, log_event
from pi_planning.exceptions import FontError
from pi_planning.models import Fragment
from pi_planning.templates import get_template

BOLD_FONT = "Bold"
ALL_FONTS = ("Regular", "Medium", "Bold")


def text_height(text, line_height=config.LINE_HEIGHT):
    return max(1, (text or "").count("\n") + 1) * line_height


def _set_bold(fonts):
    if BOLD_FONT not in fonts:
        raise FontError(f"[ERROR] Font Inter {BOLD_FONT} is not loaded.")
    return True


def _bold_or_default(fonts, element):
    """Bold when the bold font is loaded, else fall back to default styling."""
    try:
        return _set_bold(fonts)
    except FontError as e:
        log_event("FONT", event="fallback", element=element, error=str(e))
        return False


def bottom_band_fields(template):
    """Labels drawn in the bottom band instead of as label/value pairs."""
    labels = set()
    if template.large_number_field:
        labels.add(template.large_number_field)
    if template.has_assignee:
        labels.add("Assignee")
    return labels


def render_card(card, fonts=ALL_FONTS):
    """Lay out *card*. Returns (width, height, fragments)."""
    template = get_template(card.kind)
    width = config.CARD_WIDTH
    pad = config.CARD_PADDING
    inner = width - 2 * pad

    fragments = [
        Fragment(
            text=card.title,
            x=pad,
            y=config.TITLE_Y,
            width=inner - config.ICON_SIZE - pad,
            height=text_height(card.title, config.TITLE_FONT_SIZE + 6),
            bold=_bold_or_default(fonts, "title"),
            link=issue_link(card.issue_key),
        )
    ]

    band_labels = bottom_band_fields(template)
    y = config.FIRST_FIELD_Y
    for f in card.fields:
        if f.label in band_labels:
            continue
        fragments.append(Fragment(f"{f.label}:", pad, y, inner, config.LINE_HEIGHT - 2))
        value_height = text_height(f.value)
        fragments.append(Fragment(f.value, pad, y + config.LABEL_VALUE_GAP, inner, value_height))
        y += value_height + config.FIELD_GAP

    band_top = y
    height = band_top + config.BOTTOM_BAND

    assignee = card.get("Assignee") if template.has_assignee else None
    if assignee is not None:
        fragments.append(
            Fragment(
                assignee,
                pad,
                band_top + (config.BOTTOM_BAND - config.LINE_HEIGHT) / 2,
                inner / 2 - pad,
                config.LINE_HEIGHT,
            )
        )

    number_label = template.large_number_field
    number = card.get(number_label) if number_label else None
    if number is not None:
        size = config.LARGE_NUMBER_FONT_SIZE
        number_width = max(24, len(number) * size * 0.6)
        fragments.append(
            Fragment(
                number,
                width - pad - number_width,
                band_top + (config.BOTTOM_BAND - (size + 8)) / 2,
                number_width,
                size + 8,
                bold=_bold_or_default(fonts, "large_number"),
            )
        )

    return width, height, fragments
