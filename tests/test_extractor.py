"""Tests for layout.py and extractor.py — rendering cards and reading them back."""

import pytest

from pi_planning import config
from pi_planning.extractor import (
    extract_card,
    find_assignee,
    find_large_number,
    group_rows,
    label_text,
    pair_fields,
)
from pi_planning.layout import render_card
from pi_planning.models import Card, Field, Fragment
from pi_planning.templates import default_card, get_template


def frag(text, x, y, width=100, height=16):
    return Fragment(text, x, y, width, height)


def roundtrip(card, fonts=("Regular", "Medium", "Bold")):
    width, height, fragments = render_card(card, fonts)
    return extract_card(get_template(card.kind).title, fragments, width, height, card.issue_key)


class TestRenderCard:
    def test_title_first_and_bold(self):
        _, _, fragments = render_card(default_card("epic"))
        assert fragments[0].text == "Epic"
        assert fragments[0].bold is True
        assert fragments[0].y == config.TITLE_Y

    def test_label_value_pairs(self):
        _, _, fragments = render_card(default_card("epic"))
        assert fragments[1].text == "Name:"
        assert fragments[1].y == config.FIRST_FIELD_Y
        assert fragments[2].text == "Epic Name"
        assert fragments[2].y == config.FIRST_FIELD_Y + config.LABEL_VALUE_GAP

    def test_band_fields_not_labelled(self):
        _, _, fragments = render_card(default_card("task"))
        texts = [f.text for f in fragments]
        assert "Story Points:" not in texts
        assert "Assignee:" not in texts
        assert "?" in texts
        assert "Unassigned" in texts

    def test_height_reserves_bottom_band(self):
        width, height, fragments = render_card(default_card("epic"))
        assert width == config.CARD_WIDTH
        last_value = fragments[-1]
        assert height - config.BOTTOM_BAND >= last_value.y + last_value.height

    def test_issue_key_links_title(self):
        card = Card("epic", "Payments", (Field("Name", "Payments"),), issue_key="PI-4")
        _, _, fragments = render_card(card)
        assert fragments[0].link == "https://tracker.example.com/browse/PI-4"

    def test_missing_bold_font_falls_back(self):
        _, _, fragments = render_card(default_card("theme"), fonts=())
        assert fragments[0].bold is False
        assert fragments[-1].text == "#"
        assert fragments[-1].bold is False


class TestExtractCard:
    @pytest.mark.parametrize("key", sorted(config.VALID_TEMPLATE_TYPES))
    def test_default_cards_survive(self, key):
        card = default_card(key)
        assert roundtrip(card) == card

    def test_filled_task_survives(self):
        card = Card(
            "task",
            "Wire API",
            (
                Field("Name", "Wire API"),
                Field("Description", "Line one\nLine two"),
                Field("Status", "In Progress"),
                Field("Story Points", "13"),
                Field("Assignee", "Alice"),
            ),
            issue_key="PI-8",
        )
        assert roundtrip(card) == card

    def test_cleared_assignee_stays_blank(self):
        card = Card(
            "task",
            "T",
            (
                Field("Name", "T"),
                Field("Description", "d"),
                Field("Status", "In Progress"),
                Field("Story Points", "3"),
                Field("Assignee", ""),
            ),
        )
        extracted = roundtrip(card)
        assert extracted.get("Assignee") == ""
        assert extracted.get("Status") == "In Progress"

    def test_unknown_frame_name(self):
        assert extract_card("Sticky", [frag("x", 20, 20)], 400, 200) is None

    def test_title_from_text_not_frame_name(self):
        fragments = [frag("Edited title", 20, 20), frag("Name:", 20, 60), frag("x", 20, 80)]
        card = extract_card("Epic", fragments, 400, 300)
        assert card.title == "Edited title"
        assert card.get("Name") == "x"

    def test_too_few_fragments(self):
        card = extract_card("Epic", [frag("Title", 20, 20), frag("Name:", 20, 60)], 400, 200)
        assert card == Card("epic", "Title")

    def test_no_fragments(self):
        assert extract_card("Epic", [], 400, 200) == Card("epic", "")

    def test_issue_key_trimmed(self):
        fragments = [frag("T", 20, 20)]
        assert extract_card("Epic", fragments, 400, 200, " PI-2 ").issue_key == "PI-2"
        assert extract_card("Epic", fragments, 400, 200, "").issue_key is None

    def test_large_number_overrides_pair(self):
        fragments = [
            frag("Task", 20, 20),
            frag("Story Points:", 20, 60),
            frag("1", 20, 80),
            frag("5", 350, 160),
        ]
        card = extract_card("Task", fragments, 400, 200)
        assert card.get("Story Points") == "5"

    def test_labelled_assignee_wins(self):
        fragments = [
            frag("Task", 20, 20),
            frag("Assignee:", 20, 60),
            frag("Alice", 20, 80),
            frag("Bob", 20, 170),
        ]
        card = extract_card("Task", fragments, 400, 200)
        assert card.get("Assignee") == "Alice"

    def test_bottom_band_excluded_from_pairs(self):
        fragments = [
            frag("Epic", 20, 20),
            frag("Name:", 20, 60),
            frag("N", 20, 80),
            frag("Status:", 20, 150),
            frag("Done", 20, 170),
        ]
        card = extract_card("Epic", fragments, 400, 200)
        assert card.labels() == ["Name"]


class TestGeometryHelpers:
    def test_rows_within_tolerance_read_left_to_right(self):
        rows = group_rows([frag("b", 200, 105), frag("a", 20, 100), frag("c", 20, 140)])
        assert [[f.text for f in row] for row in rows] == [["a", "b"], ["c"]]

    @pytest.mark.parametrize(
        "text,expected",
        [("Status:", "Status"), ("Status", "Status"), ("42", None), ("?:", None), ("  ", None)],
    )
    def test_label_text(self, text, expected):
        assert label_text(frag(text, 0, 0)) == expected

    def test_pair_fields_first_label_wins(self):
        fields = pair_fields(
            [frag("A:", 0, 0), frag("1", 0, 20), frag("A:", 0, 40), frag("2", 0, 60)]
        )
        assert fields == [Field("A", "1")]

    def test_pair_fields_skips_numeric_label(self):
        fields = pair_fields([frag("7", 0, 0), frag("A:", 0, 20), frag("x", 0, 40)])
        assert fields == [Field("A", "x")]

    def test_large_number_right_half_only(self):
        fragments = [frag("3", 20, 150), frag("8", 300, 100)]
        assert find_large_number(fragments, 400) == "8"

    def test_large_number_bottom_right_first(self):
        fragments = [frag("2", 250, 150), frag("5", 330, 152), frag("9", 330, 100)]
        assert find_large_number(fragments, 400) == "5"

    def test_large_number_none(self):
        assert find_large_number([frag("abc", 300, 100)], 400) is None

    def test_assignee_left_half_non_numeric(self):
        fragments = [frag("13", 20, 185), frag("Sam", 20, 160), frag("Zed", 300, 185)]
        assert find_assignee(fragments, 400, 200) == "Sam"

    def test_assignee_ignores_values_above_band(self):
        fragments = [frag("Status:", 20, 80), frag("Done", 20, 100), frag("8", 330, 160)]
        assert find_assignee(fragments, 400, 200) is None

    def test_blank_assignee_in_band(self):
        fragments = [frag("Done", 20, 100), frag("", 20, 160), frag("8", 330, 160)]
        assert find_assignee(fragments, 400, 200) == ""
