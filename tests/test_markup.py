"""Tests for markup.py — tracker markup normalization."""

import pytest

from pi_planning.markup import SEPARATOR, normalize_markup


class TestLinks:
    def test_label_then_url(self):
        assert normalize_markup("See [Docs|https://x.io/d]") == "See Docs (https://x.io/d)"

    def test_url_then_label(self):
        assert normalize_markup("[https://x.io|Docs]") == "Docs (https://x.io)"

    def test_residual_brackets(self):
        assert normalize_markup("[WIP] checkout flow") == "WIP checkout flow"

    def test_link_inside_bold(self):
        assert normalize_markup("**[Docs|https://x.io]**") == "Docs (https://x.io)"


class TestEmphasis:
    def test_double_asterisk(self):
        assert normalize_markup("**Important** detail") == "Important detail"

    def test_single_asterisk(self):
        assert normalize_markup("a *note* here") == "a note here"

    def test_lone_asterisk_kept(self):
        assert normalize_markup("2 * 3 = 6") == "2 * 3 = 6"


class TestLines:
    @pytest.mark.parametrize("text", ["# Title", "### Title", "h2. Title"])
    def test_headings(self, text):
        assert normalize_markup(text) == "Title"

    def test_rule(self):
        assert normalize_markup("above\n----\nbelow") == f"above\n{SEPARATOR}\nbelow"

    def test_bullets_keep_indent(self):
        assert normalize_markup("- one\n  * two") == "• one\n  • two"

    def test_three_blank_lines_collapse(self):
        assert normalize_markup("a\n\n\n\nb") == "a\n\nb"

    def test_two_blank_lines_kept(self):
        assert normalize_markup("a\n\n\nb") == "a\n\n\nb"

    def test_plain_lines_trimmed(self):
        assert normalize_markup("  plain  \n  text") == "plain\ntext"

    def test_label_line_keeps_indent(self):
        assert normalize_markup("Intro\n  Owner: Sam  ") == "Intro\n  Owner: Sam"

    def test_crlf(self):
        assert normalize_markup("a\r\nb") == "a\nb"


class TestBlankInput:
    @pytest.mark.parametrize("text", ["", "   ", "\n\n", None])
    def test_returned_unchanged(self, text):
        assert normalize_markup(text) == text

    def test_idempotent_on_plain_output(self):
        once = normalize_markup("# Goal\n- **fast** checkout\n----\n[Docs|https://x.io]")
        assert normalize_markup(once) == once
