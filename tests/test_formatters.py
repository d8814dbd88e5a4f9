"""Tests for formatters — _table, _trunc, output, and board formatters."""

import json

from pi_planning.formatters import (
    _sanitize_str,
    _table,
    _trunc,
    format_card_detail,
    format_cards_csv,
    format_cards_table,
    format_export_summary,
    format_import_report,
    format_reconcile_report,
    format_templates_table,
    output,
)


class TestTrunc:
    def test_short_string_unchanged(self):
        assert _trunc("hello", 10) == "hello"

    def test_truncates_with_ellipsis(self):
        result = _trunc("hello world", 6)
        assert result == "hello…"
        assert len(result) == 6

    def test_none(self):
        assert _trunc(None, 10) == ""


class TestSanitize:
    def test_strips_escape_sequences(self):
        assert _sanitize_str("\x1b[31mred\x1b[0m") == "red"

    def test_flattens_newlines(self):
        assert _sanitize_str("a\nb") == "a b"


class TestTable:
    def test_widths_shrink_to_content(self):
        text = _table([("Name", 20), ("ID", 0)], [("ab", "1:1")])
        lines = text.splitlines()
        assert lines[0] == "Name  ID"
        assert lines[2] == "ab    1:1"

    def test_footer(self):
        text = _table([("A", 5)], [("x",)], "Total: 1")
        assert text.splitlines()[-1] == "Total: 1"

    def test_truncates_to_max_width(self):
        text = _table([("Title", 5)], [("abcdefgh",)])
        assert text.splitlines()[2] == "abcd…"


class TestOutput:
    def test_json_default(self, capsys):
        output({"a": 1})
        assert json.loads(capsys.readouterr().out) == {"a": 1}

    def test_table(self, capsys):
        output({"a": 1}, lambda d: "TABLE", "table")
        assert capsys.readouterr().out == "TABLE\n"

    def test_csv(self, capsys):
        output({}, None, "csv", csv_formatter=lambda d: "a,b\n")
        assert capsys.readouterr().out == "a,b\n"

    def test_csv_without_formatter_falls_back_to_json(self, capsys):
        output({"a": 1}, None, "csv")
        assert json.loads(capsys.readouterr().out) == {"a": 1}


CARDS = {
    "cards": [
        {
            "frame_id": "1:1",
            "kind": "task",
            "title": "Wire API",
            "fields": [
                {"label": "Status", "value": "To Do"},
                {"label": "Story Points", "value": "5"},
                {"label": "Assignee", "value": "Alice"},
            ],
            "issue_key": "PI-8",
            "is_copy": False,
        },
        {
            "frame_id": "1:2",
            "kind": "milestone",
            "title": "Beta",
            "fields": [],
            "is_copy": True,
        },
    ]
}


class TestBoardFormatters:
    def test_templates_table(self, client):
        text = format_templates_table(client.list_templates())
        assert "As a, I want, So that" in text
        assert text.endswith("Total: 8 templates")

    def test_templates_empty(self):
        assert format_templates_table([]) == "No templates registered."

    def test_cards_table(self):
        text = format_cards_table(CARDS)
        row = text.splitlines()[2]
        for value in ("task", "Wire API", "PI-8", "To Do", "5", "Alice", "1:1"):
            assert value in row
        assert "yes" in text.splitlines()[3]
        assert text.endswith("Total: 2 cards")

    def test_cards_empty(self):
        assert format_cards_table({"cards": []}) == "No cards found."

    def test_cards_csv_skips_milestones(self):
        lines = format_cards_csv(CARDS).splitlines()
        assert len(lines) == 2
        assert lines[1].startswith('"Wire API","PI-8","Task"')

    def test_cards_csv_empty(self):
        assert format_cards_csv({"cards": []}) == ""

    def test_card_detail(self):
        text = format_card_detail({"frame_id": "1:2", "source_id": "1:1"})
        assert text == "Frame:  1:2\nSource: 1:1"

    def test_import_report(self):
        text = format_import_report(
            {
                "message": "Created 1 cards, skipped 1",
                "total": 2,
                "created": 1,
                "skipped": 1,
                "skip_reasons": [{"row": 2, "reason": "blank Summary"}],
            }
        )
        assert text.splitlines()[0] == "Created 1 cards, skipped 1"
        assert "  row 2: blank Summary" in text

    def test_import_report_no_data(self):
        assert format_import_report({"message": "No data found in CSV.", "no_data": True}) == (
            "No data found in CSV."
        )

    def test_export_summary(self):
        assert format_export_summary({"card_count": 3, "path": "/tmp/x.csv"}) == (
            "Exported 3 cards\nFile: /tmp/x.csv"
        )

    def test_reconcile_report(self):
        text = format_reconcile_report(
            {"demoted": [{"frame_id": "1:2", "issue_key": "PI-1", "original_id": "1:1"}]}
        )
        assert "PI-1" in text
        assert text.endswith("Detached: 1 copies")

    def test_reconcile_report_empty_and_busy(self):
        assert format_reconcile_report({"demoted": []}) == "No duplicate issue keys found."
        assert format_reconcile_report({"skipped_busy": True}).startswith("Skipped")
