"""Tests for reconciler.py — demoting copied cards that share an issue key."""

from pi_planning import config
from pi_planning.canvas import Frame
from pi_planning.context import PlanningContext
from pi_planning.models import Card, Field
from pi_planning.reconciler import group_by_issue_key, reconcile_duplicates

from conftest import place


def keyed(title, key):
    return Card("epic", title, (Field("Name", title),), issue_key=key)


def meta(canvas, frame, key):
    return canvas.get_frame_metadata(frame, key)


class TestReconcile:
    def test_lower_frame_demoted(self, canvas):
        ctx = PlanningContext()
        top = place(canvas, keyed("A", "X"), (0, 0))
        below = place(canvas, keyed("A", "X"), (0, 100))
        report = reconcile_duplicates(canvas, ctx)
        assert [d.frame_id for d in report.demoted] == [below.id]
        assert report.demoted[0].original_id == top.id
        assert meta(canvas, top, config.META_ISSUE_KEY) == "X"
        assert meta(canvas, below, config.META_ISSUE_KEY) == ""
        assert meta(canvas, below, config.META_IS_COPY) == "true"
        assert below.fragments[0].link is None
        assert top.fragments[0].link is not None
        assert canvas.notifications == [
            "Copy of X detached from the tracker; it will export as a new issue."
        ]

    def test_second_pass_is_noop(self, canvas):
        ctx = PlanningContext()
        place(canvas, keyed("A", "X"), (0, 0))
        place(canvas, keyed("A", "X"), (0, 100))
        reconcile_duplicates(canvas, ctx)
        report = reconcile_duplicates(canvas, ctx)
        assert report.demoted == ()
        assert len(canvas.notifications) == 1

    def test_noop_without_duplicates(self, canvas):
        place(canvas, keyed("A", "X"), (0, 0))
        place(canvas, keyed("B", "Y"), (0, 100))
        place(canvas, keyed("C", None), (0, 200))
        assert reconcile_duplicates(canvas, PlanningContext()).demoted == ()
        assert canvas.notifications == []

    def test_same_row_left_is_original(self, canvas):
        right = place(canvas, keyed("A", "X"), (500, 0))
        left = place(canvas, keyed("A", "X"), (0, 0))
        report = reconcile_duplicates(canvas, PlanningContext())
        assert report.demoted[0].frame_id == right.id
        assert report.demoted[0].original_id == left.id

    def test_flagged_copy_never_original(self, canvas):
        copy = place(canvas, keyed("A", "X"), (0, 0))
        canvas.set_frame_metadata(copy, config.META_IS_COPY, "true")
        original = place(canvas, keyed("A", "X"), (0, 300))
        report = reconcile_duplicates(canvas, PlanningContext())
        assert [d.frame_id for d in report.demoted] == [copy.id]
        assert meta(canvas, original, config.META_ISSUE_KEY) == "X"

    def test_three_holders(self, canvas):
        frames = [place(canvas, keyed("A", "X"), (0, y)) for y in (200, 0, 100)]
        report = reconcile_duplicates(canvas, PlanningContext())
        assert sorted(d.frame_id for d in report.demoted) == sorted([frames[0].id, frames[2].id])
        assert len(canvas.notifications) == 2

    def test_skipped_while_busy(self, canvas):
        ctx = PlanningContext()
        place(canvas, keyed("A", "X"), (0, 0))
        dup = place(canvas, keyed("A", "X"), (0, 100))
        with ctx.busy_section("import"):
            report = reconcile_duplicates(canvas, ctx)
        assert report.skipped_busy is True
        assert meta(canvas, dup, config.META_ISSUE_KEY) == "X"
        assert reconcile_duplicates(canvas, ctx).demoted[0].frame_id == dup.id

    def test_foreign_frames_ignored(self, canvas):
        place(canvas, keyed("A", "X"), (0, 0))
        canvas.frames["9:1"] = Frame("9:1", "Sticky", 0, 50, 100, 100, metadata={"issueKey": "X"})
        assert group_by_issue_key(canvas) == {"X": [canvas.frames["1:1"]]}
        assert reconcile_duplicates(canvas, PlanningContext()).demoted == ()

    def test_pasted_copy_via_client(self, client, canvas):
        client.import_csv("Issue key,Summary,Issue Type\nPI-5,Search,Epic\n")
        copy_id = client.duplicate_card("1:1")["frame_id"]
        result = client.reconcile()
        assert result == {
            "ok": True,
            "demoted": [{"frame_id": copy_id, "issue_key": "PI-5", "original_id": "1:1"}],
            "skipped_busy": False,
        }
        cards = {c["frame_id"]: c for c in client.list_cards()["cards"]}
        assert cards[copy_id]["is_copy"] is True
        assert "issue_key" not in cards[copy_id]
        assert cards["1:1"]["issue_key"] == "PI-5"

    def test_demoted_copy_exports_without_key(self, client):
        client.import_csv("Issue key,Summary,Issue Type\nPI-5,Search,Epic\n")
        client.duplicate_card("1:1")
        client.reconcile()
        lines = client.export_csv()["csv"].splitlines()
        assert lines[1].startswith('"Search","PI-5","Epic"')
        assert lines[2].startswith('"Search","","Epic"')
