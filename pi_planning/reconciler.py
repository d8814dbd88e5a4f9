"""
Duplicate reconciliation.

Hosts copy frame metadata on paste, so a copied card still claims its
source's issue key. A pass groups card frames by issue key, keeps the
original (non-copy first, then top-most/left-most), and demotes every other
holder to a local copy: key cleared, isCopy set, title link removed, user
notified once.
"""

from pi_planning import config
from pi_planning._utils import log_event
from pi_planning.models import DemotedCopy, ReconcileReport
from pi_planning.templates import kind_of


def _is_copy(canvas, frame):
    return canvas.get_frame_metadata(frame, config.META_IS_COPY).lower() == "true"


def group_by_issue_key(canvas):
    groups = {}
    for frame in canvas.enumerate_frames(lambda f: kind_of(f.name) is not None):
        key = canvas.get_frame_metadata(frame, config.META_ISSUE_KEY).strip()
        if key:
            groups.setdefault(key, []).append(frame)
    return groups


def reconcile_duplicates(canvas, context):
    """Run one reconciliation pass. Idempotent; skipped while an import/export runs."""
    if context.busy:
        log_event("RECONCILE", event="skipped_busy", operation=context.busy_operation)
        return ReconcileReport(skipped_busy=True)

    demoted = []
    for key, frames in group_by_issue_key(canvas).items():
        if len(frames) < 2:
            continue
        frames.sort(key=lambda f: (_is_copy(canvas, f), f.position))
        original = frames[0]
        for dup in frames[1:]:
            if dup.id in context.seen_copies:
                continue
            context.seen_copies.add(dup.id)
            canvas.set_frame_metadata(dup, config.META_ISSUE_KEY, "")
            canvas.set_frame_metadata(dup, config.META_IS_COPY, "true")
            canvas.clear_title_link(dup)
            canvas.notify_user(
                f"Copy of {key} detached from the tracker; it will export as a new issue."
            )
            log_event("RECONCILE", event="demoted", frame_id=dup.id, issue_key=key)
            demoted.append(DemotedCopy(frame_id=dup.id, issue_key=key, original_id=original.id))
    return ReconcileReport(demoted=tuple(demoted))
