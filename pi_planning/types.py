"""Typed response definitions for PlanningClient methods.

These TypedDicts document the shape of dicts returned by public API methods.
They are optional — runtime behavior is unchanged (plain dicts).
"""

from __future__ import annotations

from typing import TypedDict


class FieldRow(TypedDict):
    label: str
    value: str


class TemplateRow(TypedDict):
    """One entry of PlanningClient.list_templates()."""

    key: str
    title: str
    issue_type: str
    shape: str
    large_number_field: str | None
    has_assignee: bool
    fields: list[FieldRow]


class InsertResult(TypedDict):
    ok: bool
    frame_id: str
    kind: str
    title: str


class SkipReason(TypedDict):
    row: int
    reason: str


class ImportResult(TypedDict):
    """Return type of PlanningClient.import_csv()."""

    ok: bool
    total: int
    created: int
    skipped: int
    no_data: bool
    frame_ids: list[str]
    skip_reasons: list[SkipReason]
    message: str


class ExportResult(TypedDict):
    """Return type of PlanningClient.export_csv()."""

    ok: bool
    csv: str
    filename: str
    card_count: int


class CardEntry(TypedDict, total=False):
    """One card as listed by PlanningClient.list_cards()."""

    frame_id: str
    kind: str
    title: str
    fields: list[FieldRow]
    issue_key: str
    is_copy: bool
    x: float
    y: float


class CardListResult(TypedDict):
    cards: list[CardEntry]


class DemotedRow(TypedDict):
    frame_id: str
    issue_key: str
    original_id: str


class ReconcileResult(TypedDict):
    """Return type of PlanningClient.reconcile()."""

    ok: bool
    demoted: list[DemotedRow]
    skipped_busy: bool
