"""
Typed models for cards, rendered fragments, and operation reports.
"""

from dataclasses import dataclass, field

from pi_planning.exceptions import PlanningError


@dataclass(frozen=True)
class Field:
    """One label/value pair on a card."""

    label: str
    value: str

    def to_dict(self):
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class Card:
    """Structured planning card.

    ``kind`` is a template key (see templates.TEMPLATES). ``issue_key`` is the
    external tracker identity; None means the card was created locally.
    """

    kind: str
    title: str
    fields: tuple[Field, ...] = ()
    issue_key: str | None = None

    def get(self, label, default=None):
        """Return the value of the first field with *label*."""
        for f in self.fields:
            if f.label == label:
                return f.value
        return default

    def labels(self):
        return [f.label for f in self.fields]

    def to_dict(self):
        out = {
            "kind": self.kind,
            "title": self.title,
            "fields": [f.to_dict() for f in self.fields],
        }
        if self.issue_key:
            out["issue_key"] = self.issue_key
        return out

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise PlanningError(
                f"[ERROR] Invalid card: expected object, got {type(data).__name__}."
            )
        try:
            fields = tuple(Field(str(f["label"]), str(f["value"])) for f in data.get("fields", []))
            return cls(
                kind=str(data["kind"]),
                title=str(data.get("title", "")),
                fields=fields,
                issue_key=data.get("issue_key") or None,
            )
        except (KeyError, TypeError) as e:
            raise PlanningError(f"[ERROR] Invalid card: missing {e}.") from None


@dataclass(frozen=True)
class Fragment:
    """A positioned piece of text inside a rendered card."""

    text: str
    x: float
    y: float
    width: float
    height: float
    bold: bool = False
    link: str | None = None

    def to_dict(self):
        out = {
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "bold": self.bold,
        }
        if self.link:
            out["link"] = self.link
        return out

    @classmethod
    def from_dict(cls, data):
        return cls(
            text=str(data.get("text", "")),
            x=float(data.get("x", 0)),
            y=float(data.get("y", 0)),
            width=float(data.get("width", 0)),
            height=float(data.get("height", 0)),
            bold=bool(data.get("bold", False)),
            link=data.get("link") or None,
        )


@dataclass
class ImportReport:
    """Outcome of one CSV import batch."""

    total: int = 0
    created: int = 0
    skipped: int = 0
    no_data: bool = False
    frame_ids: list[str] = field(default_factory=list)
    skip_reasons: list[dict] = field(default_factory=list)

    def skip(self, row_index, reason):
        self.skipped += 1
        self.skip_reasons.append({"row": row_index, "reason": reason})

    def summary(self):
        if self.no_data:
            return "No data found in CSV."
        return f"Created {self.created} cards, skipped {self.skipped}"

    def to_dict(self):
        return {
            "ok": not self.no_data,
            "total": self.total,
            "created": self.created,
            "skipped": self.skipped,
            "no_data": self.no_data,
            "frame_ids": list(self.frame_ids),
            "skip_reasons": list(self.skip_reasons),
            "message": self.summary(),
        }


@dataclass(frozen=True)
class ExportResult:
    """CSV text produced by an export pass."""

    csv: str
    filename: str
    card_count: int

    def to_dict(self):
        return {"csv": self.csv, "filename": self.filename, "card_count": self.card_count}


@dataclass(frozen=True)
class DemotedCopy:
    frame_id: str
    issue_key: str
    original_id: str

    def to_dict(self):
        return {
            "frame_id": self.frame_id,
            "issue_key": self.issue_key,
            "original_id": self.original_id,
        }


@dataclass(frozen=True)
class ReconcileReport:
    """Frames demoted to local copies by one reconciliation pass."""

    demoted: tuple[DemotedCopy, ...] = ()
    skipped_busy: bool = False

    def to_dict(self):
        return {
            "ok": True,
            "demoted": [d.to_dict() for d in self.demoted],
            "skipped_busy": self.skipped_busy,
        }
