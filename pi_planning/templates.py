"""Template registry — single source of truth for card kinds.

Standalone module (no project imports besides models). Adding a new card kind
means appending one TemplateDefinition to TEMPLATES. The order of TEMPLATES and
of each template's fields defines the canonical field order used for card
layout and CSV column ordering, so reordering entries changes exported files.
"""

from dataclasses import dataclass

from pi_planning.models import Card, Field


@dataclass(frozen=True)
class FieldDefinition:
    label: str
    default: str


@dataclass(frozen=True)
class TemplateDefinition:
    """One card kind plus the per-kind rendering and extraction settings."""

    key: str
    title: str
    issue_type: str  # tracker vocabulary used on export
    fields: tuple[FieldDefinition, ...]
    shape: str
    color: tuple[float, float, float]
    large_number_field: str | None = None
    has_assignee: bool = False
    # Multi-part narrative stored as one "Description" on import/export
    field_group: tuple[str, ...] = ()
    group_format: str = ""

    def labels(self) -> tuple[str, ...]:
        return tuple(f.label for f in self.fields)

    def default_for(self, label: str) -> str | None:
        for f in self.fields:
            if f.label == label:
                return f.default
        return None

    def join_group(self, values, article: str = "a") -> str:
        """Concatenate field-group values into one Description sentence.

        *article* fills the `{article}` slot of formats that have one
        ("As a" vs "As an").
        """
        return self.group_format.format(*(v.strip() for v in values), article=article)


_F = FieldDefinition

TEMPLATES: tuple[TemplateDefinition, ...] = (
    TemplateDefinition(
        key="theme",
        title="Theme",
        issue_type="Theme",
        fields=(
            _F("Name", "Theme Name"),
            _F("Description", "Theme description..."),
            _F("Business Value", "High"),
            _F("Priority Rank", "#"),
        ),
        shape="star",
        color=(0.6, 0.3, 0.8),
        large_number_field="Priority Rank",
    ),
    TemplateDefinition(
        key="milestone",
        title="Milestone",
        issue_type="Milestone",
        fields=(
            _F("Name", "Milestone Name"),
            _F("Target Date", "MM/DD/YYYY"),
            _F("Status", "Not Started"),
            _F("Description", "Milestone description..."),
        ),
        shape="diamond",
        color=(0.85, 0.2, 0.2),
    ),
    TemplateDefinition(
        key="userStory",
        title="User Story",
        issue_type="Story",
        fields=(
            _F("As a", "[user type]"),
            _F("I want", "[feature]"),
            _F("So that", "[benefit]"),
            _F("Acceptance Criteria", "• Criterion 1\n• Criterion 2\n• Criterion 3"),
            _F("Story Points", "?"),
            _F("Priority", "Medium"),
            _F("Assignee", "Unassigned"),
        ),
        shape="circle",
        color=(0.2, 0.5, 0.9),
        large_number_field="Story Points",
        has_assignee=True,
        field_group=("As a", "I want", "So that"),
        group_format="As {article} {}, I want {}, so that {}",
    ),
    TemplateDefinition(
        key="epic",
        title="Epic",
        issue_type="Epic",
        fields=(
            _F("Name", "Epic Name"),
            _F("Description", "Epic description..."),
            _F("Business Value", "High"),
            _F("Status", "Planning"),
        ),
        shape="triangle",
        color=(0.9, 0.6, 0.1),
    ),
    TemplateDefinition(
        key="initiative",
        title="Initiative",
        issue_type="Initiative",
        fields=(
            _F("Name", "Initiative Name"),
            _F("Description", "Initiative description..."),
            _F("Dependencies", "None"),
            _F("Team", "Team Name"),
        ),
        shape="square",
        color=(0.3, 0.7, 0.3),
    ),
    TemplateDefinition(
        key="task",
        title="Task",
        issue_type="Task",
        fields=(
            _F("Name", "Task Name"),
            _F("Description", "Task description..."),
            _F("Status", "To Do"),
            _F("Story Points", "?"),
            _F("Assignee", "Unassigned"),
        ),
        shape="hexagon",
        color=(0.45, 0.45, 0.5),
        large_number_field="Story Points",
        has_assignee=True,
    ),
    TemplateDefinition(
        key="spike",
        title="Spike",
        issue_type="Spike",
        fields=(
            _F("Name", "Spike Name"),
            _F("Description", "Research question..."),
            _F("Status", "To Do"),
            _F("Story Points", "?"),
            _F("Assignee", "Unassigned"),
        ),
        shape="pentagon",
        color=(0.1, 0.65, 0.65),
        large_number_field="Story Points",
        has_assignee=True,
    ),
    TemplateDefinition(
        key="test",
        title="Test",
        issue_type="Test",
        fields=(
            _F("Name", "Test Name"),
            _F("Given", "[precondition]"),
            _F("When", "[action]"),
            _F("Then", "[expected result]"),
            _F("Test Type", "Functional"),
            _F("Status", "To Do"),
            _F("Story Points", "?"),
            _F("Assignee", "Unassigned"),
        ),
        shape="octagon",
        color=(0.85, 0.35, 0.55),
        large_number_field="Story Points",
        has_assignee=True,
        field_group=("Given", "When", "Then"),
        group_format="Given {}, when {}, then {}",
    ),
)

# Card field label -> tracker CSV column. Unlisted labels export under their own name.
LABEL_TO_COLUMN: dict[str, str] = {
    "Name": "Summary",
    "Story Points": "Custom field (Story Points)",
    "Acceptance Criteria": "Custom field (Acceptance Criteria)",
    "Business Value": "Custom field (Business Value)",
    "Target Date": "Due date",
    "Dependencies": "Custom field (Dependencies)",
    "Team": "Custom field (Team)",
    "Priority Rank": "Custom field (Priority Rank)",
    "Test Type": "Custom field (Test Type)",
}

# Extra tracker columns accepted on import, tried after the LABEL_TO_COLUMN name.
SOURCE_ALIASES: dict[str, tuple[str, ...]] = {
    "Story Points": ("Custom field (Story point estimate)", "Story point estimate"),
    "Target Date": ("Due Date", "Fix Version/s", "Fix versions", "Fix Version"),
    "Dependencies": ("Outward issue link (Blocks)",),
    "Priority Rank": ("Rank",),
}

# Known export columns after Summary / Issue key / Issue Type, in this order.
EXPORT_PRIORITY_COLUMNS: tuple[str, ...] = (
    "Description",
    "Status",
    "Priority",
    "Assignee",
    "Custom field (Story Points)",
    "Custom field (Acceptance Criteria)",
    "Custom field (Business Value)",
    "Due date",
    "Custom field (Dependencies)",
    "Custom field (Team)",
    "Custom field (Priority Rank)",
    "Custom field (Test Type)",
)


# -- Helpers --


def get_template(key: str) -> TemplateDefinition:
    """Return a template by key. Raises KeyError if not found."""
    for template in TEMPLATES:
        if template.key == key:
            return template
    raise KeyError(f"Unknown template: {key!r}")


def template_keys() -> tuple[str, ...]:
    """Return all template keys in registration order."""
    return tuple(t.key for t in TEMPLATES)


def kind_of(title: str) -> str | None:
    """Return the template key whose title matches *title* exactly, or None."""
    for template in TEMPLATES:
        if template.title == title:
            return template.key
    return None


def fields_of(key: str) -> tuple[FieldDefinition, ...]:
    return get_template(key).fields


def canonical_field_order() -> tuple[str, ...]:
    """All field labels across all kinds, first-seen order, no duplicates.

    Orders labels a kind does not define (see field_position). Export
    columns follow EXPORT_PRIORITY_COLUMNS and then the alphabet instead.
    """
    seen: dict[str, None] = {}
    for template in TEMPLATES:
        for f in template.fields:
            seen.setdefault(f.label, None)
    return tuple(seen)


def column_for(label: str) -> str:
    return LABEL_TO_COLUMN.get(label, label)


def source_columns(label: str) -> tuple[str, ...]:
    """Tracker columns that may carry *label* on import, in lookup order."""
    primary = column_for(label)
    names = [primary, *SOURCE_ALIASES.get(label, ())]
    if label not in names:
        names.append(label)
    return tuple(names)


def field_position(key: str, label: str) -> int:
    """Layout slot of *label* within kind *key*.

    A synthesized Description takes the slot of the first label of the
    kind's field group. Labels from other kinds follow the kind's own, in
    canonical order; labels no kind defines sort last.
    """
    template = get_template(key)
    labels = template.labels()
    if label in labels:
        return labels.index(label)
    if label == "Description" and template.field_group:
        return labels.index(template.field_group[0])
    canonical = canonical_field_order()
    if label in canonical:
        return len(labels) + canonical.index(label)
    return len(labels) + len(canonical)


def order_fields(key: str, fields) -> tuple[Field, ...]:
    """Stable-sort *fields* into the canonical order of kind *key*."""
    return tuple(sorted(fields, key=lambda f: field_position(key, f.label)))


def default_card(key: str) -> Card:
    """A fresh, locally created card with every field at its default."""
    template = get_template(key)
    return Card(
        kind=key,
        title=template.title,
        fields=tuple(Field(f.label, f.default) for f in template.fields),
    )
