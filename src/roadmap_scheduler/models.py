"""Data models for backlog work items."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

SCOPE_LABEL_PREFIX = "scope:"
TYPE_LABEL_PREFIX = "type:"

_MILESTONE_RE = re.compile(r"^M(\d+)", re.IGNORECASE)


class Scope(str, Enum):
    """Subsystem a work item belongs to, declared in priority order (highest first)."""

    CORE = "core"
    WORLD = "world"
    TRAVERSAL = "traversal"
    AI = "ai"
    SECURITY = "security"
    MCP = "mcp"
    SYSTEMS = "systems"
    OBSERVABILITY = "observability"
    DEVX = "devx"

    @property
    def priority_index(self) -> int:
        """0-based position in the priority list."""
        return list(Scope).index(self)


class WorkType(str, Enum):
    """Kind of work."""

    FEATURE = "feature"
    INFRA = "infra"
    SECURITY = "security"
    ENHANCEMENT = "enhancement"
    SPIKE = "spike"
    REFACTOR = "refactor"
    DOCS = "docs"
    TEST = "test"


# Label spellings accepted for each type, beyond the enum value itself
_TYPE_ALIASES = {"documentation": WorkType.DOCS}


class LifecycleState(str, Enum):
    """Tracker lifecycle of an item."""

    OPEN = "open"
    CLOSED = "closed"

    @classmethod
    def parse(cls, value: str | None) -> LifecycleState:
        """Parse a tracker state; anything other than 'closed' is open."""
        if value and value.strip().lower() == cls.CLOSED.value:
            return cls.CLOSED
        return cls.OPEN


class WorkStatus(str, Enum):
    """Progress status, independent of the lifecycle state."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    DONE = "done"

    @classmethod
    def parse(cls, value: str | None) -> WorkStatus:
        """Parse a board status such as 'Todo', 'In Progress' or 'Done'.

        Unknown or missing statuses count as not started.
        """
        if not value:
            return cls.NOT_STARTED
        normalized = re.sub(r"[\s_]+", "-", value.strip().lower())
        if normalized == cls.IN_PROGRESS.value:
            return cls.IN_PROGRESS
        if normalized == cls.DONE.value:
            return cls.DONE
        return cls.NOT_STARTED


def parse_scope_label(label: str, prefix: str = SCOPE_LABEL_PREFIX) -> Scope | None:
    """Map a ``scope:<name>`` label to a Scope, or None if it is not one."""
    label = label.strip().lower()
    if not label.startswith(prefix):
        return None
    try:
        return Scope(label[len(prefix) :])
    except ValueError:
        return None


def parse_type_label(label: str) -> WorkType | None:
    """Map ``feature`` or ``type:feature`` style labels to a WorkType."""
    label = label.strip().lower()
    if label.startswith(TYPE_LABEL_PREFIX):
        label = label[len(TYPE_LABEL_PREFIX) :]
    if label in _TYPE_ALIASES:
        return _TYPE_ALIASES[label]
    try:
        return WorkType(label)
    except ValueError:
        return None


def classify_labels(
    labels: list[str] | tuple[str, ...], scope_prefix: str = SCOPE_LABEL_PREFIX
) -> tuple[Scope | None, WorkType | None]:
    """Pick the scope and type out of a label list.

    When several scope labels are present the highest-priority one wins; for
    types the first recognised label wins. Unrecognised labels are ignored.
    """
    scopes = [s for s in (parse_scope_label(label, scope_prefix) for label in labels) if s]
    types = [t for t in (parse_type_label(label) for label in labels) if t]
    scope = min(scopes, key=lambda s: s.priority_index) if scopes else None
    return scope, (types[0] if types else None)


def milestone_number(tag: str | None) -> int | None:
    """Extract ``n`` from a milestone tag starting with ``M<n>``."""
    if not tag:
        return None
    match = _MILESTONE_RE.match(tag.strip())
    if not match:
        return None
    return int(match.group(1))


def _empty_labels() -> tuple[str, ...]:
    return ()


@dataclass(frozen=True)
class WorkItem:
    """A schedulable unit of work as read from the tracker snapshot."""

    id: int
    title: str = ""
    scope: Scope | None = None
    work_type: WorkType | None = None
    milestone: str | None = None
    state: LifecycleState = LifecycleState.OPEN
    status: WorkStatus = WorkStatus.NOT_STARTED
    order: int | None = None
    start: date | None = None
    finish: date | None = None
    created_at: datetime | None = None
    closed_at: datetime | None = None
    key: str | None = None  # Tracker-native key, e.g. "ATLAS-12"
    labels: tuple[str, ...] = field(default_factory=_empty_labels)

    @property
    def is_closed(self) -> bool:
        return self.state == LifecycleState.CLOSED

    @property
    def is_done(self) -> bool:
        return self.status == WorkStatus.DONE

    @property
    def is_finished(self) -> bool:
        """Closed or done; either one removes the item from scheduling."""
        return self.is_closed or self.is_done

    @property
    def is_in_progress(self) -> bool:
        return self.status == WorkStatus.IN_PROGRESS

    @property
    def display_id(self) -> str:
        return self.key or f"#{self.id}"
