"""Core dataclasses for estimation, ordering and date assignment."""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum
from typing import Any

from roadmap_scheduler.models import Scope, WorkItem, WorkType


class Confidence(str, Enum):
    """Trust level of an estimate or ordering decision."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EstimateBasis(str, Enum):
    """Which sample grouping an estimate came from."""

    SCOPE_TYPE = "scope-type"
    SCOPE = "scope"
    GLOBAL = "global"
    FALLBACK = "fallback"

    @property
    def confidence(self) -> Confidence:
        if self == EstimateBasis.SCOPE_TYPE:
            return Confidence.HIGH
        if self == EstimateBasis.FALLBACK:
            return Confidence.LOW
        return Confidence.MEDIUM


class PlacementStrategy(str, Enum):
    """How the ordering planner places a target item."""

    AUTO = "auto"  # Full recompute by score
    APPEND = "append"  # End of the backlog
    SCOPE_BLOCK = "scope-block"  # Right after the last item of the same scope


class ScheduleReason(str, Enum):
    """Which date-assignment branch produced a change."""

    NEW = "new"
    PARTIAL_FILL = "partial-fill"
    SHIFT_FORWARD = "shift-forward"
    OVERDUE_SHIFT = "overdue-shift"
    EXTEND_IN_PROGRESS = "extend-in-progress"
    ADJUST_IN_PROGRESS = "adjust-in-progress"
    START_IN_PROGRESS = "start-in-progress"
    FINISH_INFER = "finish-infer"


@dataclass(frozen=True)
class HistoricalSample:
    """Duration of one completed item, keyed by its classification."""

    scope: Scope | None
    work_type: WorkType | None
    duration_days: int


@dataclass(frozen=True)
class DurationEstimate:
    """Estimated duration for a classification key.

    ``confidence`` follows from ``basis`` and cannot be set on its own.
    """

    duration_days: float
    basis: EstimateBasis
    sample_size: int
    exact_key_sample_count: int = 0
    scope_sample_count: int = 0
    global_sample_count: int = 0
    exact_key_median: float | None = None
    scope_median: float | None = None
    global_median: float | None = None

    @property
    def confidence(self) -> Confidence:
        return self.basis.confidence

    @property
    def planned_days(self) -> int:
        """Whole days to plan with: median rounded half-up, at least 1."""
        return max(1, int(self.duration_days + 0.5))

    def to_dict(self) -> dict[str, Any]:
        return {
            "duration_days": self.duration_days,
            "planned_days": self.planned_days,
            "confidence": self.confidence.value,
            "basis": self.basis.value,
            "sample_size": self.sample_size,
            "exact_key_sample_count": self.exact_key_sample_count,
            "scope_sample_count": self.scope_sample_count,
            "global_sample_count": self.global_sample_count,
        }


@dataclass(frozen=True)
class ScheduleChange:
    """A new start/finish window for one item."""

    item_id: int
    new_start: date
    new_finish: date
    reason: ScheduleReason
    previous_start: date | None = None
    previous_finish: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "start": self.new_start.isoformat(),
            "finish": self.new_finish.isoformat(),
            "reason": self.reason.value,
            "previous_start": self.previous_start.isoformat() if self.previous_start else None,
            "previous_finish": self.previous_finish.isoformat() if self.previous_finish else None,
        }


@dataclass(frozen=True)
class OrderChange:
    """A backlog position move. ``previous_order`` is None for an insertion."""

    item_id: int
    previous_order: int | None
    new_order: int

    def to_dict(self) -> dict[str, Any]:
        return {"item_id": self.item_id, "from": self.previous_order, "to": self.new_order}


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def inclusive_days(start: date, finish: date) -> int:
    """Inclusive length of ``start..finish``; inverted ranges count as 1 day."""
    return max(1, (finish - start).days + 1)


def apply_order_changes(items: list[WorkItem], changes: list[OrderChange]) -> list[WorkItem]:
    """Return a new snapshot with the order changes applied."""
    new_orders = {change.item_id: change.new_order for change in changes}
    return [
        replace(item, order=new_orders[item.id]) if item.id in new_orders else item
        for item in items
    ]


def apply_schedule_changes(
    items: list[WorkItem], changes: list[ScheduleChange]
) -> list[WorkItem]:
    """Return a new snapshot with the date changes applied."""
    by_id = {change.item_id: change for change in changes}
    result: list[WorkItem] = []
    for item in items:
        change = by_id.get(item.id)
        if change is None:
            result.append(item)
        else:
            result.append(replace(item, start=change.new_start, finish=change.new_finish))
    return result
