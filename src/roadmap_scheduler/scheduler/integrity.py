"""Backlog order integrity: positions must be unique and contiguous from 1."""

from collections import Counter
from dataclasses import dataclass, field

from roadmap_scheduler.models import WorkItem


@dataclass(frozen=True)
class PositionMismatch:
    """A slot in the sorted backlog that does not hold its expected position."""

    expected: int
    found: int
    item_id: int


def _empty_ints() -> list[int]:
    return []


def _empty_mismatches() -> list[PositionMismatch]:
    return []


@dataclass
class IntegrityReport:
    """Outcome of an integrity check."""

    total_items: int
    duplicates: list[int] = field(default_factory=_empty_ints)
    gaps: list[int] = field(default_factory=_empty_ints)
    mismatches: list[PositionMismatch] = field(default_factory=_empty_mismatches)

    @property
    def is_contiguous(self) -> bool:
        return not self.duplicates and not self.gaps


def check_integrity(items: list[WorkItem]) -> IntegrityReport:
    """Check that ordered items occupy exactly positions 1..N.

    Items without an order are ignored. ``gaps`` lists each expected position
    the sorted sequence does not hold at its slot.
    """
    ordered = sorted(
        (item for item in items if item.order is not None),
        key=lambda item: (item.order, item.id),
    )
    counts = Counter(item.order for item in ordered)
    duplicates = sorted(order for order, count in counts.items() if count > 1 and order is not None)

    mismatches: list[PositionMismatch] = []
    for expected, item in enumerate(ordered, start=1):
        assert item.order is not None
        if item.order != expected:
            mismatches.append(
                PositionMismatch(expected=expected, found=item.order, item_id=item.id)
            )

    return IntegrityReport(
        total_items=len(ordered),
        duplicates=duplicates,
        gaps=[m.expected for m in mismatches],
        mismatches=mismatches,
    )
