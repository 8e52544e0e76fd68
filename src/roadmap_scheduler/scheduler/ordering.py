"""Backlog ordering: place a target item and compute the minimal set of moves."""

from dataclasses import dataclass, field, replace
from typing import Any

from roadmap_scheduler.logger import get_logger
from roadmap_scheduler.models import WorkItem

from .core import Confidence, OrderChange, PlacementStrategy
from .scoring import classification_confidence, rank_items, score

logger = get_logger()


@dataclass(frozen=True)
class PlanEntry:
    """Desired position of one item in the new ordering."""

    item_id: int
    score: int
    desired_order: int


def _empty_changes() -> list[OrderChange]:
    return []


def _empty_entries() -> list[PlanEntry]:
    return []


@dataclass
class OrderingPlan:
    """Result of placing a target item in the backlog."""

    strategy: PlacementStrategy
    target: WorkItem
    recommended_order: int
    score: int
    confidence: Confidence
    desired_order: dict[int, int]
    changes: list[OrderChange] = field(default_factory=_empty_changes)
    entries: list[PlanEntry] = field(default_factory=_empty_entries)

    @property
    def is_noop(self) -> bool:
        return not self.changes

    @property
    def rationale(self) -> str:
        scope = self.target.scope.value if self.target.scope else "none"
        work_type = self.target.work_type.value if self.target.work_type else "none"
        milestone = self.target.milestone or "none"
        return (
            f"Item {self.target.display_id}: scope={scope}, type={work_type}, "
            f"milestone={milestone}, score={self.score}. Strategy: {self.strategy.value}. "
            f"Changes required: {len(self.changes)}."
        )

    def to_dict(self) -> dict[str, Any]:
        """Serializable form, used for printing and decision artifacts."""
        return {
            "strategy": self.strategy.value,
            "item": self.target.id,
            "recommended_order": self.recommended_order,
            "changes": len(self.changes),
            "confidence": self.confidence.value,
            "score": self.score,
            "rationale": self.rationale,
            "diff": [change.to_dict() for change in self.changes],
            "plan": [
                {"item_id": e.item_id, "score": e.score, "desired_order": e.desired_order}
                for e in self.entries
            ],
            "metadata": {
                "scope": self.target.scope.value if self.target.scope else None,
                "type": self.target.work_type.value if self.target.work_type else None,
                "milestone": self.target.milestone,
            },
        }


class OrderingPlanner:
    """Places a target item into the current backlog.

    Strategies:
    - append: end of the backlog
    - scope-block: right after the last item with the same scope (else append)
    - auto: full recompute by score with deterministic tie-breaks

    Only items whose position actually changes are reported, so the caller
    writes as little as possible back to the tracker.
    """

    def __init__(self, strategy: PlacementStrategy = PlacementStrategy.AUTO):
        self.strategy = strategy

    def plan(self, current_order: list[WorkItem], target: WorkItem) -> OrderingPlan:
        """Compute desired positions and the order changes for ``target``.

        Args:
            current_order: Backlog snapshot; items without an order are ignored
            target: Item to place (may already be in the backlog)

        Returns:
            OrderingPlan with desired positions and changes
        """
        ordered = sorted(
            (item for item in current_order if item.order is not None),
            key=lambda item: (item.order, item.id),
        )
        existing = next((item for item in ordered if item.id == target.id), None)
        recorded_order = existing.order if existing is not None else None
        target = replace(target, order=recorded_order)
        others = [item for item in ordered if item.id != target.id]

        if self.strategy == PlacementStrategy.AUTO:
            desired = self._recompute(others, target)
        else:
            desired = self._insert(others, target, recorded_order)

        recommended = desired[target.id]
        if recorded_order is not None and recommended == recorded_order:
            logger.checks(
                f"Item {target.display_id} already at position {recorded_order}; nothing to do"
            )
            changes: list[OrderChange] = []
        else:
            changes = [
                OrderChange(item.id, item.order, desired[item.id])
                for item in others
                if desired[item.id] != item.order
            ]
            changes.append(OrderChange(target.id, recorded_order, recommended))
            changes.sort(key=lambda change: (change.new_order, change.item_id))

        for change in changes:
            logger.order_change(f"#{change.item_id}", change.previous_order, change.new_order)

        scores = {item.id: score(item) for item in [*others, target]}
        entries = sorted(
            (PlanEntry(item_id, scores[item_id], pos) for item_id, pos in desired.items()),
            key=lambda entry: entry.desired_order,
        )

        return OrderingPlan(
            strategy=self.strategy,
            target=target,
            recommended_order=recommended,
            score=scores[target.id],
            confidence=classification_confidence(target),
            desired_order=desired,
            changes=changes,
            entries=entries,
        )

    def _recompute(self, others: list[WorkItem], target: WorkItem) -> dict[int, int]:
        """Sort everything by score and tie-break, then number from 1."""
        ranked = rank_items([*others, target])
        logger.checks(f"Recomputing order for {len(ranked)} items by score")
        return {item.id: position for position, item in enumerate(ranked, start=1)}

    def _insert(
        self, others: list[WorkItem], target: WorkItem, recorded_order: int | None
    ) -> dict[int, int]:
        """Insert the target at the strategy's position, shifting only items in its way."""
        orders: dict[int, int] = {}
        for item in others:
            assert item.order is not None
            position = item.order
            # Close the gap the target leaves behind when it is being moved
            if recorded_order is not None and position > recorded_order:
                position -= 1
            orders[item.id] = position

        position = len(others) + 1
        if self.strategy == PlacementStrategy.SCOPE_BLOCK and target.scope is not None:
            same_scope = [item for item in others if item.scope == target.scope]
            if same_scope:
                last = max(same_scope, key=lambda item: orders[item.id])
                position = orders[last.id] + 1
                logger.checks(
                    f"Scope block for {target.scope.value}: after {last.display_id} "
                    f"at position {orders[last.id]}"
                )
            else:
                logger.checks(f"No other {target.scope.value} items; appending")

        desired = dict(orders)
        # Only the run of items occupying consecutive positions from the
        # insertion point moves down; a gap absorbs the shift
        free = position
        for item_id, order in sorted(orders.items(), key=lambda pair: (pair[1], pair[0])):
            if order < position:
                continue
            if order > free:
                break
            free += 1
            desired[item_id] = free
        desired[target.id] = position
        return desired


def plan_order(
    current_order: list[WorkItem],
    target: WorkItem,
    strategy: PlacementStrategy = PlacementStrategy.AUTO,
) -> OrderingPlan:
    """Convenience wrapper around OrderingPlanner."""
    return OrderingPlanner(strategy).plan(current_order, target)
