"""High-level roadmap service."""

from dataclasses import dataclass
from datetime import date

from roadmap_scheduler.exceptions import ConfigurationError
from roadmap_scheduler.logger import get_logger
from roadmap_scheduler.models import Scope, WorkItem, WorkType

from .core import (
    DurationEstimate,
    OrderChange,
    PlacementStrategy,
    ScheduleChange,
    apply_order_changes,
)
from .dates import SequentialDateAssigner
from .estimation import DEFAULT_DURATION_DAYS, DurationEstimator
from .integrity import IntegrityReport, check_integrity
from .ordering import OrderingPlan, OrderingPlanner

logger = get_logger()


@dataclass
class RunResult:
    """Outcome of ordering a target and then rescheduling the backlog."""

    plan: OrderingPlan
    order_changes: list[OrderChange]
    schedule_changes: list[ScheduleChange]
    items: list[WorkItem]


class RoadmapService:
    """Ties estimation, ordering and date assignment to one backlog snapshot.

    The service never mutates the snapshot it was given; ``run`` works on a
    reordered copy.
    """

    def __init__(
        self,
        items: list[WorkItem],
        today: date | None = None,
        default_duration_days: float = DEFAULT_DURATION_DAYS,
        default_strategy: PlacementStrategy = PlacementStrategy.AUTO,
    ):
        """Initialize the service.

        Args:
            items: Backlog snapshot, closed items included
            today: Current date (defaults to today)
            default_duration_days: Estimate used when history is too thin
            default_strategy: Placement strategy when none is given
        """
        self.items = list(items)
        self.today = today or date.today()  # noqa: DTZ011
        self.default_strategy = default_strategy
        self.estimator = DurationEstimator.from_items(self.items, default_duration_days)
        logger.debug(
            f"Snapshot: {len(self.items)} items, "
            f"{len(self.estimator.samples)} historical samples"
        )

    def find_item(self, item_id: int) -> WorkItem:
        """Look up an item by id.

        Raises:
            ConfigurationError: If no item has that id
        """
        for item in self.items:
            if item.id == item_id:
                return item
        raise ConfigurationError(f"Item {item_id} not found in backlog snapshot")

    def plan_order(
        self, target_id: int, strategy: PlacementStrategy | None = None
    ) -> OrderingPlan:
        """Plan where ``target_id`` goes in the backlog."""
        target = self.find_item(target_id)
        strategy = strategy or self.default_strategy
        logger.checks(f"Placing {target.display_id} with strategy {strategy.value}")
        return OrderingPlanner(strategy).plan(self.items, target)

    def schedule(self, items: list[WorkItem] | None = None) -> list[ScheduleChange]:
        """Assign dates to the snapshot (or to ``items``, e.g. a reordered copy)."""
        assigner = SequentialDateAssigner(self.estimator, self.today)
        return assigner.assign(self.items if items is None else items)

    def estimate(self, scope: Scope | None, work_type: WorkType | None) -> DurationEstimate:
        """Estimate the duration for a classification from this snapshot's history."""
        return self.estimator.estimate(scope, work_type)

    def check_integrity(self) -> IntegrityReport:
        """Check the snapshot's backlog positions."""
        return check_integrity(self.items)

    def run(self, target_id: int, strategy: PlacementStrategy | None = None) -> RunResult:
        """Place ``target_id``, then schedule the reordered backlog."""
        plan = self.plan_order(target_id, strategy)
        reordered = apply_order_changes(self.items, plan.changes)
        schedule_changes = self.schedule(reordered)
        return RunResult(
            plan=plan,
            order_changes=list(plan.changes),
            schedule_changes=schedule_changes,
            items=reordered,
        )
