"""Sequential start/finish assignment under single-resource capacity.

One forward pass over the backlog in order, carrying a single cursor: the
next free day. Finished items are skipped. In-progress items keep their
recorded start and only ever grow. Not-started items are slid forward past
the cursor (and past today) but never pulled earlier.
"""

from datetime import date
from typing import Protocol

from roadmap_scheduler.logger import get_logger
from roadmap_scheduler.models import WorkItem

from .core import DurationEstimate, ScheduleChange, ScheduleReason, add_days, inclusive_days

logger = get_logger()


class Estimator(Protocol):
    """Anything that can estimate a duration for an item."""

    def estimate_item(self, item: WorkItem) -> DurationEstimate: ...


class SequentialDateAssigner:
    """Assigns or corrects start/finish windows for an ordered backlog."""

    def __init__(self, estimator: Estimator, today: date):
        """Initialize the assigner.

        Args:
            estimator: Source of planned durations for items lacking dates
            today: Current date; the cursor starts here
        """
        self.estimator = estimator
        self.today = today

    def assign(self, items: list[WorkItem]) -> list[ScheduleChange]:
        """Walk the backlog and return the date changes it needs.

        Items without an order are not part of the backlog and are ignored.
        A change is only returned when start or finish actually differs.
        """
        ordered = sorted(
            (item for item in items if item.order is not None),
            key=lambda item: (item.order, item.id),
        )
        for item in items:
            if item.order is None:
                logger.checks(f"Skipping {item.display_id}: no backlog order")

        cursor = self.today
        changes: list[ScheduleChange] = []

        for item in ordered:
            if item.is_finished:
                logger.checks(f"Skipping {item.display_id}: {item.state.value}/{item.status.value}")
                continue

            if item.is_in_progress:
                start, finish, reason = self._in_progress_window(item)
            else:
                start, finish, reason = self._not_started_window(item, cursor)

            if start != item.start or finish != item.finish:
                change = ScheduleChange(
                    item_id=item.id,
                    new_start=start,
                    new_finish=finish,
                    reason=reason,
                    previous_start=item.start,
                    previous_finish=item.finish,
                )
                changes.append(change)
                logger.date_change(item.display_id, start, finish, reason.value)
            else:
                logger.checks(f"  {item.display_id} unchanged {start} -> {finish}")

            cursor = max(cursor, add_days(finish, 1))

        return changes

    def _planned_days(self, item: WorkItem) -> int:
        return self.estimator.estimate_item(item).planned_days

    def _in_progress_window(self, item: WorkItem) -> tuple[date, date, ScheduleReason]:
        """Recorded start is authoritative; finish is inferred or extended to today."""
        if item.start is not None and item.finish is not None:
            # An inverted range keeps its start and ends no earlier than it
            finish = max(item.finish, item.start)
            reason = ScheduleReason.ADJUST_IN_PROGRESS
            if self.today > finish:
                finish = self.today
                reason = ScheduleReason.EXTEND_IN_PROGRESS
            return item.start, finish, reason

        start = item.start if item.start is not None else self.today
        if item.finish is not None:
            finish = item.finish
        else:
            finish = add_days(start, self._planned_days(item) - 1)
        if self.today > finish:
            finish = self.today

        if item.start is None:
            reason = ScheduleReason.START_IN_PROGRESS
        else:
            reason = ScheduleReason.FINISH_INFER
        return start, finish, reason

    def _not_started_window(
        self, item: WorkItem, cursor: date
    ) -> tuple[date, date, ScheduleReason]:
        """Keep a valid future window; otherwise place the item at the cursor."""
        earliest = max(cursor, self.today)

        if item.start is not None and item.finish is not None:
            overdue = item.finish < self.today
            if not (item.start < cursor or overdue):
                return item.start, item.finish, ScheduleReason.SHIFT_FORWARD

            duration = inclusive_days(item.start, item.finish)
            # A start later than today (inverted, overdue range) is never moved back
            new_start = max(earliest, item.start)
            reason = ScheduleReason.OVERDUE_SHIFT if overdue else ScheduleReason.SHIFT_FORWARD
            return new_start, add_days(new_start, duration - 1), reason

        new_start = earliest
        if item.start is not None:
            new_start = max(new_start, item.start)
        finish = add_days(new_start, self._planned_days(item) - 1)
        if item.start is not None or item.finish is not None:
            return new_start, finish, ScheduleReason.PARTIAL_FILL
        return new_start, finish, ScheduleReason.NEW


def assign_dates(items: list[WorkItem], estimator: Estimator, today: date) -> list[ScheduleChange]:
    """Convenience wrapper around SequentialDateAssigner."""
    return SequentialDateAssigner(estimator, today).assign(items)
