"""Protocol definitions for the collaborators around the scheduler."""

from typing import Protocol

from roadmap_scheduler.models import WorkItem

from .core import OrderChange, ScheduleChange


class SnapshotProvider(Protocol):
    """Source of the backlog snapshot (open and closed items)."""

    def fetch_snapshot(self) -> list[WorkItem]:
        """Fetch every item relevant to scheduling.

        Returns:
            List of work items, closed ones included for estimation

        Raises:
            SnapshotError: If the snapshot cannot be read
        """
        ...


class ChangeSink(Protocol):
    """Destination for computed changes."""

    def apply_order_changes(self, changes: list[OrderChange]) -> int:
        """Persist new backlog positions.

        Returns:
            Number of items updated
        """
        ...

    def apply_schedule_changes(self, changes: list[ScheduleChange]) -> int:
        """Persist new start/finish windows.

        Returns:
            Number of items updated
        """
        ...
