"""Pytest configuration and fixtures for roadmap scheduler tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime, timedelta
from typing import Any

import pytest

from roadmap_scheduler import context
from roadmap_scheduler.logger import reset_logger
from roadmap_scheduler.models import (
    LifecycleState,
    Scope,
    WorkItem,
    WorkStatus,
    WorkType,
)

TODAY = date(2025, 6, 2)


@pytest.fixture(autouse=True)
def reset_global_state() -> Iterator[None]:
    """Clear logger handlers and the --config path between tests."""
    reset_logger()
    context.set_config_path(None)
    yield
    reset_logger()
    context.set_config_path(None)


def make_item(item_id: int, **kwargs: Any) -> WorkItem:
    """Build a WorkItem with sensible defaults for tests."""
    return WorkItem(id=item_id, title=kwargs.pop("title", f"Item {item_id}"), **kwargs)


def closed_item(
    item_id: int,
    scope: Scope | None,
    work_type: WorkType | None,
    duration_days: int,
    start: date = date(2025, 1, 6),
) -> WorkItem:
    """A completed item whose inclusive start..finish span is ``duration_days``."""
    return make_item(
        item_id,
        scope=scope,
        work_type=work_type,
        state=LifecycleState.CLOSED,
        status=WorkStatus.DONE,
        start=start,
        finish=start + timedelta(days=duration_days - 1),
    )


def elapsed_item(item_id: int, created: datetime, closed: datetime) -> WorkItem:
    """A closed item with only creation/closure timestamps."""
    return make_item(
        item_id,
        state=LifecycleState.CLOSED,
        created_at=created,
        closed_at=closed,
    )
