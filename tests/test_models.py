"""Tests for work item models and label classification."""

import pytest

from roadmap_scheduler.models import (
    LifecycleState,
    Scope,
    WorkStatus,
    WorkType,
    classify_labels,
    milestone_number,
    parse_scope_label,
    parse_type_label,
)
from tests.conftest import make_item


class TestLabels:
    """Tests for scope and type label parsing."""

    def test_scope_label(self) -> None:
        assert parse_scope_label("scope:core") == Scope.CORE
        assert parse_scope_label("Scope:AI") == Scope.AI
        assert parse_scope_label("scope:unknown") is None
        assert parse_scope_label("core") is None

    def test_custom_scope_prefix(self) -> None:
        assert parse_scope_label("area/world", "area/") == Scope.WORLD

    @pytest.mark.parametrize(
        ("label", "expected"),
        [
            ("feature", WorkType.FEATURE),
            ("type:infra", WorkType.INFRA),
            ("documentation", WorkType.DOCS),
            ("bug", None),
        ],
    )
    def test_type_label(self, label: str, expected: WorkType | None) -> None:
        assert parse_type_label(label) == expected

    def test_highest_priority_scope_wins(self) -> None:
        scope, work_type = classify_labels(["scope:devx", "scope:traversal", "feature", "spike"])

        assert scope == Scope.TRAVERSAL
        assert work_type == WorkType.FEATURE

    def test_unclassified(self) -> None:
        assert classify_labels(["good first issue"]) == (None, None)


class TestParsing:
    """Tests for state, status and milestone parsing."""

    def test_lifecycle_state(self) -> None:
        assert LifecycleState.parse("CLOSED") == LifecycleState.CLOSED
        assert LifecycleState.parse("reopened") == LifecycleState.OPEN
        assert LifecycleState.parse(None) == LifecycleState.OPEN

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("In Progress", WorkStatus.IN_PROGRESS),
            ("in_progress", WorkStatus.IN_PROGRESS),
            ("Done", WorkStatus.DONE),
            ("Todo", WorkStatus.NOT_STARTED),
            (None, WorkStatus.NOT_STARTED),
        ],
    )
    def test_work_status(self, value: str | None, expected: WorkStatus) -> None:
        assert WorkStatus.parse(value) == expected

    def test_milestone_number(self) -> None:
        assert milestone_number("M4") == 4
        assert milestone_number("m10 launch") == 10
        assert milestone_number("Q3") is None
        assert milestone_number(None) is None


class TestWorkItem:
    """Tests for derived WorkItem properties."""

    def test_finished_when_closed_or_done(self) -> None:
        assert make_item(1, state=LifecycleState.CLOSED).is_finished
        assert make_item(2, status=WorkStatus.DONE).is_finished
        assert not make_item(3, status=WorkStatus.IN_PROGRESS).is_finished

    def test_display_id(self) -> None:
        assert make_item(12).display_id == "#12"
        assert make_item(12, key="ATLAS-12").display_id == "ATLAS-12"
