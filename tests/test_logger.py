"""Tests for verbosity levels and change reporting."""

import io
import logging
from datetime import date

import pytest

from roadmap_scheduler.logger import (
    CHANGES_LEVEL,
    CHECKS_LEVEL,
    get_logger,
    level_for_verbosity,
    setup_logger,
)
from roadmap_scheduler.scheduler.dates import assign_dates
from roadmap_scheduler.scheduler.estimation import DurationEstimator
from roadmap_scheduler.scheduler.ordering import plan_order
from tests.conftest import TODAY, make_item


class TestVerbosity:
    """Tests for mapping -v counts to logging levels."""

    @pytest.mark.parametrize(
        ("verbosity", "level"),
        [
            (0, logging.ERROR),
            (1, CHANGES_LEVEL),
            (2, CHECKS_LEVEL),
            (3, logging.DEBUG),
            (7, logging.DEBUG),
            (-1, logging.ERROR),
        ],
    )
    def test_level_for_verbosity(self, verbosity: int, level: int) -> None:
        assert level_for_verbosity(verbosity) == level

    def test_changes_shown_without_checks(self) -> None:
        stream = io.StringIO()
        setup_logger(1, stream)

        get_logger().changes("moved")
        get_logger().checks("considered")

        assert stream.getvalue() == "moved\n"

    def test_silent_hides_changes(self) -> None:
        stream = io.StringIO()
        setup_logger(0, stream)

        get_logger().changes("moved")

        assert stream.getvalue() == ""

    def test_warnings_are_tagged(self) -> None:
        stream = io.StringIO()
        setup_logger(1, stream)

        get_logger().warning("Skipping invalid artifact x.json")

        assert stream.getvalue() == "warning: Skipping invalid artifact x.json\n"


class TestChangeLines:
    """Tests for the shared order/date change format."""

    def test_order_change_for_new_item(self) -> None:
        stream = io.StringIO()
        setup_logger(1, stream)

        get_logger().order_change("#4", None, 2)

        assert stream.getvalue() == "  #4: order - -> 2\n"

    def test_date_change_with_reason(self) -> None:
        stream = io.StringIO()
        setup_logger(1, stream)

        get_logger().date_change("ATLAS-3", date(2025, 6, 2), date(2025, 6, 3), "new")

        assert stream.getvalue() == "  ATLAS-3: 2025-06-02 -> 2025-06-03 (new)\n"

    def test_planner_reports_moves(self) -> None:
        stream = io.StringIO()
        setup_logger(1, stream)

        plan_order([make_item(5, order=1)], make_item(3))

        assert stream.getvalue().splitlines() == ["  #3: order - -> 1", "  #5: order 1 -> 2"]

    def test_date_walk_reports_new_windows(self) -> None:
        stream = io.StringIO()
        setup_logger(1, stream)

        assign_dates([make_item(1, order=1)], DurationEstimator([]), TODAY)

        assert stream.getvalue() == "  #1: 2025-06-02 -> 2025-06-03 (new)\n"
