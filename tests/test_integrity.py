"""Tests for backlog order integrity checks."""

from roadmap_scheduler.scheduler.integrity import PositionMismatch, check_integrity
from tests.conftest import make_item


class TestCheckIntegrity:
    """Tests for duplicate and gap detection."""

    def test_contiguous_backlog(self) -> None:
        report = check_integrity([make_item(i, order=i) for i in (1, 2, 3)])

        assert report.is_contiguous
        assert report.total_items == 3
        assert report.duplicates == []
        assert report.gaps == []

    def test_unordered_items_ignored(self) -> None:
        report = check_integrity([make_item(1, order=1), make_item(2)])

        assert report.is_contiguous
        assert report.total_items == 1

    def test_duplicate_positions(self) -> None:
        items = [make_item(1, order=1), make_item(2, order=2), make_item(3, order=2)]

        report = check_integrity(items)

        assert not report.is_contiguous
        assert report.duplicates == [2]
        assert report.mismatches == [PositionMismatch(expected=3, found=2, item_id=3)]

    def test_gap_in_positions(self) -> None:
        items = [make_item(1, order=1), make_item(2, order=3), make_item(3, order=4)]

        report = check_integrity(items)

        assert not report.is_contiguous
        assert report.duplicates == []
        assert report.gaps == [2, 3]

    def test_not_starting_at_one(self) -> None:
        report = check_integrity([make_item(1, order=2)])

        assert report.gaps == [1]

    def test_empty_backlog(self) -> None:
        report = check_integrity([])

        assert report.is_contiguous
        assert report.total_items == 0
