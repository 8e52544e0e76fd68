"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from roadmap_scheduler.cli import app
from roadmap_scheduler.loader import load_backlog

runner = CliRunner()

BACKLOG = """\
items:
  - id: 1
    title: Docs refresh
    labels: [scope:devx, docs]
    order: 1
  - id: 2
    title: Agent memory
    labels: [scope:ai, feature]
    order: 2
  - id: 3
    title: World persistence
    labels: [scope:core, feature]
    milestone: M0
"""


@pytest.fixture
def backlog_path(tmp_path: Path) -> Path:
    path = tmp_path / "backlog.yaml"
    path.write_text(BACKLOG, encoding="utf-8")
    return path


class TestOrderCommand:
    """Test the order CLI command."""

    def test_dry_run_prints_plan(self, backlog_path: Path) -> None:
        result = runner.invoke(app, ["order", "3", str(backlog_path)])

        assert result.exit_code == 0
        plan = json.loads(result.stdout)
        assert plan["recommended_order"] == 1
        assert plan["strategy"] == "auto"
        assert plan["diff"] == [
            {"item_id": 3, "from": None, "to": 1},
            {"item_id": 1, "from": 1, "to": 3},
        ]
        # Dry run leaves the file alone
        assert backlog_path.read_text(encoding="utf-8") == BACKLOG

    def test_apply_writes_orders(self, backlog_path: Path) -> None:
        result = runner.invoke(
            app, ["order", "3", str(backlog_path), "--strategy", "append", "--apply"]
        )

        assert result.exit_code == 0
        orders = {item.id: item.order for item in load_backlog(backlog_path)}
        assert orders == {1: 1, 2: 2, 3: 3}

    def test_artifact_written(self, backlog_path: Path, tmp_path: Path) -> None:
        artifact_dir = tmp_path / "artifacts"
        artifact_dir.mkdir()

        result = runner.invoke(
            app, ["order", "3", str(backlog_path), "--artifact", str(artifact_dir)]
        )

        assert result.exit_code == 0
        files = list(artifact_dir.glob("*.json"))
        assert len(files) == 1
        data = json.loads(files[0].read_text(encoding="utf-8"))
        assert data["applied"] is False
        assert data["item"] == 3

    def test_noop(self, backlog_path: Path) -> None:
        result = runner.invoke(app, ["order", "2", str(backlog_path), "--strategy", "append"])

        assert result.exit_code == 0
        assert "nothing to do" in result.output

    def test_unknown_target_exits_with_usage_error(self, backlog_path: Path) -> None:
        result = runner.invoke(app, ["order", "99", str(backlog_path)])

        assert result.exit_code == 2
        assert "Item 99 not found" in result.output

    def test_unknown_strategy(self, backlog_path: Path) -> None:
        result = runner.invoke(app, ["order", "3", str(backlog_path), "--strategy", "random"])

        assert result.exit_code == 2

    def test_missing_backlog(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["order", "3", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_jira_without_config(self, backlog_path: Path) -> None:
        result = runner.invoke(app, ["order", "3", str(backlog_path), "--jira"])

        assert result.exit_code == 2
        assert "'jira' section" in result.output


class TestScheduleCommand:
    """Test the schedule CLI command."""

    def test_dry_run(self, backlog_path: Path) -> None:
        result = runner.invoke(app, ["schedule", str(backlog_path), "--today", "2025-06-02"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["today"] == "2025-06-02"
        assert [(c["item_id"], c["start"], c["finish"]) for c in data["changes"]] == [
            (1, "2025-06-02", "2025-06-03"),
            (2, "2025-06-04", "2025-06-05"),
        ]

    def test_apply_is_idempotent(self, backlog_path: Path) -> None:
        args = ["schedule", str(backlog_path), "--today", "2025-06-02", "--apply"]
        assert runner.invoke(app, args).exit_code == 0

        result = runner.invoke(app, ["schedule", str(backlog_path), "--today", "2025-06-02"])

        assert json.loads(result.stdout)["changes"] == []

    def test_invalid_today(self, backlog_path: Path) -> None:
        result = runner.invoke(app, ["schedule", str(backlog_path), "--today", "June 2nd"])

        assert result.exit_code == 2
        assert "YYYY-MM-DD" in result.output

    def test_config_fallback_duration(self, backlog_path: Path, tmp_path: Path) -> None:
        (tmp_path / "roadmap_config.yaml").write_text(
            "scheduler:\n  default_duration_days: 4\n", encoding="utf-8"
        )

        result = runner.invoke(app, ["schedule", str(backlog_path), "--today", "2025-06-02"])

        changes = json.loads(result.stdout)["changes"]
        assert changes[0]["finish"] == "2025-06-05"

    def test_invalid_config(self, backlog_path: Path, tmp_path: Path) -> None:
        config = tmp_path / "custom.yaml"
        config.write_text("scheduler:\n  default_duration_days: 0\n", encoding="utf-8")

        result = runner.invoke(app, ["--config", str(config), "schedule", str(backlog_path)])

        assert result.exit_code == 2
        assert "Invalid config" in result.output


class TestRunCommand:
    """Test the run CLI command."""

    def test_orders_then_schedules(self, backlog_path: Path) -> None:
        result = runner.invoke(
            app, ["run", "3", str(backlog_path), "--today", "2025-06-02", "--apply"]
        )

        assert result.exit_code == 0
        items = {item.id: item for item in load_backlog(backlog_path)}
        assert items[3].order == 1
        assert str(items[3].start) == "2025-06-02"
        assert str(items[2].start) == "2025-06-04"
        assert str(items[1].start) == "2025-06-06"


class TestEstimateCommand:
    """Test the estimate CLI command."""

    def test_fallback_estimate(self, backlog_path: Path) -> None:
        result = runner.invoke(
            app, ["estimate", str(backlog_path), "--scope", "core", "--type", "feature"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["duration_days"] == 2
        assert data["confidence"] == "low"
        assert data["basis"] == "fallback"
        assert data["scope"] == "core"


class TestCheckCommand:
    """Test the check CLI command."""

    def test_contiguous(self, backlog_path: Path) -> None:
        result = runner.invoke(app, ["check", str(backlog_path)])

        assert result.exit_code == 0
        assert "Order is contiguous" in result.stdout

    def test_violations_exit_nonzero(self, tmp_path: Path) -> None:
        path = tmp_path / "backlog.yaml"
        path.write_text(
            "items:\n  - {id: 1, order: 1}\n  - {id: 2, order: 1}\n  - {id: 3, order: 4}\n",
            encoding="utf-8",
        )

        result = runner.invoke(app, ["check", str(path)])

        assert result.exit_code == 1
        assert "Duplicate positions: 1" in result.stdout
        assert "position 3: found 4 (item #3)" in result.stdout


class TestOverridesCommand:
    """Test the overrides CLI command."""

    def test_reports_overrides(self, tmp_path: Path) -> None:
        (tmp_path / "a.json").write_text(
            json.dumps(
                {
                    "item": 5,
                    "recommended_order": 2,
                    "applied": True,
                    "timestamp": "2025-06-01T08:00:00+00:00",
                }
            ),
            encoding="utf-8",
        )
        (tmp_path / "b.json").write_text(
            json.dumps(
                {
                    "item": 5,
                    "recommended_order": 4,
                    "applied": False,
                    "timestamp": "2025-06-01T10:00:00+00:00",
                }
            ),
            encoding="utf-8",
        )

        result = runner.invoke(app, ["overrides", str(tmp_path)])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["artifacts"] == 2
        assert data["overrides"][0]["manual_order"] == 4
        assert data["overrides"][0]["hours_since_automation"] == 2.0
