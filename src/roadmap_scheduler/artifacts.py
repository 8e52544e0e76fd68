"""Ordering decision artifacts.

Each ``order`` run can save its plan as a JSON file. Reading them back lets
us spot manual overrides: someone moving an item shortly after automation
placed it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from .logger import get_logger
from .scheduler.ordering import OrderingPlan

logger = get_logger()

DEFAULT_KEEP = 200
OVERRIDE_WINDOW_HOURS = 24


@dataclass
class OrderingArtifact:
    """A saved ordering decision."""

    path: Path
    item_id: int
    recommended_order: int
    applied: bool
    timestamp: datetime
    data: dict[str, Any]


@dataclass(frozen=True)
class Override:
    """A later decision that moved an item soon after an applied one."""

    item_id: int
    previous_order: int
    manual_order: int
    hours_since_automation: float
    automation_timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "previous_order": self.previous_order,
            "manual_order": self.manual_order,
            "hours_since_automation": self.hours_since_automation,
            "automation_timestamp": self.automation_timestamp.isoformat(),
        }


def _now() -> datetime:
    return datetime.now(timezone.utc)


def artifact_filename(item_id: int, timestamp: datetime) -> str:
    return f"{timestamp.strftime('%Y%m%dT%H%M%S')}-item-{item_id}.json"


def write_artifact(
    path: Path | str,
    plan: OrderingPlan,
    applied: bool,
    timestamp: datetime | None = None,
) -> Path:
    """Save an ordering plan as a JSON artifact.

    If ``path`` is an existing directory a timestamped file is created inside it.

    Returns:
        Path of the written file
    """
    timestamp = timestamp or _now()
    path = Path(path)
    if path.is_dir():
        path = path / artifact_filename(plan.target.id, timestamp)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = plan.to_dict()
    data["applied"] = applied
    data["timestamp"] = timestamp.isoformat()

    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")

    logger.checks(f"Wrote ordering artifact {path}")
    return path


def _parse_artifact(path: Path) -> OrderingArtifact:
    with path.open(encoding="utf-8") as f:
        data: Any = json.load(f)
    if not isinstance(data, dict):
        raise ValueError("artifact is not a JSON object")

    timestamp = datetime.fromisoformat(str(data["timestamp"]))
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    return OrderingArtifact(
        path=path,
        item_id=int(data["item"]),
        recommended_order=int(data["recommended_order"]),
        applied=bool(data.get("applied", False)),
        timestamp=timestamp,
        data=data,
    )


def load_artifacts(
    directory: Path | str,
    days_back: int | None = None,
    now: datetime | None = None,
) -> list[OrderingArtifact]:
    """Load artifacts from ``directory``, newest first.

    Invalid files are skipped with a warning. With ``days_back`` only
    artifacts newer than ``now - days_back`` are returned.
    """
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning(f"Artifact directory not found: {directory}")
        return []

    artifacts: list[OrderingArtifact] = []
    for path in sorted(directory.glob("*.json")):
        try:
            artifacts.append(_parse_artifact(path))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Skipping invalid artifact {path.name}: {e}")

    if days_back is not None and days_back > 0:
        cutoff = (now or _now()) - timedelta(days=days_back)
        artifacts = [a for a in artifacts if a.timestamp >= cutoff]

    artifacts.sort(key=lambda a: a.timestamp, reverse=True)
    return artifacts


def detect_overrides(artifacts: list[OrderingArtifact]) -> list[Override]:
    """Find manual overrides among consecutive decisions for the same item.

    An override is a decision whose recommended order differs from an
    applied decision made at most 24 hours earlier.
    """
    by_item: dict[int, list[OrderingArtifact]] = {}
    for artifact in artifacts:
        by_item.setdefault(artifact.item_id, []).append(artifact)

    overrides: list[Override] = []
    for item_id, history in sorted(by_item.items()):
        history.sort(key=lambda a: a.timestamp, reverse=True)
        for current, previous in zip(history, history[1:]):
            if not previous.applied:
                continue
            if current.recommended_order == previous.recommended_order:
                continue
            hours = (current.timestamp - previous.timestamp).total_seconds() / 3600
            if 0 <= hours <= OVERRIDE_WINDOW_HOURS:
                overrides.append(
                    Override(
                        item_id=item_id,
                        previous_order=previous.recommended_order,
                        manual_order=current.recommended_order,
                        hours_since_automation=round(hours, 1),
                        automation_timestamp=previous.timestamp,
                    )
                )
    return overrides


def prune_artifacts(directory: Path | str, keep: int = DEFAULT_KEEP) -> int:
    """Delete all but the ``keep`` most recently modified artifacts.

    Returns:
        Number of files deleted
    """
    directory = Path(directory)
    if not directory.is_dir():
        return 0

    files = sorted(directory.glob("*.json"), key=lambda p: p.stat().st_mtime, reverse=True)
    stale = files[keep:]
    if stale:
        logger.checks(f"Pruning {len(stale)} old artifact file(s) (keep={keep})")
    for path in stale:
        path.unlink()
    return len(stale)
