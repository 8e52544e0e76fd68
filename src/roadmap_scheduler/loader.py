"""Backlog file loading and round-trip writing.

A backlog file is a YAML document with an ``items`` list. It serves as both
the snapshot provider and the change sink for local use; writes go through
ruamel.yaml so comments and key order survive.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML

from .exceptions import ParseError, SnapshotError, ValidationError
from .logger import get_logger
from .models import (
    SCOPE_LABEL_PREFIX,
    LifecycleState,
    Scope,
    WorkItem,
    WorkStatus,
    WorkType,
    classify_labels,
    parse_scope_label,
    parse_type_label,
)
from .scheduler.core import OrderChange, ScheduleChange
from .schemas import BacklogSchema, WorkItemSchema

logger = get_logger()

DEFAULT_BACKLOG_NAME = "backlog.yaml"


def _explicit_scope(value: str, item_id: int) -> Scope:
    scope = parse_scope_label(value, "") or parse_scope_label(value)
    if scope is None:
        raise ValidationError(f"Item {item_id} has unknown scope '{value}'")
    return scope


def _explicit_type(value: str, item_id: int) -> WorkType:
    work_type = parse_type_label(value)
    if work_type is None:
        raise ValidationError(f"Item {item_id} has unknown type '{value}'")
    return work_type


def item_from_schema(schema: WorkItemSchema, scope_prefix: str = SCOPE_LABEL_PREFIX) -> WorkItem:
    """Build a WorkItem, classifying it from labels unless scope/type are explicit."""
    scope, work_type = classify_labels(schema.labels, scope_prefix)
    if schema.scope is not None:
        scope = _explicit_scope(schema.scope, schema.id)
    if schema.type is not None:
        work_type = _explicit_type(schema.type, schema.id)

    return WorkItem(
        id=schema.id,
        title=schema.title,
        scope=scope,
        work_type=work_type,
        milestone=schema.milestone,
        state=LifecycleState.parse(schema.state),
        status=WorkStatus.parse(schema.status),
        order=schema.order,
        start=schema.start,
        finish=schema.finish,
        created_at=schema.created_at,
        closed_at=schema.closed_at,
        key=schema.key,
        labels=tuple(schema.labels),
    )


def parse_backlog(data: Any, scope_prefix: str = SCOPE_LABEL_PREFIX) -> list[WorkItem]:
    """Validate already-parsed YAML data and convert it to work items.

    Raises:
        ValidationError: On schema errors or duplicate item ids
    """
    if data is None:
        return []
    if not isinstance(data, dict):
        raise ValidationError("Backlog must contain a mapping with an 'items' list")

    try:
        schema = BacklogSchema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid backlog: {e}") from e

    items: list[WorkItem] = []
    seen: set[int] = set()
    for item_schema in schema.items:
        if item_schema.id in seen:
            raise ValidationError(f"Duplicate item id {item_schema.id}")
        seen.add(item_schema.id)
        items.append(item_from_schema(item_schema, scope_prefix))
    return items


def load_backlog(path: Path | str, scope_prefix: str = SCOPE_LABEL_PREFIX) -> list[WorkItem]:
    """Load and validate a backlog YAML file.

    Raises:
        ParseError: If the file is missing or is not valid YAML
        ValidationError: If the contents do not describe a valid backlog
    """
    path = Path(path)
    if not path.exists():
        raise ParseError(f"File not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse YAML: {e}") from e

    items = parse_backlog(data, scope_prefix)
    logger.debug(f"Loaded {len(items)} items from {path}")
    return items


class BacklogFile:
    """A backlog YAML file used as snapshot provider and change sink."""

    def __init__(self, path: Path | str, scope_prefix: str = SCOPE_LABEL_PREFIX):
        self.path = Path(path)
        self.scope_prefix = scope_prefix

    def fetch_snapshot(self) -> list[WorkItem]:
        try:
            return load_backlog(self.path, self.scope_prefix)
        except ParseError as e:
            raise SnapshotError(str(e)) from e

    def apply_order_changes(self, changes: list[OrderChange]) -> int:
        updates: dict[int, dict[str, Any]] = {
            change.item_id: {"order": change.new_order} for change in changes
        }
        return self._write_updates(updates)

    def apply_schedule_changes(self, changes: list[ScheduleChange]) -> int:
        updates: dict[int, dict[str, Any]] = {
            change.item_id: {
                "start": change.new_start,
                "finish": change.new_finish,
            }
            for change in changes
        }
        return self._write_updates(updates)

    def _write_updates(self, updates: dict[int, dict[str, Any]]) -> int:
        """Write field updates in place, preserving the file's formatting.

        Returns:
            Number of items updated

        Raises:
            SnapshotError: If the file cannot be read or an item is missing
        """
        if not updates:
            return 0

        yaml_rt = YAML()
        yaml_rt.preserve_quotes = True  # type: ignore[assignment]

        try:
            with self.path.open(encoding="utf-8") as f:
                data: Any = yaml_rt.load(f)  # type: ignore[no-untyped-call]
        except OSError as e:
            raise SnapshotError(f"Cannot read backlog {self.path}: {e}") from e

        if not isinstance(data, dict) or "items" not in data:
            raise SnapshotError(f"No 'items' list found in {self.path}")

        entries = {entry.get("id"): entry for entry in data["items"] or []}
        missing = [item_id for item_id in updates if item_id not in entries]
        if missing:
            raise SnapshotError(
                f"Items not found in {self.path}: {', '.join(str(i) for i in sorted(missing))}"
            )

        updated = 0
        for item_id, fields in updates.items():
            entry = entries[item_id]
            changed = False
            for key, value in fields.items():
                if entry.get(key) != value:
                    entry[key] = value
                    changed = True
            if changed:
                updated += 1

        with self.path.open("w", encoding="utf-8") as f:
            yaml_rt.dump(data, f)  # type: ignore[no-untyped-call]

        logger.changes(f"Updated {updated} items in {self.path}")
        return updated
