"""Jira-backed snapshot provider and change sink."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, cast

from roadmap_scheduler.logger import get_logger
from roadmap_scheduler.models import LifecycleState, WorkItem, classify_labels
from roadmap_scheduler.scheduler.core import OrderChange, ScheduleChange

from .jira_client import JiraClient, TrackerError
from .jira_config import JiraConfig

logger = get_logger()

_BASE_FIELDS = ["summary", "labels", "status", "fixVersions", "created", "resolutiondate"]
_TZ_NO_COLON_RE = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_jira_datetime(value: str | None) -> datetime | None:
    """Parse Jira timestamps such as ``2024-01-05T10:00:00.000+0000``."""
    if not value:
        return None
    normalized = _TZ_NO_COLON_RE.sub(r"\1:\2", value.replace("Z", "+00:00"))
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        logger.warning(f"Ignoring unparsable Jira timestamp: {value}")
        return None


def parse_jira_date(value: Any) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        logger.warning(f"Ignoring unparsable Jira date: {value}")
        return None


def issue_number(issue: dict[str, Any]) -> int:
    """Numeric item id: the number in ``PROJ-123``, else Jira's internal id."""
    key = cast(str, issue.get("key", ""))
    _, _, number = key.rpartition("-")
    if number.isdigit():
        return int(number)
    return int(issue["id"])


class JiraTracker:
    """Reads the backlog from a JQL query and writes order and dates back."""

    def __init__(self, config: JiraConfig, client: JiraClient | None = None):
        self.config = config
        self.client = client or JiraClient(config.base_url)
        self._keys: dict[int, str] = {}

    def _field_ids(self) -> tuple[str, str, str]:
        names = self.config.fields
        return (
            self.client.field_id(names.order),
            self.client.field_id(names.start),
            self.client.field_id(names.finish),
        )

    def fetch_snapshot(self) -> list[WorkItem]:
        order_id, start_id, finish_id = self._field_ids()
        issues = self.client.search_issues(
            self.config.jql,
            [*_BASE_FIELDS, order_id, start_id, finish_id],
            page_size=self.config.page_size,
        )

        items: list[WorkItem] = []
        self._keys = {}
        for issue in issues:
            item = self._issue_to_item(issue, order_id, start_id, finish_id)
            if item.id in self._keys:
                raise TrackerError(
                    f"Issues {self._keys[item.id]} and {item.key} map to the same id {item.id}"
                )
            self._keys[item.id] = cast(str, item.key)
            items.append(item)

        logger.checks(f"Fetched {len(items)} issues from Jira")
        return items

    def _issue_to_item(
        self, issue: dict[str, Any], order_id: str, start_id: str, finish_id: str
    ) -> WorkItem:
        fields = cast(dict[str, Any], issue.get("fields", {}))
        labels = [str(label) for label in fields.get("labels") or []]
        scope, work_type = classify_labels(labels, self.config.scope_label_prefix)

        status_obj = cast(dict[str, Any], fields.get("status") or {})
        category = cast(dict[str, Any], status_obj.get("statusCategory") or {})
        status = self.config.map_status(status_obj.get("name"), category.get("key"))

        versions = cast(list[dict[str, Any]], fields.get("fixVersions") or [])
        milestone = cast(str, versions[0].get("name")) if versions else None

        closed_at = parse_jira_datetime(fields.get("resolutiondate"))
        order = fields.get(order_id)

        return WorkItem(
            id=issue_number(issue),
            title=cast(str, fields.get("summary", "")),
            scope=scope,
            work_type=work_type,
            milestone=milestone,
            state=LifecycleState.CLOSED if closed_at else LifecycleState.OPEN,
            status=status,
            order=int(order) if order is not None else None,
            start=parse_jira_date(fields.get(start_id)),
            finish=parse_jira_date(fields.get(finish_id)),
            created_at=parse_jira_datetime(fields.get("created")),
            closed_at=closed_at,
            key=cast(str, issue.get("key")),
            labels=tuple(labels),
        )

    def _key_for(self, item_id: int) -> str:
        try:
            return self._keys[item_id]
        except KeyError:
            raise TrackerError(f"Item {item_id} was not part of the fetched snapshot") from None

    def apply_order_changes(self, changes: list[OrderChange]) -> int:
        order_id = self.client.field_id(self.config.fields.order)
        for change in changes:
            key = self._key_for(change.item_id)
            self.client.update_issue_fields(key, {order_id: change.new_order})
            logger.order_change(key, change.previous_order, change.new_order)
        return len(changes)

    def apply_schedule_changes(self, changes: list[ScheduleChange]) -> int:
        start_id = self.client.field_id(self.config.fields.start)
        finish_id = self.client.field_id(self.config.fields.finish)
        for change in changes:
            key = self._key_for(change.item_id)
            self.client.update_issue_fields(
                key,
                {
                    start_id: change.new_start.isoformat(),
                    finish_id: change.new_finish.isoformat(),
                },
            )
            logger.date_change(key, change.new_start, change.new_finish)
        return len(changes)
