"""Jira tracker configuration schema."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from roadmap_scheduler.models import SCOPE_LABEL_PREFIX, WorkStatus


class JiraFieldNames(BaseModel):
    """Display names of the Jira fields the scheduler reads and writes."""

    order: str = Field(default="Implementation order", description="Number field for position")
    start: str = Field(default="Start date", description="Date field for the window start")
    finish: str = Field(default="Finish", description="Date field for the window finish")


class JiraConfig(BaseModel):
    """Complete Jira tracker configuration."""

    base_url: str = Field(..., description="Jira instance base URL")
    jql: str = Field(..., description="Query selecting the backlog issues (open and closed)")
    fields: JiraFieldNames = Field(default_factory=JiraFieldNames)
    status_map: dict[str, WorkStatus] = Field(
        default_factory=dict,
        description="Map Jira status names to work statuses (overrides status categories)",
    )
    scope_label_prefix: str = SCOPE_LABEL_PREFIX
    page_size: int = Field(default=100, gt=0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Ensure base_url doesn't have trailing slash."""
        return v.rstrip("/")

    def map_status(self, status_name: str | None, category_key: str | None) -> WorkStatus:
        """Resolve a Jira status to a WorkStatus.

        Explicit ``status_map`` entries win; otherwise the status category
        decides (done -> done, indeterminate -> in-progress, else not started).
        """
        if status_name and status_name in self.status_map:
            return self.status_map[status_name]
        if category_key == "done":
            return WorkStatus.DONE
        if category_key == "indeterminate":
            return WorkStatus.IN_PROGRESS
        return WorkStatus.parse(status_name)
