"""Pydantic schemas for backlog YAML data validation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class WorkItemSchema(BaseModel):
    """Schema for one backlog item."""

    id: int = Field(..., gt=0)
    title: str = ""
    labels: list[str] = Field(default_factory=list)
    scope: str | None = None  # Overrides any scope label
    type: str | None = None  # Overrides any type label
    milestone: str | None = None
    state: str | None = None
    status: str | None = None
    order: int | None = Field(default=None, gt=0)
    start: date | None = None
    finish: date | None = None
    created_at: datetime | None = None
    closed_at: datetime | None = None
    key: str | None = None

    @field_validator("labels", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure value is a list."""
        if v is None:
            return []
        if isinstance(v, list):
            return [str(item) for item in v]  # type: ignore[misc]
        return [str(v)]

    @field_validator("milestone", mode="before")
    @classmethod
    def coerce_milestone_to_string(cls, v: Any) -> str | None:
        """Milestones like ``M1`` stay strings; bare numbers are stringified."""
        if v is None:
            return None
        return str(v)


class BacklogSchema(BaseModel):
    """Schema for the entire backlog YAML file."""

    items: list[WorkItemSchema] = Field(default_factory=list)
