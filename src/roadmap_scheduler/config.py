"""Configuration file loading (roadmap_config.yaml).

A single optional YAML file holds scheduler defaults, decision-artifact
settings and the Jira tracker connection.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError
from .scheduler.core import PlacementStrategy
from .scheduler.estimation import DEFAULT_DURATION_DAYS
from .tracker.jira_config import JiraConfig


class SchedulerConfig(BaseModel):
    """Defaults for estimation and ordering."""

    default_duration_days: int = Field(default=DEFAULT_DURATION_DAYS, ge=1)
    default_strategy: PlacementStrategy = PlacementStrategy.AUTO


class ArtifactsConfig(BaseModel):
    """Where ordering decision artifacts are kept."""

    directory: Path | None = None
    keep: int = Field(default=200, ge=1)


class RoadmapConfig(BaseModel):
    """Top-level configuration."""

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    artifacts: ArtifactsConfig = Field(default_factory=ArtifactsConfig)
    jira: JiraConfig | None = None


def load_config(config_path: Path | str) -> RoadmapConfig:
    """Load and validate a configuration file.

    Args:
        config_path: Path to roadmap_config.yaml

    Returns:
        Validated RoadmapConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse config {config_path}: {e}") from e

    if data is None:
        return RoadmapConfig()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {config_path} must contain a mapping at the root level")

    try:
        return RoadmapConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid config {config_path}: {e}") from e


def load_config_or_default(config_path: Path | None) -> RoadmapConfig:
    """Load ``config_path`` if given, otherwise return the defaults."""
    if config_path is None:
        return RoadmapConfig()
    return load_config(config_path)
