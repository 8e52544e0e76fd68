"""Custom exceptions for the roadmap scheduler."""


class RoadmapError(Exception):
    """Base exception for all roadmap scheduler errors."""

    pass


class ConfigurationError(RoadmapError):
    """Raised for invalid input or configuration (unknown target, bad strategy, bad config)."""

    pass


class ValidationError(RoadmapError):
    """Raised when a backlog snapshot is structurally invalid."""

    pass


class ParseError(RoadmapError):
    """Raised when YAML parsing fails."""

    pass


class SnapshotError(RoadmapError):
    """Raised when a snapshot cannot be fetched or changes cannot be persisted."""

    pass
