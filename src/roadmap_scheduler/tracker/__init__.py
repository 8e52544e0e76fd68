"""Issue tracker integration (Jira)."""

from .jira_client import JiraClient, TrackerAuthError, TrackerError
from .jira_config import JiraConfig, JiraFieldNames
from .jira_tracker import JiraTracker

__all__ = [
    "JiraClient",
    "JiraConfig",
    "JiraFieldNames",
    "JiraTracker",
    "TrackerAuthError",
    "TrackerError",
]
