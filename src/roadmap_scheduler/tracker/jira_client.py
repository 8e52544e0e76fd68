"""Jira API client wrapper."""

from __future__ import annotations

import netrc
import os
from pathlib import Path
from typing import Any, cast
from urllib.parse import urlparse

from atlassian import Jira
from dotenv import load_dotenv

from roadmap_scheduler.exceptions import RoadmapError
from roadmap_scheduler.logger import get_logger

# Load environment variables from .env file
load_dotenv()

logger = get_logger()


class TrackerError(RoadmapError):
    """Issue tracker error."""


class TrackerAuthError(TrackerError):
    """Issue tracker authentication error."""


def credentials_from_netrc(base_url: str) -> tuple[str | None, str | None]:
    """Look up ``(login, password)`` for the URL's host in ~/.netrc.

    Returns ``(None, None)`` when there is no file, no entry, or the file
    cannot be parsed; .netrc is only a fallback source.
    """
    parsed = urlparse(base_url)
    hostname = parsed.netloc or parsed.path.split("/")[0]
    if not hostname:
        return None, None

    netrc_path = Path.home() / (".netrc" if os.name != "nt" else "_netrc")
    if not netrc_path.exists():
        return None, None

    try:
        auth = netrc.netrc(str(netrc_path)).authenticators(hostname)
    except (netrc.NetrcParseError, OSError) as e:
        logger.debug(f"Ignoring unreadable {netrc_path}: {e}")
        return None, None

    if auth:
        login, _, password = auth
        return login, password
    return None, None


class JiraClient:
    """Wrapper around the Jira API for reading and updating backlog issues."""

    def __init__(self, base_url: str, email: str | None = None, api_token: str | None = None):
        """Initialize Jira client.

        Credentials are taken from the arguments, then the JIRA_EMAIL and
        JIRA_API_TOKEN environment variables, then ~/.netrc.

        Args:
            base_url: Jira instance base URL
            email: User email for authentication
            api_token: API token

        Raises:
            TrackerAuthError: If credentials are missing
        """
        self.base_url = base_url.rstrip("/")
        self.email = email or os.getenv("JIRA_EMAIL")
        self.api_token = api_token or os.getenv("JIRA_API_TOKEN")
        self._field_name_to_id: dict[str, str] | None = None

        if not self.email or not self.api_token:
            netrc_email, netrc_token = credentials_from_netrc(self.base_url)
            self.email = self.email or netrc_email
            self.api_token = self.api_token or netrc_token

        if not self.email or not self.api_token:
            raise TrackerAuthError(
                "Jira credentials not found. Set JIRA_EMAIL and JIRA_API_TOKEN "
                "environment variables or add the host to ~/.netrc."
            )

        try:
            self.client = Jira(
                url=self.base_url,
                username=self.email,
                password=self.api_token,
                cloud=True,
            )
        except Exception as e:
            raise TrackerError(f"Failed to initialize Jira client: {e}") from e

    def search_issues(
        self, jql: str, fields: list[str], page_size: int = 100
    ) -> list[dict[str, Any]]:
        """Run a JQL query and return every matching issue, following pagination.

        Raises:
            TrackerError: If a page cannot be fetched
        """
        issues: list[dict[str, Any]] = []
        start = 0
        while True:
            try:
                page_raw = self.client.jql(  # type: ignore[reportUnknownMemberType]
                    jql, fields=",".join(fields), start=start, limit=page_size
                )
            except Exception as e:
                raise TrackerError(f"Failed to search issues: {e}") from e

            page = cast(dict[str, Any], page_raw)
            batch = cast(list[dict[str, Any]], page.get("issues", []))
            issues.extend(batch)
            total = int(page.get("total", len(issues)))
            logger.debug(f"Fetched {len(issues)}/{total} issues")

            if not batch or len(issues) >= total:
                return issues
            start += len(batch)

    def field_id(self, field_name: str) -> str:
        """Resolve a field display name to its Jira field id.

        Raises:
            TrackerError: If no field has that name
        """
        mappings = self._get_field_mappings()
        if field_name in mappings:
            return mappings[field_name]
        if field_name in mappings.values():
            return field_name
        raise TrackerError(f"Jira field not found: {field_name}")

    def update_issue_fields(self, issue_key: str, fields: dict[str, Any]) -> None:
        """Write field values (keyed by field id) to an issue.

        Raises:
            TrackerError: If the update fails
        """
        try:
            self.client.update_issue_field(issue_key, fields)  # type: ignore[reportUnknownMemberType]
        except Exception as e:
            raise TrackerError(f"Failed to update issue {issue_key}: {e}") from e

    def _get_field_mappings(self) -> dict[str, str]:
        """Get mapping of field display names to field IDs (cached)."""
        if self._field_name_to_id is not None:
            return self._field_name_to_id

        try:
            # Type ignore: atlassian-python-api lacks complete type stubs
            fields_raw = self.client.get_all_fields()  # type: ignore[reportUnknownMemberType]
            fields = cast(list[dict[str, Any]], fields_raw)  # type: ignore[reportUnknownVariableType]
        except Exception as e:
            raise TrackerError(f"Failed to fetch field mappings: {e}") from e

        mapping: dict[str, str] = {}
        for field in fields:
            name = cast(str, field.get("name", ""))
            field_id = cast(str, field.get("id", ""))
            if name and field_id:
                mapping[name] = field_id

        self._field_name_to_id = mapping
        return mapping
