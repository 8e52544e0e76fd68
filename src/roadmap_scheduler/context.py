"""Process-wide CLI state and config file discovery."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_NAME = "roadmap_config.yaml"


class _Context:
    """State set once by the CLI callback and read by the commands."""

    def __init__(self) -> None:
        self.config_path: Path | None = None


_context = _Context()


def set_config_path(path: Path | None) -> None:
    """Record the config path given with ``--config``."""
    _context.config_path = path


def resolve_config_path(backlog_path: Path | None = None) -> Path | None:
    """Find the config file to use.

    Search order:
    1. Global ``--config`` path
    2. Backlog file directory / roadmap_config.yaml
    3. Current directory / roadmap_config.yaml

    An explicit ``--config`` is returned even if it does not exist, so the
    loader can report it.
    """
    if _context.config_path is not None:
        return _context.config_path

    if backlog_path is not None:
        candidate = Path(backlog_path).parent / DEFAULT_CONFIG_NAME
        if candidate.exists():
            return candidate

    cwd_candidate = Path(DEFAULT_CONFIG_NAME)
    if cwd_candidate.exists():
        return cwd_candidate

    return None
