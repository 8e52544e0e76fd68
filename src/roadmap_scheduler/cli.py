"""Command-line interface for the roadmap scheduler."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Annotated, Any, Protocol

import typer

from . import context
from .artifacts import detect_overrides, load_artifacts, prune_artifacts, write_artifact
from .config import RoadmapConfig, load_config_or_default
from .exceptions import ConfigurationError, ParseError, RoadmapError, ValidationError
from .loader import DEFAULT_BACKLOG_NAME, BacklogFile
from .logger import setup_logger
from .models import SCOPE_LABEL_PREFIX, Scope, WorkType
from .scheduler import (
    ChangeSink,
    OrderingPlan,
    PlacementStrategy,
    RoadmapService,
    ScheduleChange,
    SnapshotProvider,
)
from .tracker import JiraTracker

EXIT_FAILURE = 1
EXIT_USAGE = 2

app = typer.Typer(
    name="roadmap",
    help="Order a backlog by priority and assign sequential start/finish dates",
    add_completion=False,
)

BacklogArg = Annotated[
    Path, typer.Argument(help="Path to the backlog YAML file (ignored with --jira)")
]
TargetArg = Annotated[int, typer.Argument(help="Id of the item to place")]
StrategyOpt = Annotated[
    PlacementStrategy | None,
    typer.Option("--strategy", "-s", help="Placement strategy (default from config: auto)"),
]
TodayOpt = Annotated[
    str | None, typer.Option("--today", help="Scheduling date in YYYY-MM-DD (default: today)")
]
ApplyOpt = Annotated[
    bool, typer.Option("--apply", help="Write changes back (default is a dry run)")
]
JiraOpt = Annotated[bool, typer.Option("--jira", help="Use the Jira tracker from the config")]


class Source(SnapshotProvider, ChangeSink, Protocol):
    """Both snapshot provider and change sink."""


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help=f"Path to config file (default: {context.DEFAULT_CONFIG_NAME})",
        ),
    ] = None,
) -> None:
    """Global options for roadmap commands."""
    setup_logger(verbose)
    context.set_config_path(config)


@contextmanager
def _cli_errors() -> Iterator[None]:
    """Report errors on stderr and map them to exit codes."""
    try:
        yield
    except (ConfigurationError, ValidationError, ParseError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_USAGE) from None
    except RoadmapError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_FAILURE) from None


def _parse_date_option(date_str: str | None, option_name: str) -> date | None:
    """Parse a YYYY-MM-DD CLI option."""
    if date_str is None:
        return None
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        raise ConfigurationError(
            f"Invalid {option_name} '{date_str}'. Use YYYY-MM-DD format."
        ) from None


def _load_config(backlog: Path) -> RoadmapConfig:
    return load_config_or_default(context.resolve_config_path(backlog))


def _open_source(backlog: Path, use_jira: bool, config: RoadmapConfig) -> Source:
    if use_jira:
        if config.jira is None:
            raise ConfigurationError("--jira requires a 'jira' section in the config file")
        return JiraTracker(config.jira)
    prefix = config.jira.scope_label_prefix if config.jira else SCOPE_LABEL_PREFIX
    return BacklogFile(backlog, prefix)


def _build_service(
    items_source: SnapshotProvider, config: RoadmapConfig, today: date | None = None
) -> RoadmapService:
    return RoadmapService(
        items_source.fetch_snapshot(),
        today=today,
        default_duration_days=config.scheduler.default_duration_days,
        default_strategy=config.scheduler.default_strategy,
    )


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


def _save_artifact(
    plan: OrderingPlan, applied: bool, artifact: Path | None, config: RoadmapConfig
) -> None:
    target = artifact or config.artifacts.directory
    if target is None:
        return
    written = write_artifact(target, plan, applied)
    prune_artifacts(written.parent, config.artifacts.keep)


def _schedule_dict(changes: list[ScheduleChange]) -> list[dict[str, Any]]:
    return [change.to_dict() for change in changes]


@app.command()
def order(  # noqa: PLR0913 - CLI command needs multiple options
    target: TargetArg,
    backlog: BacklogArg = Path(DEFAULT_BACKLOG_NAME),
    *,
    strategy: StrategyOpt = None,
    apply: ApplyOpt = False,
    artifact: Annotated[
        Path | None,
        typer.Option("--artifact", help="Write the decision as JSON (file or directory)"),
    ] = None,
    jira: JiraOpt = False,
) -> None:
    """Place an item in the backlog and print the ordering plan."""
    with _cli_errors():
        config = _load_config(backlog)
        source = _open_source(backlog, jira, config)
        service = _build_service(source, config)
        plan = service.plan_order(target, strategy)

        _echo_json(plan.to_dict())

        applied = False
        if apply and not plan.is_noop:
            updated = source.apply_order_changes(plan.changes)
            applied = True
            typer.echo(f"Applied {updated} order change(s)", err=True)
        elif plan.is_noop:
            typer.echo(f"{plan.target.display_id} already in place; nothing to do", err=True)

        _save_artifact(plan, applied, artifact, config)


@app.command()
def schedule(
    backlog: BacklogArg = Path(DEFAULT_BACKLOG_NAME),
    *,
    today: TodayOpt = None,
    apply: ApplyOpt = False,
    jira: JiraOpt = False,
) -> None:
    """Assign start/finish dates to the ordered backlog."""
    with _cli_errors():
        current_date = _parse_date_option(today, "--today")
        config = _load_config(backlog)
        source = _open_source(backlog, jira, config)
        service = _build_service(source, config, current_date)
        changes = service.schedule()

        _echo_json({"today": service.today.isoformat(), "changes": _schedule_dict(changes)})

        if apply and changes:
            updated = source.apply_schedule_changes(changes)
            typer.echo(f"Applied {updated} date change(s)", err=True)


@app.command()
def run(  # noqa: PLR0913 - CLI command needs multiple options
    target: TargetArg,
    backlog: BacklogArg = Path(DEFAULT_BACKLOG_NAME),
    *,
    strategy: StrategyOpt = None,
    today: TodayOpt = None,
    apply: ApplyOpt = False,
    jira: JiraOpt = False,
) -> None:
    """Place an item, then reschedule the reordered backlog."""
    with _cli_errors():
        current_date = _parse_date_option(today, "--today")
        config = _load_config(backlog)
        source = _open_source(backlog, jira, config)
        service = _build_service(source, config, current_date)
        result = service.run(target, strategy)

        _echo_json(
            {
                "order": result.plan.to_dict(),
                "schedule": _schedule_dict(result.schedule_changes),
            }
        )

        if apply:
            if result.order_changes:
                source.apply_order_changes(result.order_changes)
            if result.schedule_changes:
                source.apply_schedule_changes(result.schedule_changes)
            typer.echo(
                f"Applied {len(result.order_changes)} order and "
                f"{len(result.schedule_changes)} date change(s)",
                err=True,
            )
        _save_artifact(result.plan, apply and not result.plan.is_noop, None, config)


@app.command()
def estimate(
    backlog: BacklogArg = Path(DEFAULT_BACKLOG_NAME),
    *,
    scope: Annotated[Scope | None, typer.Option("--scope", help="Scope to estimate")] = None,
    work_type: Annotated[
        WorkType | None, typer.Option("--type", help="Work type to estimate")
    ] = None,
    jira: JiraOpt = False,
) -> None:
    """Estimate a duration from the backlog's completed history."""
    with _cli_errors():
        config = _load_config(backlog)
        source = _open_source(backlog, jira, config)
        service = _build_service(source, config)
        result = service.estimate(scope, work_type)

        data = result.to_dict()
        data["scope"] = scope.value if scope else None
        data["type"] = work_type.value if work_type else None
        _echo_json(data)


@app.command()
def check(
    backlog: BacklogArg = Path(DEFAULT_BACKLOG_NAME),
    *,
    jira: JiraOpt = False,
) -> None:
    """Check that backlog positions are unique and contiguous from 1."""
    with _cli_errors():
        config = _load_config(backlog)
        source = _open_source(backlog, jira, config)
        report = _build_service(source, config).check_integrity()

    typer.echo(f"Checked {report.total_items} ordered items")
    if report.is_contiguous:
        typer.echo("Order is contiguous")
        return

    if report.duplicates:
        typer.echo(f"Duplicate positions: {', '.join(str(d) for d in report.duplicates)}")
    for mismatch in report.mismatches:
        typer.echo(
            f"  position {mismatch.expected}: found {mismatch.found} (item #{mismatch.item_id})"
        )
    raise typer.Exit(EXIT_FAILURE)


@app.command()
def overrides(
    directory: Annotated[Path, typer.Argument(help="Directory of ordering artifacts")],
    *,
    days_back: Annotated[
        int | None, typer.Option("--days-back", help="Only look at recent artifacts", min=1)
    ] = None,
) -> None:
    """Report manual order changes made soon after an applied decision."""
    artifacts = load_artifacts(directory, days_back=days_back)
    found = detect_overrides(artifacts)
    _echo_json(
        {
            "artifacts": len(artifacts),
            "overrides": [override.to_dict() for override in found],
        }
    )


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
