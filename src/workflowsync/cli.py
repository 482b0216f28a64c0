"""Workflow Sync CLI entry point."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from workflowsync.config import DEFAULT_CONTAINER, DEFAULT_WORKFLOWS_DIR, WatchSettings
from workflowsync.update import (
    ComposeRuntime,
    SubprocessRunner,
    UpdateOutcome,
    UpdateResult,
    UpdateTrigger,
)
from workflowsync.watch import ChangeEvent, WatchTarget, select_detector

console = Console()

OUTCOME_STYLES = {
    UpdateOutcome.UPDATED: "[green]✓[/green]",
    UpdateOutcome.NOT_READY: "[red]✗[/red]",
    UpdateOutcome.COMPLETED_WITH_WARNINGS: "[yellow]![/yellow]",
    UpdateOutcome.ERROR: "[red]✗[/red]",
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )


def settings_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that builds WatchSettings."""
    options = [
        click.option(
            "--dir",
            "workflows_dir",
            type=click.Path(file_okay=False, path_type=Path),
            default=DEFAULT_WORKFLOWS_DIR,
            envvar="WORKFLOW_SYNC_DIR",
            show_default=True,
            help="Directory containing workflow JSON files",
        ),
        click.option(
            "--container",
            default=DEFAULT_CONTAINER,
            envvar="WORKFLOW_SYNC_CONTAINER",
            show_default=True,
            help="Compose service that imports the workflows",
        ),
        click.option("--db-service", default="postgres", envvar="WORKFLOW_SYNC_DB_SERVICE", show_default=True, help="Datastore compose service"),
        click.option("--db-user", default="n8n", envvar="WORKFLOW_SYNC_DB_USER", show_default=True, help="Datastore user"),
        click.option("--db-name", default="n8n", envvar="WORKFLOW_SYNC_DB_NAME", show_default=True, help="Datastore database"),
        click.option("--wait-timeout", default=30.0, show_default=True, help="Seconds to wait for the import to exit"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_settings(**values: Any) -> WatchSettings:
    """Validate CLI values into WatchSettings."""
    try:
        return WatchSettings(**values)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise click.BadParameter(errors) from e


def build_trigger(settings: WatchSettings) -> UpdateTrigger:
    return UpdateTrigger(ComposeRuntime(SubprocessRunner()), settings)


def print_result(result: UpdateResult) -> None:
    console.print(f"{OUTCOME_STYLES[result.outcome]} {result.message}")
    if result.duration_seconds is not None:
        console.print(f"[dim]  took {result.duration_seconds:.1f}s[/dim]")
    console.print()


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.version_option(package_name="workflow-sync")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Workflow Sync - re-import n8n workflows when their files change."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@cli.command()
@settings_options
@click.option("--poll", "force_polling", is_flag=True, help="Use polling instead of file notifications")
@click.option("--poll-interval", default=2.0, show_default=True, help="Polling interval in seconds")
def watch(force_polling: bool, poll_interval: float, **values: Any) -> None:
    """Watch workflow files and re-import on every change."""
    from workflowsync.service import WatchService

    settings = build_settings(force_polling=force_polling, poll_interval=poll_interval, **values)

    console.print(f"[bold]Watching workflow files in:[/bold] {settings.workflows_dir}")
    console.print(f"[bold]Container:[/bold] {settings.container}")
    if not settings.workflows_dir.is_dir():
        console.print("[yellow]Directory does not exist yet[/yellow]")

    target = WatchTarget(settings.workflows_dir, settings.suffix)
    detector = select_detector(
        target,
        force_polling=settings.force_polling,
        poll_interval=settings.poll_interval,
    )
    if detector.mode == "polling":
        console.print(f"[yellow]Using polling (checking every {settings.poll_interval:g} seconds)[/yellow]")
    else:
        console.print("[green]Using file system notifications[/green]")
    console.print("[dim]Press Ctrl+C to stop watching[/dim]\n")

    service = WatchService(detector, build_trigger(settings), on_result=print_result)
    try:
        service.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopping file watcher...[/yellow]")
    finally:
        service.stop()


@cli.command()
@settings_options
@click.argument("file", required=False, type=click.Path(dir_okay=False, path_type=Path))
def update(file: Path | None, **values: Any) -> None:
    """Run one import cycle now, optionally naming the FILE that changed."""
    settings = build_settings(**values)
    event = ChangeEvent(path=file) if file else None

    result = build_trigger(settings).handle(event)
    print_result(result)

    if not result.is_success:
        raise SystemExit(1)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
