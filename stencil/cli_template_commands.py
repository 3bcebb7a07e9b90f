"""Template CLI commands - plan, apply."""
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn

from stencil.core.errors import StencilError
from stencil.core.executor import Executor
from stencil.core.logger import get_logger
from stencil.core.pipeline import RunContext, build_plan
from stencil.core.planner import format_plan
from stencil.models.actions import Action, FileOperation

# Module-level console instance (will be set by register function)
console: Console = Console()

logger = get_logger("stencil.cli")


def _has_changes(actions: List[Action]) -> bool:
    return any(a.operation in (FileOperation.MKDIR, FileOperation.COPY_RAW) for a in actions)


def plan(
    source: str = typer.Argument(..., help="Template folder or git URL"),
    destination: Path = typer.Argument(..., help="Folder to create or update"),
    rev: Optional[str] = typer.Option(None, "--rev", "-r", help="Template revision (branch, tag or commit)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Show what would be created in DESTINATION.

    The destination is not modified. Remote templates are still fetched
    into the template cache.
    """
    from stencil.cli_support import handle_cli_error, load_cli_config, print_success

    settings = load_cli_config(console, config, log_file, verbose)

    try:
        ctx = RunContext(dst_folder=destination, src_uri=source, revision=rev, logger=logger)
        _template_root, actions = build_plan(ctx, settings)
    except StencilError as e:
        handle_cli_error(e, console, verbose)

    if not _has_changes(actions):
        print_success(console, "Destination is up to date with the template")
        return

    console.print(format_plan(actions))


def apply(
    source: str = typer.Argument(..., help="Template folder or git URL"),
    destination: Path = typer.Argument(..., help="Folder to create or update"),
    rev: Optional[str] = typer.Option(None, "--rev", "-r", help="Template revision (branch, tag or commit)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Create or update DESTINATION from the template.

    Existing files in the destination are never overwritten.
    """
    from stencil.cli_support import (
        confirm_action,
        handle_cli_error,
        load_cli_config,
        print_error,
        print_success,
        print_warning,
    )

    settings = load_cli_config(console, config, log_file, verbose)

    try:
        ctx = RunContext(dst_folder=destination, src_uri=source, revision=rev, logger=logger)
        _template_root, actions = build_plan(ctx, settings)
    except StencilError as e:
        handle_cli_error(e, console, verbose)

    if not _has_changes(actions):
        print_success(console, "Destination is up to date with the template")
        return

    console.print(format_plan(actions))

    if not confirm_action("\nDo you want to apply these changes?", yes_flag=yes):
        print_warning(console, "Apply cancelled")
        return

    try:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Applying", total=len(actions))
            Executor(on_progress=lambda _action: progress.advance(task), logger=logger).execute(actions)
    except StencilError as err:
        print_error(console, f"Apply failed: {err}")
        print_warning(console, "Actions applied before the failure were kept")
        if verbose:
            console.print_exception()
        raise typer.Exit(1) from err

    print_success(console, f"Apply complete: {destination}")


def register_template_commands(app: typer.Typer, shared_console: Console):
    """Register template commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(plan)
    app.command(name="diff")(plan)  # Alias for terraform-style workflow
    app.command()(apply)
