"""Git integration CLI commands for template working copies."""
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from stencil.core.errors import StencilError
from stencil.core.logger import get_logger
from stencil.models.repository import MergeAnalysis
from stencil.services.git.config_reader import GitConfigReader, resolve_tool
from stencil.services.git.retriever import TemplateRetriever

# Module-level console instance (will be set by register function)
console: Console = Console()

logger = get_logger("stencil.cli")

MERGE_MESSAGES = {
    MergeAnalysis.UP_TO_DATE: "Already up to date",
    MergeAnalysis.FAST_FORWARD: "Fast-forwarded to the fetched revision",
    MergeAnalysis.NORMAL: "Merged the fetched revision",
}


def fetch(
    url: str = typer.Argument(..., help="Template git URL"),
    destination: Path = typer.Argument(..., help="Working copy folder"),
    rev: Optional[str] = typer.Option(None, "--rev", "-r", help="Revision (branch, tag or commit)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Clone or update a template working copy.

    Local changes in DESTINATION are discarded.
    """
    from stencil.cli_support import (
        handle_cli_error,
        load_cli_config,
        print_info,
        print_success,
        print_warning,
    )

    settings = load_cli_config(console, config, log_file, verbose)
    revision = rev or settings.default_revision

    retriever = TemplateRetriever(
        signature=settings.signature,
        remote_name=settings.remote_name,
        logger=logger,
    )
    try:
        analysis = retriever.retrieve(destination, url, revision)
    except StencilError as e:
        handle_cli_error(e, console, verbose)

    if analysis is None:
        print_success(console, f"Cloned {url} ({revision}) into {destination}")
    elif analysis == MergeAnalysis.CONFLICTED:
        print_warning(console, f"Merge conflicts in {destination}; resolve them manually")
        print_info(console, "Run 'stencil tool merge' to see the configured merge tool")
    else:
        print_success(console, f"{MERGE_MESSAGES[analysis]}: {destination}")


def tool(
    kind: str = typer.Argument(..., help="Tool kind: merge or diff"),
):
    """Show the merge or diff tool command configured in git."""
    from stencil.cli_support import handle_cli_error

    try:
        command = resolve_tool(kind, GitConfigReader())
    except (StencilError, ValueError) as e:
        handle_cli_error(e, console)

    console.print(command, markup=False, highlight=False)


def register_git_commands(app: typer.Typer, shared_console: Console):
    """Register git commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(fetch)
    app.command()(tool)
