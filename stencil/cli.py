#!/usr/bin/env python3
"""Stencil CLI - create and update project folders from templates."""

import typer
from rich.console import Console

from stencil.cli_git_commands import register_git_commands
from stencil.cli_template_commands import register_template_commands

app = typer.Typer(
    name="stencil",
    help="""Stencil - create and update project folders from templates

Templates are local folders or git repositories. Existing files are never overwritten.

Quick start:
  stencil plan <template> <dest>    # See what will be created
  stencil apply <template> <dest>   # Make it happen

More commands: stencil --help
""",
    add_completion=False,
)

console = Console()

# Attach modular subcommands
register_template_commands(app, console)
register_git_commands(app, console)

if __name__ == "__main__":
    app()
