#!/usr/bin/env python3
"""
connimport - Bulk connection import preprocessing

A CLI tool for validating bulk connection import files and converting them
into connection creation patches.
"""

import typer
from rich.console import Console

from . import __version__
from .commands import config, connections

app = typer.Typer(
    help="Connection import tool - validate CSV, YAML and JSON connection lists and convert them into creation patches.",
    add_completion=True,
    no_args_is_help=True,
)
console = Console()

# Add subcommands
app.add_typer(connections.app, name="connections")
app.add_typer(config.app, name="config")


@app.command()
def version():
    """Show the application version and exit."""
    console.print(f"connimport version: {__version__}")
    raise typer.Exit()


if __name__ == "__main__":
    app()
