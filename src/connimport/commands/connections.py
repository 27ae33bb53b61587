"""Connection import commands for connimport.

This module provides commands for validating bulk connection import files
and converting them into creation patches ready for submission to the REST
API. Group paths in the file are resolved against the connection group
tree of the target data source.

Commands:
    parse: Parse and validate a CSV, YAML or JSON connection list

File Format Requirements:
    CSV: header row naming the columns, e.g.
         name,protocol,group,users,groups,hostname (parameter),port (parameter)
         with users and groups given as semicolon-separated identifiers
    YAML/JSON: a list of connection objects, e.g.
         [{"name": "web-1", "protocol": "ssh", "group": "Sales/EU",
           "users": ["alice"], "parameters": {"hostname": "10.0.0.5"}}]

Group Placement:
    - "group" names a connection group path: ROOT/Sales/EU, /Sales/EU or Sales/EU
    - "parentIdentifier" names a connection group identifier directly
    - Only one of the two may be set on any connection

Examples:
    # Validate a CSV file against the server's group tree
    $ connimport connections parse connections.csv --profile production

    # Validate offline against an exported group tree
    $ connimport connections parse connections.yaml --tree-file tree.json

    # Write the creation patches for submission
    $ connimport connections parse connections.json --patch-file patches.json

    # Keep a JSON log of every record-level problem
    $ connimport connections parse connections.csv --log-file ~/.connimport/logs/import.log
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console

from ..client.file_provider import FileGroupHierarchyProvider
from ..client.guacamole import GuacamoleClient
from ..importer.errors import HierarchyFetchError, ParseError
from ..importer.interfaces import GroupHierarchyProvider
from ..importer.models import BatchResult
from ..importer.processors import FileFormatDetector
from ..importer.reporting import ReportGenerator
from ..importer.service import ConnectionParseService
from ..utils.config import Config
from ..utils.logging_config import LogFormat, LoggingConfig, LogLevel, setup_logging
from ..utils.validators import validate_profile, validate_server_settings

EXIT_FATAL = 1
EXIT_RECORD_ERRORS = 2

app = typer.Typer(
    help="""Validate and convert bulk connection import files.

Supports CSV, YAML and JSON connection lists. Connection group paths are
resolved to group identifiers using the connection group tree of the target
data source, and every user and user group named by a connection is indexed
for access grants.

Exit codes: 0 when every connection is valid, 1 when the file cannot be
processed at all, 2 when individual connections have errors.
"""
)
console = Console()


@app.callback()
def main() -> None:
    """Validate and convert bulk connection import files."""


def _build_provider(
    tree_file: Optional[Path], profile_settings: Dict[str, Any]
) -> GroupHierarchyProvider:
    if tree_file:
        return FileGroupHierarchyProvider(tree_file)

    base_url = validate_server_settings(profile_settings)
    return GuacamoleClient(
        base_url,
        token=profile_settings.get("token"),
        timeout_seconds=float(profile_settings.get("timeout") or 30),
    )


def _logging_config(verbose: bool, log_file: Optional[Path], log_format: str) -> LoggingConfig:
    """Build the logging configuration for a command run.

    Raises:
        ValueError: If ``log_format`` is not a known format
    """
    return LoggingConfig(
        level=LogLevel.DEBUG if verbose else LogLevel.WARNING,
        format_type=LogFormat(log_format.lower()),
        log_file=str(log_file) if log_file else None,
        file_level=LogLevel.DEBUG if verbose else LogLevel.INFO,
    )


def _to_json(data: Any) -> str:
    # Connection payloads pass through verbatim and may hold non-JSON scalars
    return json.dumps(data, indent=2, default=str)


async def _parse_file(
    provider: GroupHierarchyProvider,
    profile_settings: Dict[str, Any],
    data_source: str,
    data: str,
    format_type: str,
    workers: int,
) -> BatchResult:
    if isinstance(provider, GuacamoleClient) and not provider.token:
        await provider.authenticate(profile_settings["username"], profile_settings["password"])

    service = ConnectionParseService(provider, data_source, max_workers=workers)
    return await service.parse(data, format_type)


@app.command("parse")
def parse_connections(
    input_file: Path = typer.Argument(..., help="Connection list to import (CSV, YAML or JSON)"),
    format_type: Optional[str] = typer.Option(
        None, "--format", "-f", help="Input format: csv, yaml or json (default: from extension)"
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Server profile to use (uses default if not specified)"
    ),
    data_source: Optional[str] = typer.Option(
        None, "--data-source", "-d", help="Data source to import into (default: from profile)"
    ),
    tree_file: Optional[Path] = typer.Option(
        None, "--tree-file", help="Read the connection group tree from a JSON/YAML file"
    ),
    output: str = typer.Option("table", "--output", "-o", help="Output format: table or json"),
    patch_file: Optional[Path] = typer.Option(
        None,
        "--patch-file",
        help="Write the creation patches to this file when no entry has errors",
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", help="Number of threads used to transform records"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write JSON log records to this file (rotated at 10 MB)"
    ),
    log_format: str = typer.Option(
        "simple", "--log-format", help="Console log format: simple or json"
    ),
):
    """Parse and validate a connection import file.

    Every connection in the file is checked and converted into a creation
    patch. Problems with individual connections are listed per entry; the
    file is only ready for import when no entry has errors.
    """
    try:
        setup_logging(_logging_config(verbose, log_file, log_format))
    except ValueError:
        console.print(
            f"[red]Error: Invalid log format '{log_format}'. Use 'simple' or 'json'.[/red]"
        )
        raise typer.Exit(EXIT_FATAL)
    except OSError as e:
        console.print(f"[red]Error: Could not open log file {log_file}: {e}[/red]")
        raise typer.Exit(EXIT_FATAL)
    reporter = ReportGenerator(console)

    if output not in ("table", "json"):
        console.print(f"[red]Error: Invalid output format '{output}'. Use 'table' or 'json'.[/red]")
        raise typer.Exit(EXIT_FATAL)

    if not input_file.is_file():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(EXIT_FATAL)

    try:
        format_type = format_type or FileFormatDetector.detect_format(input_file)
        FileFormatDetector.get_processor(format_type)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(EXIT_FATAL)

    try:
        data = input_file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        console.print(
            f"[red]Error: File encoding error: {e}. Please ensure file is UTF-8 encoded[/red]"
        )
        raise typer.Exit(EXIT_FATAL)

    config = Config()
    _, profile_settings = validate_profile(profile, config)
    provider = _build_provider(tree_file, profile_settings)
    data_source = data_source or profile_settings["data_source"]
    workers = workers or config.get_import_config()["workers"]

    try:
        result = asyncio.run(
            _parse_file(provider, profile_settings, data_source, data, format_type, workers)
        )
    except ParseError as e:
        reporter.report_fatal_error(e)
        raise typer.Exit(EXIT_FATAL)
    except HierarchyFetchError as e:
        console.print(f"[red]Error: Could not retrieve connection groups: {e}[/red]")
        raise typer.Exit(EXIT_FATAL)

    # Patches are only usable when every connection is valid
    patches_written = bool(patch_file) and not result.has_errors
    if patches_written:
        patch_file.write_text(
            _to_json([op.to_dict() for op in result.creation_ops]), encoding="utf-8"
        )

    if output == "json":
        typer.echo(_to_json(result.to_dict()))
    else:
        reporter.generate_summary_report(result, source=input_file.name)
        reporter.generate_grant_report(result)
        reporter.generate_issue_report(result)
        if patches_written:
            console.print(f"\nCreation patches written to {patch_file}")
        elif patch_file:
            console.print(
                "\n[yellow]Creation patches not written: fix the errors above first.[/yellow]"
            )

    if result.has_errors:
        raise typer.Exit(EXIT_RECORD_ERRORS)
