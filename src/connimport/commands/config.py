"""Configuration management commands for connimport."""

import json
from typing import Any

import typer
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from ..utils.config import Config

app = typer.Typer(help="Manage connimport configuration settings including server profiles.")
console = Console()

SECRET_SETTINGS = {"token", "password"}


@app.command("show")
def show_config(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, yaml, json"),
) -> None:
    """Show current configuration. Tokens and passwords are masked."""
    config = Config()
    config_data = _mask_secrets(config.get_all())

    if not config_data:
        console.print(
            "[yellow]No configuration found. Use 'connimport config set' to configure.[/yellow]"
        )
        return

    if format == "yaml":
        yaml_output = yaml.dump(config_data, default_flow_style=False, indent=2, sort_keys=False)
        console.print(Syntax(yaml_output, "yaml", theme="monokai", line_numbers=True))
    elif format == "json":
        json_output = json.dumps(config_data, indent=2)
        console.print(Syntax(json_output, "json", theme="monokai", line_numbers=True))
    else:
        _display_config_table(config_data)


@app.command("path")
def show_config_path():
    """Show the path to the configuration file."""
    config_path = Config().get_config_file_path()

    console.print(f"[green]Configuration file:[/green] {config_path}")
    if config_path.exists():
        console.print("[green]File exists:[/green] Yes")
    else:
        console.print("[yellow]File exists:[/yellow] No")


@app.command("set")
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., profiles.prod.base_url)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value using dot notation.

    Examples:
    - connimport config set profiles.prod.base_url https://remote.example.com/guacamole
    - connimport config set profiles.prod.data_source postgresql
    - connimport config set default_profile prod
    - connimport config set import.workers 4
    """
    key = key.strip()
    if not key or any(not part for part in key.split(".")):
        console.print(f"[red]Error: Invalid configuration key '{key}'[/red]")
        raise typer.Exit(1)

    parsed_value = _parse_config_value(value)
    Config().set(key, parsed_value)

    shown = "********" if key.split(".")[-1] in SECRET_SETTINGS else parsed_value
    console.print(f"[green]✓ Configuration '{key}' set to '{shown}'[/green]")


@app.command("unset")
def unset_config(
    key: str = typer.Argument(..., help="Configuration key to remove (dot notation)"),
) -> None:
    """Remove a configuration value."""
    config = Config()
    if config.get(key) is None:
        console.print(f"[yellow]Configuration '{key}' is not set.[/yellow]")
        return

    config.delete(key)
    console.print(f"[green]✓ Configuration '{key}' removed[/green]")


def _parse_config_value(value: str) -> Any:
    """Parse configuration value string into appropriate Python type."""
    value = value.strip()

    if value.lower() in ["true", "false", "yes", "no", "on", "off"]:
        return value.lower() in ["true", "yes", "on"]

    try:
        return int(value)
    except ValueError:
        pass

    return value


def _mask_secrets(data: Any) -> Any:
    if isinstance(data, dict):
        return {
            key: "********" if key in SECRET_SETTINGS and value else _mask_secrets(value)
            for key, value in data.items()
        }
    return data


def _display_config_table(config_data: dict) -> None:
    """Display configuration data in table format."""
    profiles = config_data.get("profiles")
    if isinstance(profiles, dict):
        console.print("\n[bold blue]Profiles[/bold blue]")
        table = Table()
        table.add_column("Profile", style="cyan")
        table.add_column("Base URL", style="green")
        table.add_column("Data Source", style="yellow")
        table.add_column("Auth", style="magenta")

        default_profile = config_data.get("default_profile")
        for profile_name, profile_info in profiles.items():
            profile_info = profile_info or {}
            if profile_info.get("token"):
                auth = "token"
            elif profile_info.get("username"):
                auth = f"user {profile_info['username']}"
            else:
                auth = "none"

            label = f"{profile_name} (default)" if profile_name == default_profile else profile_name
            table.add_row(
                label,
                str(profile_info.get("base_url", "")),
                str(profile_info.get("data_source", "")),
                auth,
            )

        console.print(table)

    other = {key: value for key, value in config_data.items() if key != "profiles"}
    if other:
        console.print("\n[bold blue]Settings[/bold blue]")
        table = Table()
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        for key, value in _flatten(other).items():
            table.add_row(key, str(value))
        console.print(table)


def _flatten(data: dict, prefix: str = "") -> dict:
    flat = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{full_key}."))
        else:
            flat[full_key] = value
    return flat
