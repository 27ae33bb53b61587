"""Input validation utilities for connimport."""

from typing import Any, Dict, Optional, Tuple

import typer
from rich.console import Console

from .config import Config

console = Console()


def validate_profile(
    profile_name: Optional[str] = None, config: Optional[Config] = None
) -> Tuple[Optional[str], Dict[str, Any]]:
    """
    Validate the profile and return its name and effective settings.

    Falls back to the default profile when none is given. Running without
    any profile is allowed; settings then come from the environment alone.

    Args:
        profile_name: Profile name to use
        config: Configuration to read profiles from

    Returns:
        Tuple of (profile_name, profile_settings)

    Raises:
        typer.Exit: If the named profile does not exist
    """
    config = config or Config()
    profile_name = profile_name or config.get("default_profile")

    if profile_name:
        profiles = config.get("profiles", {}) or {}
        if profile_name not in profiles:
            console.print(f"[red]Error: Profile '{profile_name}' does not exist.[/red]")
            console.print(
                "Use 'connimport config set profiles.<name>.base_url <url>' to create one."
            )
            raise typer.Exit(1)

    return profile_name, config.get_profile_config(profile_name)


def validate_server_settings(profile_settings: Dict[str, Any]) -> str:
    """
    Validate that server settings are sufficient to reach the REST API.

    Args:
        profile_settings: Effective profile settings

    Returns:
        The server base URL

    Raises:
        typer.Exit: If no base URL or credentials are configured
    """
    base_url = profile_settings.get("base_url")
    if not base_url:
        console.print("[red]Error: No server base URL configured.[/red]")
        console.print(
            "Set one with 'connimport config set profiles.<name>.base_url <url>', "
            "the CONNIMPORT_BASE_URL environment variable, or use --tree-file to work offline."
        )
        raise typer.Exit(1)

    has_password = profile_settings.get("username") and profile_settings.get("password")
    if not profile_settings.get("token") and not has_password:
        console.print("[red]Error: No authentication token or username/password configured.[/red]")
        raise typer.Exit(1)

    return base_url
