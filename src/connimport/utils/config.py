"""Configuration utilities for connimport."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from rich.console import Console

console = Console()

CONFIG_DIR = Path.home() / ".connimport"
CONFIG_FILE_YAML = CONFIG_DIR / "config.yaml"

# Default connection settings for a server profile
DEFAULT_PROFILE_CONFIG = {
    "base_url": None,
    "data_source": "mysql",
    "token": None,
    "username": None,
    "password": None,
    "timeout": 30,  # seconds
}

# Default import processing configuration
DEFAULT_IMPORT_CONFIG = {
    "workers": 1,
}

ENV_OVERRIDES = {
    "base_url": "CONNIMPORT_BASE_URL",
    "data_source": "CONNIMPORT_DATA_SOURCE",
    "token": "CONNIMPORT_TOKEN",
}


class Config:
    """Manages connimport configuration stored as YAML."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory holding config.yaml (defaults to $CONNIMPORT_CONFIG_DIR,
                then ~/.connimport)
        """
        self.config_dir = Path(config_dir or os.environ.get("CONNIMPORT_CONFIG_DIR") or CONFIG_DIR)
        self.config_file = self.config_dir / CONFIG_FILE_YAML.name
        self.config_data: Dict[str, Any] = {}
        self._config_loaded = False

    def _ensure_config_dir(self):
        """Ensure the configuration directory exists."""
        if not self.config_dir.exists():
            self.config_dir.mkdir(parents=True)
            console.print(f"Created configuration directory: {self.config_dir}")

    def _ensure_config_loaded(self):
        """Ensure configuration is loaded from file."""
        if not self._config_loaded:
            self._load_config()
            self._config_loaded = True

    def reload_config(self):
        """Force reload configuration from file."""
        self._config_loaded = False
        self._ensure_config_loaded()

    def _load_config(self):
        """Load the configuration from the YAML file, if present."""
        if not self.config_file.exists():
            self.config_data = {}
            return

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                self.config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            console.print(
                f"[red]Error: Configuration file {self.config_file} is not valid YAML: {e}[/red]"
            )
            self.config_data = {}
        except OSError as e:
            console.print(f"[red]Error reading configuration file {self.config_file}: {e}[/red]")
            self.config_data = {}

    def save_config(self):
        """Save the configuration to the YAML file."""
        self._ensure_config_dir()
        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                yaml.dump(self.config_data, f, default_flow_style=False, indent=2, sort_keys=False)
        except OSError as e:
            console.print(f"[red]Error saving configuration: {e}[/red]")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value with dot notation support.

        Args:
            key: Configuration key (supports dot notation like "profiles.prod.base_url")
            default: Default value if key doesn't exist

        Returns:
            Configuration value
        """
        self._ensure_config_loaded()

        value: Any = self.config_data
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any):
        """
        Set a configuration value, creating intermediate sections as needed.

        Args:
            key: Configuration key (supports dot notation)
            value: Configuration value
        """
        self._ensure_config_loaded()

        keys = key.split(".")
        section = self.config_data
        for k in keys[:-1]:
            if not isinstance(section.get(k), dict):
                section[k] = {}
            section = section[k]
        section[keys[-1]] = value

        self.save_config()

    def delete(self, key: str):
        """
        Delete a configuration value.

        Args:
            key: Configuration key (supports dot notation)
        """
        self._ensure_config_loaded()

        keys = key.split(".")
        section = self.config_data
        for k in keys[:-1]:
            section = section.get(k)
            if not isinstance(section, dict):
                return

        if keys[-1] in section:
            del section[keys[-1]]
            self.save_config()

    def get_all(self) -> Dict[str, Any]:
        """
        Get all configuration values.

        Returns:
            All configuration values
        """
        self._ensure_config_loaded()
        return self.config_data.copy()

    def get_profile_config(self, profile_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Get server settings for a profile with defaults and environment overrides.

        Args:
            profile_name: Profile to read (no profile means defaults and environment only)

        Returns:
            Effective profile settings
        """
        profile_config = DEFAULT_PROFILE_CONFIG.copy()

        if profile_name:
            profile_config.update(self.get(f"profiles.{profile_name}", {}) or {})

        for setting, env_var in ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if value:
                profile_config[setting] = value

        profile_config["timeout"] = self._get_env_int(
            "CONNIMPORT_TIMEOUT", int(profile_config.get("timeout") or 30)
        )
        return profile_config

    def get_import_config(self) -> Dict[str, Any]:
        """Get import processing settings merged over defaults."""
        import_config = DEFAULT_IMPORT_CONFIG.copy()
        import_config.update(self.get("import", {}) or {})
        import_config["workers"] = self._get_env_int(
            "CONNIMPORT_WORKERS", int(import_config["workers"])
        )
        return import_config

    def _get_env_int(self, env_var: str, default: int) -> int:
        """
        Get integer value from environment variable.

        Args:
            env_var: Environment variable name
            default: Default value if env var is not set

        Returns:
            Integer value
        """
        value = os.environ.get(env_var)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            console.print(
                f"Warning: Invalid integer value for {env_var}: {value}. Using default: {default}"
            )
            return default

    def get_config_file_path(self) -> Path:
        """Get the path of the active configuration file."""
        return self.config_file
