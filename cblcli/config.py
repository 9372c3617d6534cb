"""Configuration management for cblcli."""

import json
import os
from pathlib import Path
from typing import Any, Dict


def get_config_file_path() -> Path:
    """Get the path to the cblcli configuration file."""
    if "CBLCLI_CONFIG" in os.environ:
        return Path(os.environ["CBLCLI_CONFIG"])

    # Use XDG_CONFIG_HOME if set, otherwise use ~/.config
    if "XDG_CONFIG_HOME" in os.environ:
        config_dir = Path(os.environ["XDG_CONFIG_HOME"]) / "cblcli"
    else:
        config_dir = Path.home() / ".config" / "cblcli"

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / "config.json"


def load_config() -> Dict[str, Any]:
    """Load configuration from the config file.

    Returns:
        Dictionary containing configuration values
    """
    config_file = get_config_file_path()

    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        # If config file is corrupted or unreadable, return empty config
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: Dict[str, Any]) -> None:
    """Save configuration to the config file.

    Args:
        config: Dictionary containing configuration values to save
    """
    config_file = get_config_file_path()
    config_file.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
    except OSError as e:
        raise RuntimeError(f"Failed to save configuration: {e}")


def get_setting(key: str) -> Any:
    """Return a single setting from the config file, or None."""
    return load_config().get(key)


def set_setting(key: str, value: Any) -> None:
    """Store a single setting in the config file."""
    config = load_config()
    config[key] = value
    save_config(config)


def remove_setting(key: str) -> None:
    """Remove a setting from the config file if present."""
    config = load_config()
    if key in config:
        del config[key]
        save_config(config)
