"""Shared utility functions for cblcli."""

import os
import sys
from typing import Any, Dict, Optional

import click
import keyring

from .config import get_setting
from .query_executor import (
    DEFAULT_API_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    ConfigurationError,
    QueryExecutor,
)

KEYRING_SERVICE = "cobbler-cli"


class ExitCodes:
    """Standard exit codes for CLI operations."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_INPUT = 2
    NOT_FOUND = 3
    PERMISSION_DENIED = 4
    NETWORK_ERROR = 5


def handle_api_error(exc: Exception) -> None:
    """Handle API errors with appropriate exit codes and consistent formatting.

    Args:
        exc: The exception to handle
    """
    error_msg = str(exc).lower()
    if isinstance(exc, ConfigurationError):
        click.echo(f"✗ Configuration error: {exc}", err=True)
        sys.exit(ExitCodes.INVALID_INPUT)
    elif "not found" in error_msg:
        click.echo(f"✗ Resource not found: {exc}", err=True)
        sys.exit(ExitCodes.NOT_FOUND)
    elif "permission" in error_msg or "unauthorized" in error_msg or "login" in error_msg:
        click.echo(f"✗ Permission denied: {exc}", err=True)
        sys.exit(ExitCodes.PERMISSION_DENIED)
    elif "network" in error_msg or "connection" in error_msg:
        click.echo(f"✗ Network error: {exc}", err=True)
        sys.exit(ExitCodes.NETWORK_ERROR)
    else:
        click.echo(f"✗ Error: {exc}", err=True)
        sys.exit(ExitCodes.GENERAL_ERROR)


def format_success(message: str, data: Optional[Dict[str, Any]] = None) -> None:
    """Format success messages consistently.

    Args:
        message: Success message to display
        data: Optional data to display with the message
    """
    click.echo(f"✓ {message}")
    if data:
        for key, value in data.items():
            click.echo(f"  {key}: {value}")


# --- Cobbler connection settings ---
def get_api_url() -> str:
    """Retrieve the Cobbler API URL from environment or keyring."""
    url = os.environ.get("COBBLER_API_URL")
    if not url:
        url = keyring.get_password(KEYRING_SERVICE, "COBBLER_API_URL")
    return url or DEFAULT_API_URL


def _numeric_setting(env_name: str, config_key: str, default: Any, cast: Any) -> Any:
    """Read a numeric setting from the environment, then the config file."""
    raw = os.environ.get(env_name)
    if raw is None:
        raw = get_setting(config_key)
    if raw is None:
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"'{raw}' is not a valid value for {env_name}.")


def get_max_retries() -> int:
    """Return the retry budget from environment, config file or default."""
    return _numeric_setting("COBBLER_MAX_RETRIES", "max_retries", DEFAULT_MAX_RETRIES, int)


def get_timeout() -> float:
    """Return the per-call timeout in seconds from environment, config file or default."""
    return _numeric_setting("COBBLER_TIMEOUT", "timeout", DEFAULT_TIMEOUT, float)


def get_ssl_verify() -> bool:
    """Return SSL verification setting from environment variable. Defaults to True."""
    env = os.environ.get("CBLCLI_SSL_VERIFY")
    if env is not None:
        return env.lower() not in ("0", "false", "no")
    return True


def get_executor() -> QueryExecutor:
    """Return a QueryExecutor built from the current configuration.

    Raises:
        ConfigurationError: If a setting is invalid
    """
    return QueryExecutor(
        url=get_api_url(),
        max_retries=get_max_retries(),
        timeout=get_timeout(),
        verify=get_ssl_verify(),
    )
