"""cblcli entry points."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

import click
import keyring
import tomllib
from keyring.errors import PasswordDeleteError

from .config import get_config_file_path, remove_setting, set_setting
from .query_executor import DEFAULT_MAX_RETRIES, ConfigurationError, QueryExecutor
from .ssl_trust import OS_TRUST_INJECTED, OS_TRUST_REASON
from .system_click import register_system_commands
from .utils import KEYRING_SERVICE, ExitCodes, get_api_url, get_executor


def get_version() -> str:
    """Get version from _version.py (built binary) or pyproject.toml (development)."""
    try:
        from ._version import __version__  # type: ignore

        return __version__
    except ImportError:
        try:
            pyproject_path = Path(__file__).parent.parent / "pyproject.toml"

            with open(pyproject_path, "rb") as f:
                pyproject_data = tomllib.load(f)

            return pyproject_data["project"]["version"]
        except Exception:
            return "unknown"


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(context_settings=CONTEXT_SETTINGS, invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version and exit")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """Cobbler CLI (cblcli) - inspect and edit Cobbler system records."""  # noqa: D403
    if version:
        click.echo(f"cblcli version {get_version()}")
        ctx.exit()
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.option("--url", help="Cobbler API URL, e.g. http://cobbler.example.com/cobbler_api")
@click.option("--max-retries", type=int, help="Retries for failed transport calls")
def login(url: Optional[str], max_retries: Optional[int]) -> None:
    """Store the Cobbler API URL and retry budget."""
    if not url:
        url = click.prompt("Enter your Cobbler API URL", default=get_api_url())
    assert isinstance(url, str)
    url = url.strip()

    try:
        retries = DEFAULT_MAX_RETRIES if max_retries is None else max_retries
        QueryExecutor(url=url, max_retries=retries)
    except ConfigurationError as exc:
        click.echo(f"✗ Configuration error: {exc}", err=True)
        raise SystemExit(ExitCodes.INVALID_INPUT)

    keyring.set_password(KEYRING_SERVICE, "COBBLER_API_URL", url)
    if max_retries is not None:
        set_setting("max_retries", max_retries)
    click.echo("✓ Cobbler API URL stored.")


@cli.command()
def logout() -> None:
    """Remove the stored Cobbler API URL and retry budget."""
    try:
        keyring.delete_password(KEYRING_SERVICE, "COBBLER_API_URL")
    except PasswordDeleteError:
        pass
    remove_setting("max_retries")
    click.echo("✓ Cobbler API URL removed from system keyring.")


@cli.command()
@click.option("--format", "-f", type=click.Choice(["table", "json"]), default="table")
def info(format: str) -> None:
    """Show the current connection settings."""
    try:
        executor = get_executor()
    except ConfigurationError as exc:
        click.echo(f"✗ Configuration error: {exc}", err=True)
        raise SystemExit(ExitCodes.INVALID_INPUT)

    settings: Dict[str, Any] = {
        "api_url": executor.url,
        "host": executor.host,
        "port": executor.port,
        "path": executor.path,
        "max_retries": executor.max_retries,
        "timeout": executor.timeout,
        "ssl_verify": executor.verify,
        "ca_source": "system" if OS_TRUST_INJECTED else f"certifi ({OS_TRUST_REASON})",
        "config_file": str(get_config_file_path()),
    }

    if format == "json":
        click.echo(json.dumps(settings, indent=2))
        return

    for key, value in settings.items():
        click.echo(f"  {key:<12} {value}")


register_system_commands(cli)
