"""CLI commands for Cobbler system records.

Provides ``system get`` to show a record and ``system edit`` to apply field
updates to a fetched record and print the equivalent ``cobbler system edit``
command for the fields that actually changed.
"""

import json
import sys
from typing import Any, List, Optional

import click
from tabulate import tabulate

from .record_client import RecordClient
from .tracked_record import FIELDS, MODES, RenderFormat, TrackedRecord
from .utils import ExitCodes, format_success, get_executor, handle_api_error


def _fetch_record(identifier: str) -> TrackedRecord:
    """Resolve ``identifier`` or exit with NOT_FOUND."""
    try:
        record = RecordClient(get_executor()).resolve(identifier)
    except Exception as exc:  # noqa: BLE001
        handle_api_error(exc)
        raise  # unreachable: handle_api_error exits
    if record is None:
        click.echo(f"✗ System not found: {identifier}", err=True)
        sys.exit(ExitCodes.NOT_FOUND)
    return record


def _record_rows(record: TrackedRecord) -> List[List[str]]:
    """Return table rows for the editable fields plus the system name."""
    rows = [["name", record.name or ""]]
    for name in FIELDS:
        rows.append([name, record.field(name, fmt=RenderFormat.JOINED)])
    return rows


def register_system_commands(cli: Any) -> None:
    """Register the 'system' command group and its subcommands."""

    @cli.group()
    def system() -> None:
        """Inspect and edit Cobbler system records."""
        pass

    @system.command(name="get")
    @click.argument("identifier")
    @click.option(
        "--format",
        "-f",
        "format_output",
        type=click.Choice(["table", "json"]),
        default="table",
        show_default=True,
        help="Output format",
    )
    def get_system(identifier: str, format_output: str) -> None:
        """Show the system IDENTIFIER (a system id or an FQDN)."""
        record = _fetch_record(identifier)
        if format_output == "json":
            click.echo(json.dumps(record.to_dict(), indent=2))
            return
        click.echo(tabulate(_record_rows(record), headers=["Field", "Value"], tablefmt="github"))

    @system.command(name="edit")
    @click.argument("identifier")
    @click.option("--comment", help="Comment text or JSON object")
    @click.option("--ksmeta", "ks_meta", help="Kickstart metadata as 'k=v k2=v2' or JSON")
    @click.option("--mgmt-classes", "mgmt_classes", help="Management classes, space separated")
    @click.option(
        "--mode",
        type=click.Choice(list(MODES)),
        default="merge",
        show_default=True,
        help="Merge values into the current ones or replace them",
    )
    def edit_system(
        identifier: str,
        comment: Optional[str],
        ks_meta: Optional[str],
        mgmt_classes: Optional[str],
        mode: str,
    ) -> None:
        """Print the 'cobbler system edit' command for changes to IDENTIFIER."""
        record = _fetch_record(identifier)
        updates = {"comment": comment, "ks_meta": ks_meta, "mgmt_classes": mgmt_classes}
        for name, value in updates.items():
            if value is not None:
                record.field(name, value, mode)
        if not record.changed:
            format_success(f"No changes for system {record.name or identifier}")
            return
        click.echo(record.emit_edit())
