"""Protocol management commands."""

import json
from pathlib import Path

import click

from ..db import get_db_path
from ..models.duration import format_clock
from ..services.protocols import ProtocolService
from .base import async_command, echo_info, echo_success, echo_warning, ensure_initialized, format_table


@click.group()
@click.pass_context
def protocols(ctx):
    """Manage protocol templates.

    Commands for importing, listing, viewing, and deleting protocols.
    """
    ensure_initialized(ctx)


@protocols.command(name="list")
@async_command
async def list_protocols():
    """List all protocols."""
    all_protocols = await ProtocolService(get_db_path()).list_all()

    if not all_protocols:
        echo_info("No protocols found. Import one with 'helix-train protocols import'")
        return

    rows = [
        [
            p.id,
            p.name[:30] + "..." if len(p.name) > 30 else p.name,
            str(len(p.blocks)),
            str(p.exercise_count),
            format_clock(p.prescribed_seconds()),
        ]
        for p in all_protocols
    ]

    click.echo()
    click.echo(format_table(["ID", "Name", "Blocks", "Exercises", "Time"], rows))
    click.echo()
    click.echo(f"Total: {len(all_protocols)} protocol(s)")


@protocols.command()
@click.argument("protocol_id")
@click.option("--json", "as_json", is_flag=True, help="Print the protocol as JSON")
@async_command
async def show(protocol_id: str, as_json: bool):
    """Show details of a protocol."""
    protocol = await ProtocolService(get_db_path()).get(protocol_id)

    if as_json:
        click.echo(json.dumps(protocol.to_dict(), indent=2))
        return

    click.echo()
    click.echo("=" * 60)
    click.echo(f"{protocol.name} (ID: {protocol.id})")
    click.echo("=" * 60)
    click.echo(protocol.get_summary())
    click.echo(f"Prescribed time: {format_clock(protocol.prescribed_seconds())}")


@protocols.command(name="import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@async_command
async def import_protocol(path: Path):
    """Import a protocol from a JSON file."""
    data = json.loads(path.read_text())
    protocol = await ProtocolService(get_db_path()).create(data)
    echo_success(f"Imported {protocol.name} ({protocol.id})")


@protocols.command()
@click.argument("protocol_id")
@click.option("--cascade", is_flag=True, help="Also delete sessions started from it")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@async_command
async def delete(protocol_id: str, cascade: bool, force: bool):
    """Delete a protocol.

    Sessions already started from the protocol keep their own copy of it
    unless --cascade is given.
    """
    service = ProtocolService(get_db_path())
    protocol = await service.get(protocol_id)

    if not force:
        click.echo(f"Protocol: {protocol.name}")
        if not click.confirm("Are you sure you want to delete this protocol?"):
            echo_info("Cancelled")
            return

    referencing = await service.delete(protocol_id, cascade=cascade)
    echo_success(f"Protocol {protocol_id} deleted")
    if referencing:
        if cascade:
            echo_warning(f"Deleted {referencing} session(s) started from it")
        else:
            echo_info(f"{referencing} session(s) keep their copy of it")
