"""Initialize project command."""

import click

from ..config import get_data_dir
from ..db import get_db_path, init_db, seed_exercises
from .base import async_command, echo_info, echo_success


@click.command()
@async_command
async def init():
    """Initialize the helix-train database.

    Creates the data directory, the SQLite schema and the starter
    exercise library.
    """
    db_path = get_db_path()
    echo_info(f"Initializing helix-train in {get_data_dir()}")

    await init_db(db_path)
    echo_success(f"Database initialized at {db_path}")

    count = await seed_exercises(db_path)
    echo_success(f"Exercise library populated ({count} new exercises)")

    click.echo()
    click.echo("Next steps:")
    click.echo("  helix-train protocols import <protocol.json>")
    click.echo("  helix-train session start <protocol-id> --user <you>")
