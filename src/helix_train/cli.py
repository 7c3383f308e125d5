"""CLI entry point for helix-train."""

import click

from . import __version__
from .commands import exercises, init, protocols, serve, session
from .config import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="helix-train")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """helix-train: training protocols and workout logging.

    Author protocols once, then start sessions from them and log each set.

    Example usage:

        # Initialize the database
        helix-train init

        # Import a protocol
        helix-train protocols import strength.json

        # Start and log a session
        helix-train session start <protocol-id> --user me
        helix-train session log <session-id> <exercise-id> --reps 5
    """
    configure_logging(verbose)


# Register commands
main.add_command(init)
main.add_command(exercises)
main.add_command(protocols)
main.add_command(session)
main.add_command(serve)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
