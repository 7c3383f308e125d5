"""Exercise catalog commands."""

import click

from ..db import ExerciseRepository, get_db_path
from ..models.exercises import Exercise, MovementPattern, MuscleGroup
from .base import async_command, echo_error, echo_info, echo_success, ensure_initialized, format_table


@click.group()
@click.pass_context
def exercises(ctx):
    """Browse and extend the exercise catalog."""
    ensure_initialized(ctx)


@exercises.command(name="list")
@click.option("--search", "-s", "query", help="Filter by name or alias")
@async_command
async def list_exercises(query: str | None):
    """List catalog exercises."""
    repo = ExerciseRepository(get_db_path())
    found = await repo.search(query) if query else await repo.list_all()

    if not found:
        echo_info("No exercises found")
        return

    rows = [
        [ex.id, ex.name, ex.movement_pattern.value, ", ".join(mg.value for mg in ex.muscle_groups)]
        for ex in found
    ]
    click.echo(format_table(["ID", "Name", "Pattern", "Muscles"], rows))


@exercises.command(name="add")
@click.argument("name")
@click.option(
    "--pattern",
    "-p",
    required=True,
    type=click.Choice([p.value for p in MovementPattern]),
    help="Movement pattern",
)
@click.option(
    "--muscle",
    "-m",
    multiple=True,
    type=click.Choice([mg.value for mg in MuscleGroup]),
    help="Target muscle group (repeatable)",
)
@click.option("--id", "exercise_id", help="Stable id (generated when omitted)")
@click.pass_context
@async_command
async def add_exercise(ctx, name: str, pattern: str, muscle: tuple[str, ...], exercise_id: str | None):
    """Add an exercise to the catalog."""
    repo = ExerciseRepository(get_db_path())
    if await repo.get_by_name(name):
        echo_error(f"Exercise {name!r} already exists")
        ctx.exit(1)

    exercise = Exercise(
        id=exercise_id,
        name=name,
        muscle_groups=[MuscleGroup(m) for m in muscle],
        movement_pattern=MovementPattern(pattern),
    )
    new_id = await repo.add(exercise)
    echo_success(f"Added {name} ({new_id})")
