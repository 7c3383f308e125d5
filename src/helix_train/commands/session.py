"""Workout session commands."""

import click

from ..db import get_db_path
from ..errors import ValidationError
from ..models.duration import DurationUnit, DurationValue, format_clock, from_seconds
from ..models.instance import WorkoutInstance
from ..models.load import LoadUnit, LoadValue
from ..services.progress import summarize
from ..services.session import SessionService
from .base import async_command, echo_info, echo_success, ensure_initialized, format_table

UNIT_CHOICES = click.Choice([u.value for u in DurationUnit])
LOAD_UNIT_CHOICES = click.Choice([u.value for u in LoadUnit])


def _duration(raw: str | None, unit: str) -> DurationValue | None:
    """Parse a plain number in ``unit``, or an MM:SS clock converted to ``unit``."""
    if raw is None:
        return None
    try:
        if ":" in raw:
            mins, secs = raw.split(":")
            return from_seconds(int(mins) * 60 + float(secs), unit)
        return DurationValue(value=float(raw), unit=unit)
    except (ValueError, ValidationError) as e:
        raise click.BadParameter(f"{raw!r} is not a duration ({e})") from e


def _print_instance(instance: WorkoutInstance) -> None:
    summary = summarize(instance)
    click.echo()
    click.echo(click.style(f"{instance.protocol_name} ({instance.id})", bold=True))
    click.echo("=" * 50)
    click.echo(f"Started: {instance.started_at:%Y-%m-%d %H:%M}" if instance.started_at else "Started: -")
    if instance.is_completed:
        click.echo(f"Finished: {instance.ended_at:%Y-%m-%d %H:%M}")
    click.echo(
        f"Progress: {summary.completion_ratio * 100:.0f}% "
        f"({summary.completed}/{summary.total} exercises)"
    )
    click.echo(f"Elapsed: {format_clock(summary.elapsed_seconds)}")
    click.echo(f"Remaining: {format_clock(summary.remaining_seconds)}")
    if summary.volume_kg:
        click.echo(f"Volume: {summary.volume_kg:g} kg")

    for block, block_progress in zip(instance.blocks, summary.blocks):
        click.echo()
        click.echo(
            click.style(f"{block.name}", bold=True)
            + f"  {block_progress.completed}/{block_progress.total}"
        )
        rows = []
        for ex in block.exercises:
            target = f"{ex.prescribed_reps} reps" if ex.prescribed_reps is not None else ""
            if ex.prescribed_duration:
                target = (target + " " if target else "") + format_clock(ex.prescribed_duration.seconds)
            rows.append([
                ex.id,
                f"{ex.exercise_name} #{ex.set_number}",
                target or "-",
                str(ex.reps_completed) if ex.complete else "-",
                format_clock(ex.actual_duration.seconds) if ex.actual_duration else "-",
                click.style("done", fg="green") if ex.complete else "",
            ])
        if rows:
            click.echo(format_table(["ID", "Exercise", "Target", "Reps", "Time", ""], rows))


@click.group()
@click.pass_context
def session(ctx):
    """Run and log workout sessions."""
    ensure_initialized(ctx)


@session.command()
@click.argument("protocol_id")
@click.option("--user", "-u", "user_id", required=True, help="User the session belongs to")
@async_command
async def start(protocol_id: str, user_id: str):
    """Start a session from a protocol."""
    instance = await SessionService(get_db_path()).start_from_protocol(protocol_id, user_id)
    echo_success(f"Started session {instance.id}")
    _print_instance(instance)


@session.command(name="start-block")
@click.argument("block_id")
@click.option("--user", "-u", "user_id", required=True, help="User the session belongs to")
@async_command
async def start_block(block_id: str, user_id: str):
    """Start a freeform session from a single protocol block."""
    instance = await SessionService(get_db_path()).start_block(user_id, block_id=block_id)
    echo_success(f"Started session {instance.id}")
    _print_instance(instance)


@session.command(name="list")
@click.option("--user", "-u", "user_id", required=True, help="Whose sessions to list")
@async_command
async def list_sessions(user_id: str):
    """List a user's sessions."""
    instances = await SessionService(get_db_path()).list_for_user(user_id)
    if not instances:
        echo_info("No sessions found")
        return

    rows = []
    for instance in instances:
        summary = summarize(instance)
        rows.append([
            instance.id,
            instance.protocol_name,
            instance.started_at.strftime("%Y-%m-%d") if instance.started_at else "N/A",
            f"{summary.completion_ratio * 100:.0f}%",
            format_clock(summary.elapsed_seconds),
            "finished" if instance.is_completed else "open",
        ])
    click.echo(format_table(["ID", "Protocol", "Date", "Done", "Elapsed", "Status"], rows))


@session.command()
@click.argument("instance_id")
@async_command
async def show(instance_id: str):
    """Show a session and its progress."""
    instance = await SessionService(get_db_path()).get(instance_id)
    _print_instance(instance)


@session.command()
@click.argument("instance_id")
@click.argument("exercise_instance_id")
@click.option("--reps", "-r", type=click.IntRange(min=0), help="Reps completed")
@click.option("--duration", "-d", help="Time performed, as a number or MM:SS")
@click.option("--rest", help="Rest taken, as a number or MM:SS")
@click.option("--unit", default="s", type=UNIT_CHOICES, help="Unit for --duration and --rest")
@click.option("--load", "-l", type=click.FloatRange(min=0), help="Weight lifted")
@click.option("--load-unit", default="kg", type=LOAD_UNIT_CHOICES, help="Unit for --load")
@click.option("--rpe", type=float, help="Rate of perceived exertion")
@click.option("--notes", "-n", help="Notes for this set")
@click.option("--undo", is_flag=True, help="Mark the set as not done")
@async_command
async def log(
    instance_id: str,
    exercise_instance_id: str,
    reps: int | None,
    duration: str | None,
    rest: str | None,
    unit: str,
    load: float | None,
    load_unit: str,
    rpe: float | None,
    notes: str | None,
    undo: bool,
):
    """Log performance for one exercise in a session."""
    service = SessionService(get_db_path())
    extra = {"rpe": rpe} if rpe is not None else {}
    leaf = await service.log_exercise(
        instance_id,
        exercise_instance_id,
        reps=reps,
        duration=_duration(duration, unit),
        rest=_duration(rest, unit),
        load=LoadValue(value=load, unit=load_unit) if load is not None else None,
        notes=notes,
        complete=not undo,
        **extra,
    )
    state = "done" if leaf.complete else "reopened"
    echo_success(f"{leaf.exercise_name} set {leaf.set_number} {state}")


@session.command(name="add-set")
@click.argument("instance_id")
@click.argument("exercise_instance_id")
@async_command
async def add_set(instance_id: str, exercise_instance_id: str):
    """Add another set of an exercise."""
    new_set = await SessionService(get_db_path()).add_set(instance_id, exercise_instance_id)
    echo_success(f"Added {new_set.exercise_name} set {new_set.set_number} ({new_set.id})")


@session.command()
@click.argument("instance_id")
@click.option("--notes", "-n", help="Session notes")
@async_command
async def finish(instance_id: str, notes: str | None):
    """Mark a session as finished."""
    instance = await SessionService(get_db_path()).finish(instance_id, notes=notes)
    echo_success(f"Session {instance.id} finished")
    _print_instance(instance)
