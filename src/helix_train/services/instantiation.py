"""Turn protocol templates into workout instances.

Instantiation copies every display field and prescribed value from the
template into the new instance tree (denormalized copy-on-instantiate).
The instance only keeps the template ids for lookups, so later template
edits or deletions never rewrite history. Do not replace these copies
with live joins against the template tables.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from ..errors import ValidationError
from ..models.identity import new_id, utcnow
from ..models.instance import (
    WorkoutBlockExerciseInstance,
    WorkoutBlockInstance,
    WorkoutInstance,
)
from ..models.protocol import Protocol, WorkoutBlock, WorkoutBlockExercise

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _BuildContext:
    """Values shared by every node built in one instantiation."""

    now: datetime
    user_id: str | None = None


@dataclass(frozen=True)
class _Tier:
    """How to mirror one template tier into its instance tier."""

    children: Callable[[object], Sequence]
    build: Callable[[object, list, _BuildContext], object]


def _build_exercise(
    template: WorkoutBlockExercise, children: list, ctx: _BuildContext
) -> WorkoutBlockExerciseInstance:
    return WorkoutBlockExerciseInstance(
        template_exercise_id=template.id,
        exercise_id=template.exercise_id,
        exercise_name=template.exercise_name,
        position=template.position,
        set_number=1,
        prescribed_sets=template.sets,
        prescribed_reps=template.reps,
        prescribed_duration=template.duration,
        prescribed_rest=template.rest,
        prescribed_load=template.load,
        rpe=None,
        notes="",
    )


def _build_block(
    template: WorkoutBlock, children: list, ctx: _BuildContext
) -> WorkoutBlockInstance:
    return WorkoutBlockInstance(
        template_block_id=template.id,
        name=template.name,
        position=template.position,
        block_type=template.block_type,
        prescribed_rest=template.rest,
        exercises=children,
    )


def _build_protocol(
    template: Protocol, children: list, ctx: _BuildContext
) -> WorkoutInstance:
    return WorkoutInstance(
        user_id=ctx.user_id,
        template_protocol_id=template.id,
        protocol_name=template.name,
        started_at=ctx.now,
        ended_at=None,
        blocks=children,
    )


_TIERS: dict[type, _Tier] = {
    Protocol: _Tier(children=lambda p: p.blocks, build=_build_protocol),
    WorkoutBlock: _Tier(children=lambda b: b.exercises, build=_build_block),
    WorkoutBlockExercise: _Tier(children=lambda e: (), build=_build_exercise),
}


def _build(template, ctx: _BuildContext):
    """Mirror ``template`` and its ordered children, one node per node."""
    tier = _TIERS[type(template)]
    children = [_build(child, ctx) for child in tier.children(template)]
    return tier.build(template, children, ctx)


def instantiate(
    protocol: Protocol, user_id: str, now: datetime | None = None
) -> WorkoutInstance:
    """Create a new workout session from a protocol.

    The result has a fresh id, starts ``now`` and has no end timestamp.
    Its blocks and exercises mirror the protocol's shape and order, with
    nothing performed yet. A protocol without blocks yields an empty
    session, which is a valid "started, nothing logged" state.

    Args:
        protocol: Template to instantiate
        user_id: Owner of the new session
        now: Start timestamp (defaults to the current UTC time)

    Returns:
        An independent WorkoutInstance sharing no mutable state with
        the protocol or with other instances
    """
    if not user_id:
        raise ValidationError("A workout instance needs an owning user")

    instance = _build(protocol, _BuildContext(now=now or utcnow(), user_id=user_id))
    logger.info(
        "Instantiated protocol %s as workout %s for user %s (%d blocks)",
        protocol.id,
        instance.id,
        user_id,
        len(instance.blocks),
    )
    return instance


def instantiate_block(
    block: WorkoutBlock, now: datetime | None = None
) -> WorkoutBlockInstance:
    """Create a block instance from a single template block.

    Used for ad-hoc sessions that do not follow a full protocol. The block
    counts as started at ``now``.
    """
    ctx = _BuildContext(now=now or utcnow())
    block_instance = _build(block, ctx)
    block_instance.started_at = ctx.now
    return block_instance


def freeform_instance(
    user_id: str,
    blocks: list[WorkoutBlockInstance] | None = None,
    now: datetime | None = None,
) -> WorkoutInstance:
    """Start a session that is not tied to any protocol."""
    if not user_id:
        raise ValidationError("A workout instance needs an owning user")
    blocks = blocks or []
    for i, block in enumerate(blocks):
        block.position = i
    return WorkoutInstance(
        user_id=user_id,
        template_protocol_id=None,
        protocol_name="Freeform session",
        started_at=now or utcnow(),
        blocks=blocks,
    )


def add_set(
    block: WorkoutBlockInstance, source: WorkoutBlockExerciseInstance
) -> WorkoutBlockExerciseInstance:
    """Add another set of the same exercise to a block instance.

    The new set copies the prescription of ``source`` and is placed after
    the last existing set of that exercise.
    """
    if block.get_exercise(source.id) is None:
        raise ValidationError(f"Exercise instance {source.id} is not in block {block.id}")

    def same_exercise(ex: WorkoutBlockExerciseInstance) -> bool:
        if source.template_exercise_id is not None:
            return ex.template_exercise_id == source.template_exercise_id
        return ex.exercise_id == source.exercise_id and ex.position == source.position

    siblings = [i for i, ex in enumerate(block.exercises) if same_exercise(ex)]
    new_set = WorkoutBlockExerciseInstance(
        id=new_id(),
        template_exercise_id=source.template_exercise_id,
        exercise_id=source.exercise_id,
        exercise_name=source.exercise_name,
        position=source.position,
        set_number=max(block.exercises[i].set_number for i in siblings) + 1,
        prescribed_sets=source.prescribed_sets,
        prescribed_reps=source.prescribed_reps,
        prescribed_duration=source.prescribed_duration,
        prescribed_rest=source.prescribed_rest,
        prescribed_load=source.prescribed_load,
    )
    block.exercises.insert(siblings[-1] + 1, new_set)
    return new_set
