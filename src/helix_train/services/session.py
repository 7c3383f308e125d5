"""Workout session service.

Loads templates, instantiates them, stores the result and applies the
per-exercise updates a user makes while training.
"""

import logging
from pathlib import Path

from ..db.repositories import ProtocolRepository, WorkoutInstanceRepository
from ..errors import DanglingTemplateReference, InstanceCompleted, NotFound
from ..models.duration import DurationValue
from ..models.identity import utcnow
from ..models.load import LoadValue
from ..models.instance import (
    WorkoutBlockExerciseInstance,
    WorkoutBlockInstance,
    WorkoutInstance,
)
from ..models.protocol import Protocol, WorkoutBlock
from .instantiation import add_set, freeform_instance, instantiate, instantiate_block
from .progress import summarize

logger = logging.getLogger(__name__)

# Sentinel for "field not supplied" so that None can clear a value
_UNSET = object()


class SessionService:
    """Operations on a user's workout instances."""

    def __init__(self, db_path: Path | None = None):
        self.protocols = ProtocolRepository(db_path)
        self.instances = WorkoutInstanceRepository(db_path)

    async def start_from_protocol(self, protocol_id: str, user_id: str) -> WorkoutInstance:
        """Instantiate a stored protocol for a user and persist it."""
        protocol = await self.protocols.get(protocol_id)
        if protocol is None:
            raise NotFound("Protocol", protocol_id)
        instance = instantiate(protocol, user_id)
        await self.instances.save(instance)
        return instance

    async def start_block(
        self, user_id: str, block_id: str | None = None, block: WorkoutBlock | None = None
    ) -> WorkoutInstance:
        """Start a freeform session made of a single block.

        The block is either a stored template block (``block_id``) or an
        ad-hoc one built by the caller.
        """
        if block is None:
            block = await self.protocols.get_block(block_id) if block_id else None
            if block is None:
                raise NotFound("WorkoutBlock", block_id)
        else:
            block.validate()
        block_instance = instantiate_block(block)
        if block_id is None:
            # Ad-hoc blocks have no stored template to point at
            block_instance.template_block_id = None
            for ex in block_instance.exercises:
                ex.template_exercise_id = None
        instance = freeform_instance(user_id, [block_instance], now=block_instance.started_at)
        await self.instances.save(instance)
        return instance

    async def get(self, instance_id: str, user_id: str | None = None) -> WorkoutInstance:
        """Load an instance, hiding other users' sessions."""
        instance = await self.instances.get(instance_id)
        if instance is None or (user_id is not None and instance.user_id != user_id):
            raise NotFound("WorkoutInstance", instance_id)
        return instance

    async def list_for_user(self, user_id: str) -> list[WorkoutInstance]:
        return await self.instances.list_for_user(user_id)

    async def _get_open(self, instance_id: str, user_id: str | None) -> WorkoutInstance:
        instance = await self.get(instance_id, user_id)
        if instance.is_completed:
            raise InstanceCompleted(instance_id)
        return instance

    def _find_leaf(
        self, instance: WorkoutInstance, exercise_instance_id: str
    ) -> tuple[WorkoutBlockInstance, WorkoutBlockExerciseInstance]:
        found = instance.find_exercise(exercise_instance_id)
        if found is None:
            raise NotFound("WorkoutBlockExerciseInstance", exercise_instance_id)
        return found

    async def log_exercise(
        self,
        instance_id: str,
        exercise_instance_id: str,
        user_id: str | None = None,
        reps: int | None = None,
        duration: DurationValue | None = None,
        rest: DurationValue | None = None,
        load: LoadValue | None = None,
        rpe=_UNSET,
        notes: str | None = None,
        complete: bool = True,
    ) -> WorkoutBlockExerciseInstance:
        """Record performance for one exercise instance.

        Only the touched leaf and its block's timestamps are written; the
        rest of the tree is left alone.
        """
        instance = await self._get_open(instance_id, user_id)
        block, leaf = self._find_leaf(instance, exercise_instance_id)

        if complete:
            leaf.mark_complete(reps=reps, duration=duration, rest=rest, load=load)
        else:
            if reps is not None:
                leaf.reps_completed = reps
            if duration is not None:
                leaf.actual_duration = duration
            if rest is not None:
                leaf.actual_rest = rest
            if load is not None:
                leaf.actual_load = load
            leaf.complete = False
            leaf.completed_at = None
        if rpe is not _UNSET:
            leaf.rpe = rpe
        if notes is not None:
            leaf.notes = notes
        await self.instances.update_exercise_instance(leaf)

        if self._touch_block(block):
            await self.instances.update_block_instance(block)

        logger.debug(
            "Logged exercise %s in workout %s (complete=%s)",
            exercise_instance_id,
            instance_id,
            leaf.complete,
        )
        return leaf

    def _touch_block(self, block: WorkoutBlockInstance) -> bool:
        """Update block timestamps from its leaves. Returns True if changed."""
        changed = False
        if block.started_at is None and any(ex.complete for ex in block.exercises):
            block.started_at = utcnow()
            changed = True
        all_done = bool(block.exercises) and all(ex.complete for ex in block.exercises)
        if all_done and block.ended_at is None:
            block.ended_at = utcnow()
            changed = True
        elif not all_done and block.ended_at is not None:
            block.ended_at = None
            changed = True
        return changed

    async def add_set(
        self, instance_id: str, exercise_instance_id: str, user_id: str | None = None
    ) -> WorkoutBlockExerciseInstance:
        """Add another set after the given exercise instance."""
        instance = await self._get_open(instance_id, user_id)
        block, leaf = self._find_leaf(instance, exercise_instance_id)
        new_set = add_set(block, leaf)
        await self.instances.add_exercise_instance(block.id, new_set)
        if self._touch_block(block):
            await self.instances.update_block_instance(block)
        return new_set

    async def delete_set(
        self, instance_id: str, exercise_instance_id: str, user_id: str | None = None
    ) -> None:
        instance = await self._get_open(instance_id, user_id)
        block, leaf = self._find_leaf(instance, exercise_instance_id)
        block.exercises.remove(leaf)
        await self.instances.delete_exercise_instance(leaf.id)
        if self._touch_block(block):
            await self.instances.update_block_instance(block)

    async def finish(
        self, instance_id: str, user_id: str | None = None, notes: str | None = None
    ) -> WorkoutInstance:
        """Mark a session as completed. Completed sessions are read-only."""
        instance = await self._get_open(instance_id, user_id)
        instance.ended_at = utcnow()
        if notes is not None:
            instance.notes = notes
        await self.instances.update_header(instance)
        logger.info("Finished workout %s", instance_id)
        return instance

    async def delete(self, instance_id: str, user_id: str | None = None) -> None:
        await self.get(instance_id, user_id)
        await self.instances.delete(instance_id)

    async def resolve_template(self, instance: WorkoutInstance) -> Protocol | None:
        """Look up the protocol an instance came from.

        Returns None for freeform sessions.

        Raises:
            DanglingTemplateReference: if the protocol has been deleted
        """
        if instance.template_protocol_id is None:
            return None
        protocol = await self.protocols.get(instance.template_protocol_id)
        if protocol is None:
            raise DanglingTemplateReference("Protocol", instance.template_protocol_id)
        return protocol

    async def describe(self, instance: WorkoutInstance) -> dict:
        """Instance data with progress, for display.

        A deleted template is not an error here: the instance's own copy
        of names and prescriptions is shown instead.
        """
        try:
            protocol = await self.resolve_template(instance)
            template_available = protocol is not None
        except DanglingTemplateReference as e:
            logger.warning("Workout %s: %s", instance.id, e)
            template_available = False

        return {
            **instance.to_dict(),
            "is_completed": instance.is_completed,
            "template_available": template_available,
            "progress": summarize(instance).to_dict(),
        }
