"""Protocol authoring service."""

import logging
from pathlib import Path

from ..db.repositories import ExerciseRepository, ProtocolRepository
from ..errors import NotFound, ValidationError
from ..models.identity import new_id
from ..models.protocol import Protocol

logger = logging.getLogger(__name__)


def _node_ids(protocol: Protocol) -> set[str]:
    ids = set()
    for block in protocol.blocks:
        ids.add(block.id)
        ids.update(ex.id for ex in block.exercises)
    return ids


def _assign_ids(protocol: Protocol, owned: set[str] | None = None) -> None:
    """Give every block and exercise an id of its own.

    Ids in ``owned`` (those already stored under this protocol) are kept
    once each. Any other incoming id, or a repeat, is replaced, so one
    protocol's rows can never overwrite another's.
    """
    owned = owned or set()
    seen: set[str] = set()

    def claim(node_id: str) -> str:
        if node_id not in owned or node_id in seen:
            node_id = new_id()
        seen.add(node_id)
        return node_id

    for block in protocol.blocks:
        block.id = claim(block.id)
        for ex in block.exercises:
            ex.id = claim(ex.id)


class ProtocolService:
    """Create, edit and delete protocol templates.

    Exercise references are checked against the catalog and each template
    exercise gets the catalog name as its display name when none is given.
    """

    def __init__(self, db_path: Path | None = None):
        self.protocols = ProtocolRepository(db_path)
        self.exercises = ExerciseRepository(db_path)

    async def _prepare(self, protocol: Protocol) -> Protocol:
        known = await self.exercises.known_ids()
        protocol.validate(known_exercise_ids=known)
        for block in protocol.blocks:
            for ex in block.exercises:
                if not ex.exercise_name:
                    exercise = await self.exercises.get(ex.exercise_id)
                    ex.exercise_name = exercise.name if exercise else ex.exercise_id
        return protocol

    async def create(self, data: dict) -> Protocol:
        """Validate and store a new protocol from its dictionary form.

        Ids supplied by the caller are ignored; the protocol and all its
        blocks and exercises get fresh ones. Exported protocols can be
        imported again as independent copies.
        """
        if not isinstance(data, dict):
            raise ValidationError("A protocol must be a JSON object")
        data = {k: v for k, v in data.items() if k not in ("created_at", "updated_at")}
        protocol = Protocol.from_dict(data)
        protocol.id = new_id()
        _assign_ids(protocol)
        await self._prepare(protocol)
        await self.protocols.save(protocol)
        logger.info("Created protocol %s (%s)", protocol.id, protocol.name)
        return protocol

    async def update(self, protocol_id: str, data: dict) -> Protocol:
        """Replace a protocol's definition, keeping its identity.

        Block and exercise ids are kept only where they already belong to
        this protocol.
        """
        existing = await self.get(protocol_id)
        protocol = Protocol.from_dict({**data, "id": protocol_id})
        protocol.created_at = existing.created_at
        _assign_ids(protocol, owned=_node_ids(existing))
        await self._prepare(protocol)
        await self.protocols.save(protocol)
        return protocol

    async def get(self, protocol_id: str) -> Protocol:
        protocol = await self.protocols.get(protocol_id)
        if protocol is None:
            raise NotFound("Protocol", protocol_id)
        return protocol

    async def list_all(self) -> list[Protocol]:
        return await self.protocols.list_all()

    async def delete(self, protocol_id: str, cascade: bool = False) -> int:
        """Delete a protocol.

        Returns:
            Number of workout instances that referenced it
        """
        if not await self.protocols.exists(protocol_id):
            raise NotFound("Protocol", protocol_id)
        return await self.protocols.delete(protocol_id, cascade=cascade)
