"""Protocol template routes."""

from pathlib import Path

from fastapi import APIRouter, Depends

from ...models.duration import format_clock
from ...services.protocols import ProtocolService
from ...services.session import SessionService
from ..deps import get_db_path, get_user_id
from ..schemas import ProtocolBody

router = APIRouter(prefix="/protocols", tags=["protocols"])


def _protocol_response(protocol) -> dict:
    prescribed = protocol.prescribed_seconds()
    return {
        **protocol.to_dict(),
        "prescribed_seconds": prescribed,
        "prescribed_clock": format_clock(prescribed),
    }


@router.get("")
async def list_protocols(db_path: Path = Depends(get_db_path)):
    """List all protocols."""
    protocols = await ProtocolService(db_path).list_all()
    return [_protocol_response(p) for p in protocols]


@router.post("", status_code=201)
async def create_protocol(body: ProtocolBody, db_path: Path = Depends(get_db_path)):
    """Create a protocol with its blocks and exercises.

    Any ids in the body are ignored; the new protocol gets its own.
    """
    protocol = await ProtocolService(db_path).create(body.to_data())
    return _protocol_response(protocol)


@router.get("/{protocol_id}")
async def get_protocol(protocol_id: str, db_path: Path = Depends(get_db_path)):
    protocol = await ProtocolService(db_path).get(protocol_id)
    return _protocol_response(protocol)


@router.put("/{protocol_id}")
async def update_protocol(
    protocol_id: str, body: ProtocolBody, db_path: Path = Depends(get_db_path)
):
    """Replace a protocol's definition. Existing instances are not changed."""
    protocol = await ProtocolService(db_path).update(protocol_id, body.to_data())
    return _protocol_response(protocol)


@router.delete("/{protocol_id}")
async def delete_protocol(
    protocol_id: str, cascade: bool = False, db_path: Path = Depends(get_db_path)
):
    """Delete a protocol.

    Instances created from it are kept unless ``cascade`` is set.
    """
    referencing = await ProtocolService(db_path).delete(protocol_id, cascade=cascade)
    return {
        "status": "deleted",
        "instances_deleted": referencing if cascade else 0,
        "instances_kept": 0 if cascade else referencing,
    }


@router.post("/{protocol_id}/instances", status_code=201)
async def instantiate_protocol(
    protocol_id: str,
    user_id: str = Depends(get_user_id),
    db_path: Path = Depends(get_db_path),
):
    """Start a workout session from a protocol."""
    service = SessionService(db_path)
    instance = await service.start_from_protocol(protocol_id, user_id)
    return await service.describe(instance)
