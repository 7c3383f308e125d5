"""Workout instance routes."""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ...models.protocol import WorkoutBlock
from ...services.session import SessionService
from ..deps import get_db_path, get_user_id
from ..schemas import BlockBody, DurationBody, LoadBody, to_duration, to_load

router = APIRouter(prefix="/workout-instances", tags=["workout-instances"])
block_router = APIRouter(prefix="/workout-block-instances", tags=["workout-instances"])


class LogExerciseBody(BaseModel):
    reps_completed: int | None = Field(default=None, ge=0)
    actual_duration: DurationBody | None = None
    actual_rest: DurationBody | None = None
    actual_load: LoadBody | None = None
    rpe: float | None = Field(default=None, ge=0, le=10)
    notes: str | None = None
    complete: bool = True


class FinishBody(BaseModel):
    notes: str | None = None


class StartBlockBody(BaseModel):
    block_id: str | None = None
    block: BlockBody | None = None


@router.get("")
async def list_instances(
    user_id: str = Depends(get_user_id), db_path: Path = Depends(get_db_path)
):
    """List the caller's workout sessions."""
    service = SessionService(db_path)
    return [await service.describe(i) for i in await service.list_for_user(user_id)]


@router.get("/{instance_id}")
async def get_instance(
    instance_id: str,
    user_id: str = Depends(get_user_id),
    db_path: Path = Depends(get_db_path),
):
    """A session with its blocks, exercises and progress."""
    service = SessionService(db_path)
    return await service.describe(await service.get(instance_id, user_id))


@router.patch("/{instance_id}/exercises/{exercise_instance_id}")
async def log_exercise(
    instance_id: str,
    exercise_instance_id: str,
    body: LogExerciseBody,
    user_id: str = Depends(get_user_id),
    db_path: Path = Depends(get_db_path),
):
    """Record performance for one exercise instance."""
    service = SessionService(db_path)
    extra = {"rpe": body.rpe} if "rpe" in body.model_fields_set else {}
    await service.log_exercise(
        instance_id,
        exercise_instance_id,
        user_id=user_id,
        reps=body.reps_completed,
        duration=to_duration(body.actual_duration),
        rest=to_duration(body.actual_rest),
        load=to_load(body.actual_load),
        notes=body.notes,
        complete=body.complete,
        **extra,
    )
    return await service.describe(await service.get(instance_id, user_id))


@router.post("/{instance_id}/exercises/{exercise_instance_id}/sets", status_code=201)
async def add_set(
    instance_id: str,
    exercise_instance_id: str,
    user_id: str = Depends(get_user_id),
    db_path: Path = Depends(get_db_path),
):
    """Add another set of the same exercise."""
    new_set = await SessionService(db_path).add_set(
        instance_id, exercise_instance_id, user_id=user_id
    )
    return new_set.to_dict()


@router.delete("/{instance_id}/exercises/{exercise_instance_id}")
async def delete_set(
    instance_id: str,
    exercise_instance_id: str,
    user_id: str = Depends(get_user_id),
    db_path: Path = Depends(get_db_path),
):
    await SessionService(db_path).delete_set(instance_id, exercise_instance_id, user_id=user_id)
    return {"status": "deleted"}


@router.post("/{instance_id}/complete")
async def complete_instance(
    instance_id: str,
    body: FinishBody | None = None,
    user_id: str = Depends(get_user_id),
    db_path: Path = Depends(get_db_path),
):
    """Mark a session as finished."""
    service = SessionService(db_path)
    instance = await service.finish(
        instance_id, user_id=user_id, notes=body.notes if body else None
    )
    return await service.describe(instance)


@router.delete("/{instance_id}")
async def delete_instance(
    instance_id: str,
    user_id: str = Depends(get_user_id),
    db_path: Path = Depends(get_db_path),
):
    await SessionService(db_path).delete(instance_id, user_id=user_id)
    return {"status": "deleted"}


@block_router.post("", status_code=201)
async def start_block_session(
    body: StartBlockBody,
    user_id: str = Depends(get_user_id),
    db_path: Path = Depends(get_db_path),
):
    """Start a freeform session from one stored or ad-hoc block."""
    if (body.block_id is None) == (body.block is None):
        raise HTTPException(status_code=422, detail="Provide exactly one of block_id or block")

    service = SessionService(db_path)
    block = WorkoutBlock.from_dict(body.block.to_data()) if body.block is not None else None
    instance = await service.start_block(user_id, block_id=body.block_id, block=block)
    return await service.describe(instance)
