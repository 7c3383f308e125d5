"""Exercise catalog routes."""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ...db.repositories import ExerciseRepository
from ...models.exercises import Exercise, MovementPattern, MuscleGroup
from ..deps import get_db_path

router = APIRouter(prefix="/exercises", tags=["exercises"])


class ExerciseBody(BaseModel):
    name: str
    muscle_groups: list[MuscleGroup] = []
    movement_pattern: MovementPattern
    aliases: list[str] = []
    description: str = ""
    is_compound: bool = False


@router.get("")
async def list_exercises(q: str | None = None, db_path: Path = Depends(get_db_path)):
    """List the catalog, optionally filtered by name or alias."""
    repo = ExerciseRepository(db_path)
    exercises = await repo.search(q) if q else await repo.list_all()
    return [ex.to_dict() for ex in exercises]


@router.post("", status_code=201)
async def create_exercise(body: ExerciseBody, db_path: Path = Depends(get_db_path)):
    """Add an exercise to the catalog."""
    repo = ExerciseRepository(db_path)
    if await repo.get_by_name(body.name):
        raise HTTPException(status_code=409, detail=f"Exercise {body.name!r} already exists")

    exercise = Exercise(
        name=body.name,
        muscle_groups=body.muscle_groups,
        movement_pattern=body.movement_pattern,
        aliases=body.aliases,
        description=body.description,
        is_compound=body.is_compound,
    )
    await repo.add(exercise)
    return exercise.to_dict()
