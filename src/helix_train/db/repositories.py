"""Data access layer for helix-train."""

import json
import logging
from pathlib import Path

import aiosqlite

from ..models.duration import DurationValue
from ..models.exercises import Exercise, MovementPattern, MuscleGroup
from ..models.identity import format_timestamp, new_id, parse_timestamp, utcnow
from ..models.instance import (
    WorkoutBlockExerciseInstance,
    WorkoutBlockInstance,
    WorkoutInstance,
)
from ..models.load import LoadValue
from ..models.protocol import BlockType, Protocol, WorkoutBlock, WorkoutBlockExercise
from .engine import connect, get_db_path

logger = logging.getLogger(__name__)


def _dump_measure(measure: DurationValue | LoadValue | None) -> str | None:
    return json.dumps(measure.to_dict()) if measure else None


def _parse_duration(raw: str | None) -> DurationValue | None:
    return DurationValue.from_dict(json.loads(raw)) if raw else None


def _parse_load(raw: str | None) -> LoadValue | None:
    return LoadValue.from_dict(json.loads(raw)) if raw else None


class ExerciseRepository:
    """Repository for the exercise catalog."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get(self, exercise_id: str) -> Exercise | None:
        """Get an exercise by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM exercises WHERE id = ?", (exercise_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_exercise(row)

    async def get_by_name(self, name: str) -> Exercise | None:
        """Get an exercise by name."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM exercises WHERE name = ? COLLATE NOCASE", (name,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_exercise(row)

    async def search(self, query: str) -> list[Exercise]:
        """Search exercises by name or alias."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM exercises
                WHERE name LIKE ? OR aliases LIKE ?
                ORDER BY name
                """,
                (f"%{query}%", f"%{query}%"),
            )
            rows = await cursor.fetchall()
            return [self._row_to_exercise(row) for row in rows]

    async def list_all(self) -> list[Exercise]:
        """List all exercises."""
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT * FROM exercises ORDER BY name")
            rows = await cursor.fetchall()
            return [self._row_to_exercise(row) for row in rows]

    async def known_ids(self) -> set[str]:
        """IDs of every catalog exercise, for template validation."""
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT id FROM exercises")
            rows = await cursor.fetchall()
            return {row["id"] for row in rows}

    async def add(self, exercise: Exercise) -> str:
        """Add a new exercise and return its ID."""
        if exercise.id is None:
            exercise.id = new_id()
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO exercises
                (id, name, aliases, muscle_groups, movement_pattern, description, is_compound)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    exercise.id,
                    exercise.name,
                    json.dumps(exercise.aliases),
                    json.dumps([mg.value for mg in exercise.muscle_groups]),
                    exercise.movement_pattern.value,
                    exercise.description,
                    int(exercise.is_compound),
                ),
            )
            await db.commit()
        return exercise.id

    def _row_to_exercise(self, row: aiosqlite.Row) -> Exercise:
        """Convert a database row to an Exercise."""
        return Exercise(
            id=row["id"],
            name=row["name"],
            aliases=json.loads(row["aliases"]),
            muscle_groups=[MuscleGroup(mg) for mg in json.loads(row["muscle_groups"])],
            movement_pattern=MovementPattern(row["movement_pattern"]),
            description=row["description"] or "",
            is_compound=bool(row["is_compound"]),
        )


class ProtocolRepository:
    """Repository for protocol templates.

    A protocol is always written together with its blocks and exercises,
    in one transaction.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def save(self, protocol: Protocol) -> Protocol:
        """Insert or replace a protocol and its whole block tree."""
        protocol.validate()
        now = utcnow()
        protocol.created_at = protocol.created_at or now
        protocol.updated_at = now

        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO protocols
                (id, name, description, objectives, days_per_week, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    description = excluded.description,
                    objectives = excluded.objectives,
                    days_per_week = excluded.days_per_week,
                    updated_at = excluded.updated_at
                """,
                (
                    protocol.id,
                    protocol.name,
                    protocol.description,
                    json.dumps(protocol.objectives),
                    protocol.days_per_week,
                    format_timestamp(protocol.created_at),
                    format_timestamp(protocol.updated_at),
                ),
            )
            # Exercises go with their blocks via ON DELETE CASCADE
            await db.execute(
                "DELETE FROM workout_blocks WHERE protocol_id = ?", (protocol.id,)
            )
            for block in protocol.blocks:
                await self._insert_block(db, protocol.id, block)
            await db.commit()
        return protocol

    async def _insert_block(
        self, db: aiosqlite.Connection, protocol_id: str, block: WorkoutBlock
    ) -> None:
        await db.execute(
            """
            INSERT INTO workout_blocks
            (id, protocol_id, position, name, rest, block_type, circuit, notes)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                block.id,
                protocol_id,
                block.position,
                block.name,
                _dump_measure(block.rest),
                block.block_type.value,
                int(block.circuit),
                block.notes,
            ),
        )
        for ex in block.exercises:
            await db.execute(
                """
                INSERT INTO workout_block_exercises
                (id, block_id, position, exercise_id, exercise_name, sets, reps,
                 duration, rest, load, rpe, tempo, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    ex.id,
                    block.id,
                    ex.position,
                    ex.exercise_id,
                    ex.exercise_name,
                    ex.sets,
                    ex.reps,
                    _dump_measure(ex.duration),
                    _dump_measure(ex.rest),
                    _dump_measure(ex.load),
                    ex.rpe,
                    ex.tempo,
                    ex.notes,
                ),
            )

    async def get(self, protocol_id: str) -> Protocol | None:
        """Load a protocol with its ordered blocks and exercises."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM protocols WHERE id = ?", (protocol_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            blocks = await self._load_blocks(db, protocol_id)
            return self._row_to_protocol(row, blocks)

    async def list_all(self) -> list[Protocol]:
        """List all protocols, most recently updated first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT * FROM protocols ORDER BY updated_at DESC")
            rows = await cursor.fetchall()
            return [
                self._row_to_protocol(row, await self._load_blocks(db, row["id"]))
                for row in rows
            ]

    async def list_children(self, protocol_id: str) -> list[WorkoutBlock]:
        """Ordered blocks of a protocol."""
        async with connect(self.db_path) as db:
            return await self._load_blocks(db, protocol_id)

    async def get_block(self, block_id: str) -> WorkoutBlock | None:
        """Load a single template block with its exercises."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM workout_blocks WHERE id = ?", (block_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            exercises = await self._load_exercises(db, [block_id])
            return self._row_to_block(row, exercises.get(block_id, []))

    async def exists(self, protocol_id: str) -> bool:
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT 1 FROM protocols WHERE id = ?", (protocol_id,)
            )
            return await cursor.fetchone() is not None

    async def delete(self, protocol_id: str, cascade: bool = False) -> int:
        """Delete a protocol.

        Instances created from the protocol keep their own copy of its
        blocks and exercises and stay readable. With ``cascade`` they are
        deleted as well.

        Returns:
            Number of instances that referenced the protocol
        """
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT COUNT(*) AS n FROM workout_instances WHERE template_protocol_id = ?",
                (protocol_id,),
            )
            referencing = (await cursor.fetchone())["n"]

            if cascade:
                await db.execute(
                    "DELETE FROM workout_instances WHERE template_protocol_id = ?",
                    (protocol_id,),
                )
            await db.execute("DELETE FROM protocols WHERE id = ?", (protocol_id,))
            await db.commit()

        if referencing and not cascade:
            logger.warning(
                "Deleted protocol %s; %d workout instance(s) keep their copy of it",
                protocol_id,
                referencing,
            )
        return referencing

    async def _load_blocks(
        self, db: aiosqlite.Connection, protocol_id: str
    ) -> list[WorkoutBlock]:
        cursor = await db.execute(
            "SELECT * FROM workout_blocks WHERE protocol_id = ? ORDER BY position",
            (protocol_id,),
        )
        rows = await cursor.fetchall()
        exercises = await self._load_exercises(db, [row["id"] for row in rows])
        return [self._row_to_block(row, exercises.get(row["id"], [])) for row in rows]

    async def _load_exercises(
        self, db: aiosqlite.Connection, block_ids: list[str]
    ) -> dict[str, list[WorkoutBlockExercise]]:
        if not block_ids:
            return {}
        placeholders = ", ".join("?" for _ in block_ids)
        cursor = await db.execute(
            f"""
            SELECT * FROM workout_block_exercises
            WHERE block_id IN ({placeholders})
            ORDER BY position
            """,
            block_ids,
        )
        grouped: dict[str, list[WorkoutBlockExercise]] = {}
        for row in await cursor.fetchall():
            grouped.setdefault(row["block_id"], []).append(
                WorkoutBlockExercise(
                    id=row["id"],
                    exercise_id=row["exercise_id"],
                    exercise_name=row["exercise_name"] or "",
                    position=row["position"],
                    sets=row["sets"],
                    reps=row["reps"],
                    duration=_parse_duration(row["duration"]),
                    rest=_parse_duration(row["rest"]),
                    load=_parse_load(row["load"]),
                    rpe=row["rpe"],
                    tempo=row["tempo"] or "",
                    notes=row["notes"] or "",
                )
            )
        return grouped

    def _row_to_block(
        self, row: aiosqlite.Row, exercises: list[WorkoutBlockExercise]
    ) -> WorkoutBlock:
        return WorkoutBlock(
            id=row["id"],
            name=row["name"],
            position=row["position"],
            exercises=exercises,
            rest=_parse_duration(row["rest"]),
            block_type=BlockType(row["block_type"]),
            circuit=bool(row["circuit"]),
            notes=row["notes"] or "",
        )

    def _row_to_protocol(
        self, row: aiosqlite.Row, blocks: list[WorkoutBlock]
    ) -> Protocol:
        """Convert a database row to a Protocol."""
        return Protocol(
            id=row["id"],
            name=row["name"],
            description=row["description"] or "",
            objectives=json.loads(row["objectives"]),
            days_per_week=row["days_per_week"],
            blocks=blocks,
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
        )


class WorkoutInstanceRepository:
    """Repository for performed workout sessions.

    Instances are created with their full block and exercise tree in a
    single transaction; later updates touch one row at a time.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def save(self, instance: WorkoutInstance) -> WorkoutInstance:
        """Insert or replace an instance and its whole subtree."""
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO workout_instances
                (id, user_id, template_protocol_id, protocol_name, started_at, ended_at, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    protocol_name = excluded.protocol_name,
                    started_at = excluded.started_at,
                    ended_at = excluded.ended_at,
                    notes = excluded.notes
                """,
                (
                    instance.id,
                    instance.user_id,
                    instance.template_protocol_id,
                    instance.protocol_name,
                    format_timestamp(instance.started_at),
                    format_timestamp(instance.ended_at),
                    instance.notes,
                ),
            )
            await db.execute(
                "DELETE FROM workout_block_instances WHERE instance_id = ?",
                (instance.id,),
            )
            for block in instance.blocks:
                await self._insert_block(db, instance.id, block)
            await db.commit()
        return instance

    async def _insert_block(
        self, db: aiosqlite.Connection, instance_id: str, block: WorkoutBlockInstance
    ) -> None:
        await db.execute(
            """
            INSERT INTO workout_block_instances
            (id, instance_id, template_block_id, position, name, block_type,
             prescribed_rest, started_at, ended_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                block.id,
                instance_id,
                block.template_block_id,
                block.position,
                block.name,
                block.block_type.value,
                _dump_measure(block.prescribed_rest),
                format_timestamp(block.started_at),
                format_timestamp(block.ended_at),
            ),
        )
        for ex in block.exercises:
            await self._insert_exercise(db, block.id, ex)

    async def _insert_exercise(
        self,
        db: aiosqlite.Connection,
        block_instance_id: str,
        ex: WorkoutBlockExerciseInstance,
    ) -> None:
        await db.execute(
            """
            INSERT INTO workout_block_exercise_instances
            (id, block_instance_id, template_exercise_id, exercise_id, exercise_name,
             position, set_number, prescribed_sets, prescribed_reps, prescribed_duration,
             prescribed_rest, prescribed_load, reps_completed, actual_duration, actual_rest,
             actual_load, rpe, notes, complete, completed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                ex.id,
                block_instance_id,
                ex.template_exercise_id,
                ex.exercise_id,
                ex.exercise_name,
                ex.position,
                ex.set_number,
                ex.prescribed_sets,
                ex.prescribed_reps,
                _dump_measure(ex.prescribed_duration),
                _dump_measure(ex.prescribed_rest),
                _dump_measure(ex.prescribed_load),
                ex.reps_completed,
                _dump_measure(ex.actual_duration),
                _dump_measure(ex.actual_rest),
                _dump_measure(ex.actual_load),
                ex.rpe,
                ex.notes,
                int(ex.complete),
                format_timestamp(ex.completed_at),
            ),
        )

    async def get(self, instance_id: str) -> WorkoutInstance | None:
        """Load an instance with its ordered blocks and exercises."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM workout_instances WHERE id = ?", (instance_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            blocks = await self._load_blocks(db, instance_id)
            return self._row_to_instance(row, blocks)

    async def list_for_user(self, user_id: str) -> list[WorkoutInstance]:
        """List a user's sessions, newest first."""
        return await self._list(
            "SELECT * FROM workout_instances WHERE user_id = ? ORDER BY started_at DESC",
            (user_id,),
        )

    async def list_for_protocol(self, protocol_id: str) -> list[WorkoutInstance]:
        """List sessions instantiated from a protocol, newest first."""
        return await self._list(
            """
            SELECT * FROM workout_instances
            WHERE template_protocol_id = ?
            ORDER BY started_at DESC
            """,
            (protocol_id,),
        )

    async def _list(self, query: str, params: tuple) -> list[WorkoutInstance]:
        async with connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [
                self._row_to_instance(row, await self._load_blocks(db, row["id"]))
                for row in rows
            ]

    async def list_children(self, instance_id: str) -> list[WorkoutBlockInstance]:
        """Ordered block instances of a session."""
        async with connect(self.db_path) as db:
            return await self._load_blocks(db, instance_id)

    async def update_header(self, instance: WorkoutInstance) -> None:
        """Persist the instance row only (timestamps and notes)."""
        async with connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE workout_instances SET
                    protocol_name = ?, started_at = ?, ended_at = ?, notes = ?
                WHERE id = ?
                """,
                (
                    instance.protocol_name,
                    format_timestamp(instance.started_at),
                    format_timestamp(instance.ended_at),
                    instance.notes,
                    instance.id,
                ),
            )
            await db.commit()

    async def update_block_instance(self, block: WorkoutBlockInstance) -> None:
        """Persist block timestamps."""
        async with connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE workout_block_instances SET started_at = ?, ended_at = ?
                WHERE id = ?
                """,
                (
                    format_timestamp(block.started_at),
                    format_timestamp(block.ended_at),
                    block.id,
                ),
            )
            await db.commit()

    async def update_exercise_instance(self, ex: WorkoutBlockExerciseInstance) -> None:
        """Persist the performance fields of a single leaf."""
        async with connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE workout_block_exercise_instances SET
                    reps_completed = ?, actual_duration = ?, actual_rest = ?,
                    actual_load = ?, rpe = ?, notes = ?, complete = ?, completed_at = ?
                WHERE id = ?
                """,
                (
                    ex.reps_completed,
                    _dump_measure(ex.actual_duration),
                    _dump_measure(ex.actual_rest),
                    _dump_measure(ex.actual_load),
                    ex.rpe,
                    ex.notes,
                    int(ex.complete),
                    format_timestamp(ex.completed_at),
                    ex.id,
                ),
            )
            await db.commit()

    async def add_exercise_instance(
        self, block_instance_id: str, ex: WorkoutBlockExerciseInstance
    ) -> None:
        """Insert one extra leaf (an added set) into a block instance."""
        async with connect(self.db_path) as db:
            await self._insert_exercise(db, block_instance_id, ex)
            await db.commit()

    async def delete_exercise_instance(self, exercise_instance_id: str) -> None:
        async with connect(self.db_path) as db:
            await db.execute(
                "DELETE FROM workout_block_exercise_instances WHERE id = ?",
                (exercise_instance_id,),
            )
            await db.commit()

    async def delete(self, instance_id: str) -> None:
        """Delete an instance and its subtree."""
        async with connect(self.db_path) as db:
            await db.execute("DELETE FROM workout_instances WHERE id = ?", (instance_id,))
            await db.commit()

    async def _load_blocks(
        self, db: aiosqlite.Connection, instance_id: str
    ) -> list[WorkoutBlockInstance]:
        cursor = await db.execute(
            """
            SELECT * FROM workout_block_instances
            WHERE instance_id = ?
            ORDER BY position
            """,
            (instance_id,),
        )
        block_rows = await cursor.fetchall()

        cursor = await db.execute(
            """
            SELECT e.* FROM workout_block_exercise_instances e
            JOIN workout_block_instances b ON e.block_instance_id = b.id
            WHERE b.instance_id = ?
            ORDER BY e.position, e.set_number
            """,
            (instance_id,),
        )
        leaves: dict[str, list[WorkoutBlockExerciseInstance]] = {}
        for row in await cursor.fetchall():
            leaves.setdefault(row["block_instance_id"], []).append(
                self._row_to_exercise(row)
            )

        return [
            WorkoutBlockInstance(
                id=row["id"],
                template_block_id=row["template_block_id"],
                name=row["name"] or "",
                position=row["position"],
                block_type=BlockType(row["block_type"]),
                prescribed_rest=_parse_duration(row["prescribed_rest"]),
                exercises=leaves.get(row["id"], []),
                started_at=parse_timestamp(row["started_at"]),
                ended_at=parse_timestamp(row["ended_at"]),
            )
            for row in block_rows
        ]

    def _row_to_exercise(self, row: aiosqlite.Row) -> WorkoutBlockExerciseInstance:
        return WorkoutBlockExerciseInstance(
            id=row["id"],
            template_exercise_id=row["template_exercise_id"],
            exercise_id=row["exercise_id"],
            exercise_name=row["exercise_name"] or "",
            position=row["position"],
            set_number=row["set_number"],
            prescribed_sets=row["prescribed_sets"],
            prescribed_reps=row["prescribed_reps"],
            prescribed_duration=_parse_duration(row["prescribed_duration"]),
            prescribed_rest=_parse_duration(row["prescribed_rest"]),
            prescribed_load=_parse_load(row["prescribed_load"]),
            reps_completed=row["reps_completed"],
            actual_duration=_parse_duration(row["actual_duration"]),
            actual_rest=_parse_duration(row["actual_rest"]),
            actual_load=_parse_load(row["actual_load"]),
            rpe=row["rpe"],
            notes=row["notes"] or "",
            complete=bool(row["complete"]),
            completed_at=parse_timestamp(row["completed_at"]),
        )

    def _row_to_instance(
        self, row: aiosqlite.Row, blocks: list[WorkoutBlockInstance]
    ) -> WorkoutInstance:
        """Convert a database row to a WorkoutInstance."""
        return WorkoutInstance(
            id=row["id"],
            user_id=row["user_id"],
            template_protocol_id=row["template_protocol_id"],
            protocol_name=row["protocol_name"] or "",
            started_at=parse_timestamp(row["started_at"]),
            ended_at=parse_timestamp(row["ended_at"]),
            notes=row["notes"] or "",
            blocks=blocks,
        )
