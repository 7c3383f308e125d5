"""Database engine setup and initialization."""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from ..config import DB_FILENAME, get_data_dir, get_db_override

logger = logging.getLogger(__name__)


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        override = get_db_override()
        if override is not None:
            override.parent.mkdir(parents=True, exist_ok=True)
            return override
        data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / DB_FILENAME


@asynccontextmanager
async def connect(db_path: Path) -> AsyncIterator[aiosqlite.Connection]:
    """Open a connection with row access by name and foreign keys enforced."""
    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        await db.execute("PRAGMA foreign_keys = ON")
        yield db


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with connect(db_path) as db:
        # Exercise catalog
        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercises (
                id TEXT PRIMARY KEY,
                name TEXT UNIQUE NOT NULL,
                aliases TEXT DEFAULT '[]',
                muscle_groups TEXT NOT NULL,
                movement_pattern TEXT NOT NULL,
                description TEXT DEFAULT '',
                is_compound INTEGER DEFAULT 0
            )
        """)

        # Templates
        await db.execute("""
            CREATE TABLE IF NOT EXISTS protocols (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT DEFAULT '',
                objectives TEXT DEFAULT '[]',
                days_per_week INTEGER,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_blocks (
                id TEXT PRIMARY KEY,
                protocol_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                name TEXT NOT NULL,
                rest TEXT,
                block_type TEXT DEFAULT 'main',
                circuit INTEGER DEFAULT 0,
                notes TEXT DEFAULT '',
                UNIQUE (protocol_id, position),
                FOREIGN KEY (protocol_id) REFERENCES protocols(id) ON DELETE CASCADE
            )
        """)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_block_exercises (
                id TEXT PRIMARY KEY,
                block_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                exercise_id TEXT NOT NULL,
                exercise_name TEXT DEFAULT '',
                sets INTEGER DEFAULT 1,
                reps INTEGER,
                duration TEXT,
                rest TEXT,
                load TEXT,
                rpe REAL,
                tempo TEXT DEFAULT '',
                notes TEXT DEFAULT '',
                UNIQUE (block_id, position),
                FOREIGN KEY (block_id) REFERENCES workout_blocks(id) ON DELETE CASCADE
            )
        """)

        # Instances. Template ids are plain columns, not foreign keys:
        # instances must survive deletion of their template.
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_instances (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL,
                template_protocol_id TEXT,
                protocol_name TEXT DEFAULT '',
                started_at TIMESTAMP,
                ended_at TIMESTAMP,
                notes TEXT DEFAULT ''
            )
        """)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_block_instances (
                id TEXT PRIMARY KEY,
                instance_id TEXT NOT NULL,
                template_block_id TEXT,
                position INTEGER NOT NULL,
                name TEXT DEFAULT '',
                block_type TEXT DEFAULT 'main',
                prescribed_rest TEXT,
                started_at TIMESTAMP,
                ended_at TIMESTAMP,
                FOREIGN KEY (instance_id) REFERENCES workout_instances(id) ON DELETE CASCADE
            )
        """)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_block_exercise_instances (
                id TEXT PRIMARY KEY,
                block_instance_id TEXT NOT NULL,
                template_exercise_id TEXT,
                exercise_id TEXT NOT NULL,
                exercise_name TEXT DEFAULT '',
                position INTEGER NOT NULL,
                set_number INTEGER DEFAULT 1,
                prescribed_sets INTEGER DEFAULT 1,
                prescribed_reps INTEGER,
                prescribed_duration TEXT,
                prescribed_rest TEXT,
                prescribed_load TEXT,
                reps_completed INTEGER DEFAULT 0,
                actual_duration TEXT,
                actual_rest TEXT,
                actual_load TEXT,
                rpe REAL,
                notes TEXT DEFAULT '',
                complete INTEGER DEFAULT 0,
                completed_at TIMESTAMP,
                FOREIGN KEY (block_instance_id)
                    REFERENCES workout_block_instances(id) ON DELETE CASCADE
            )
        """)

        # Create indexes for common queries
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_blocks_protocol
            ON workout_blocks(protocol_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_block_exercises_block
            ON workout_block_exercises(block_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_instances_user
            ON workout_instances(user_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_instances_protocol
            ON workout_instances(template_protocol_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_block_instances_instance
            ON workout_block_instances(instance_id)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_exercise_instances_block
            ON workout_block_exercise_instances(block_instance_id)
        """)

        await db.commit()
    logger.debug("Initialized database at %s", db_path)


async def seed_exercises(db_path: Path | None = None) -> int:
    """Seed the database with common exercises.

    Returns:
        Number of exercises inserted
    """
    from ..models.exercises import COMMON_EXERCISES

    if db_path is None:
        db_path = get_db_path()

    inserted = 0
    async with connect(db_path) as db:
        for exercise in COMMON_EXERCISES:
            cursor = await db.execute(
                """
                INSERT OR IGNORE INTO exercises
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
            inserted += cursor.rowcount

        await db.commit()
    return inserted
