"""Runtime configuration read from the environment."""

import logging
import os
from pathlib import Path

# Default data directory (project root / data)
DEFAULT_DATA_DIR = Path(__file__).parent.parent.parent / "data"
DB_FILENAME = "helix_train.db"


def get_data_dir() -> Path:
    """Get the data directory, honouring HELIX_TRAIN_DATA_DIR."""
    env_dir = os.getenv("HELIX_TRAIN_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    return DEFAULT_DATA_DIR


def get_db_override() -> Path | None:
    """Explicit database file from HELIX_TRAIN_DB, if set."""
    env_db = os.getenv("HELIX_TRAIN_DB")
    return Path(env_db).expanduser() if env_db else None


def get_log_level() -> int:
    """Log level name from HELIX_TRAIN_LOG_LEVEL (default WARNING)."""
    name = os.getenv("HELIX_TRAIN_LOG_LEVEL", "WARNING").upper()
    return getattr(logging, name, logging.WARNING)


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for the CLI and web server."""
    level = logging.DEBUG if verbose else get_log_level()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
