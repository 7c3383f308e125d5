"""CLI commands for helix-train."""

from .exercises import exercises
from .init import init
from .protocols import protocols
from .serve import serve
from .session import session

__all__ = [
    "exercises",
    "init",
    "protocols",
    "serve",
    "session",
]
