"""Identity helpers shared by templates and instances."""

from datetime import datetime, timezone
from uuid import uuid4


def new_id() -> str:
    """Generate a fresh entity identity."""
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an ISO timestamp from storage or the wire."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
