"""Shared request dependencies."""

from pathlib import Path

from fastapi import Header, HTTPException, Request


def get_db_path(request: Request) -> Path:
    """Database path configured on the app."""
    return request.app.state.db_path


def get_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Caller identity, supplied by the fronting auth layer."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id
