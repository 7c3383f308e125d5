"""FastAPI application for the helix-train API."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..db.engine import get_db_path, init_db, seed_exercises
from ..errors import InstanceCompleted, NotFound, ValidationError
from .routers import exercises, instances, protocols

logger = logging.getLogger(__name__)


def create_app(db_path: Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    db_path = db_path or get_db_path()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create the schema and seed the catalog on first start."""
        if not db_path.exists():
            await init_db(db_path)
            await seed_exercises(db_path)
            logger.info("Created database at %s", db_path)
        yield

    app = FastAPI(
        title="helix-train",
        description="Training protocols, workout sessions and progress",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.db_path = db_path

    app.include_router(exercises.router)
    app.include_router(protocols.router)
    app.include_router(instances.router)
    app.include_router(instances.block_router)

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"error": str(exc)})

    @app.exception_handler(InstanceCompleted)
    async def completed_handler(request: Request, exc: InstanceCompleted):
        return JSONResponse(status_code=409, content={"error": str(exc)})

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
