"""FastAPI web server for the Kanban board."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .. import __version__
from ..config import Settings, load_settings
from ..storage import TaskRepository, open_repository
from .task_api import create_task_router

APP_NAME = "Kanban Board API"

# Import string for uvicorn reload mode, which cannot take an app instance.
APP_FACTORY = "kanban_board.server.api:create_app_from_env"


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[TaskRepository] = None,
    enable_cors: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Board settings; defaults are used when omitted.
        repository: Task store to serve. When omitted the store named by
            ``settings.database_url`` is opened, which raises
            ``StoreConnectionError`` if it is unusable.
        enable_cors: Whether to enable CORS for ``settings.cors_origins``.

    Returns:
        Configured FastAPI app.
    """
    settings = settings or Settings()
    if repository is None:
        repository = open_repository(settings.database_url)

    app = FastAPI(
        title=APP_NAME,
        description="REST backend for the three-column task board",
        version=__version__,
    )

    if enable_cors:
        origins = list(settings.cors_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials="*" not in origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.settings = settings
    app.state.repository = repository

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": APP_NAME,
            "version": __version__,
            "status": "running",
        }

    app.include_router(create_task_router())
    logger.debug("Task API mounted at /api/tasks")
    return app


def create_app_from_env() -> FastAPI:
    """App factory for ``uvicorn --factory``; settings come from the environment."""
    return create_app(settings=load_settings())
