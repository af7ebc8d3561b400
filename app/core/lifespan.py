"""Application lifespan: startup and shutdown.

Single place for startup/shutdown logic. Used by main.py; no business
logic here, only wiring of infrastructure (logging, object storage,
DB engine dispose).
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.external.storage.factory import StorageFactory
from app.shared.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup: logging, one storage client for the process (app.state.storage).
    Shutdown: SQL engine dispose.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    app.state.storage = StorageFactory.create_storage_service(settings)
    logger.info(
        "%s %s started (storage backend: %s)",
        settings.app_name,
        settings.app_version,
        settings.storage_backend,
    )

    yield

    # ---- Shutdown ----
    app.state.storage = None

    from app.infrastructure.persistence import database

    if getattr(database, "engine", None) is not None:
        await database.dispose_engine()
        logger.info("Database engine disposed")
