"""Application lifespan management.

Startup: logging, then the shared adapter (and its HTTP connection pool).
Shutdown: the adapter is closed, releasing its connections.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from crowdstrike_connector.core.settings import (
    get_app_settings,
    get_connector_settings,
    get_logging_settings,
)
from crowdstrike_connector.features.entities.adapter import FalconAdapter
from crowdstrike_connector.infra.logging.config import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Set up and tear down shared application state."""
    setup_logging(get_logging_settings())

    app_settings = get_app_settings()
    logger.info(
        "Starting application",
        extra={
            "service": app_settings.service_name,
            "version": app_settings.version,
            "environment": str(app_settings.environment),
        },
    )

    # Tests may install their own adapter before startup
    owns_adapter = getattr(app.state, "adapter", None) is None
    if owns_adapter:
        app.state.adapter = FalconAdapter(settings=get_connector_settings())

    try:
        yield
    finally:
        if owns_adapter:
            await app.state.adapter.close()
        logger.info("Application shutdown complete")
