"""Router registry and setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from crowdstrike_connector.core.settings import get_app_settings
from crowdstrike_connector.features.entities.router import router as entities_router
from crowdstrike_connector.features.health.router import router as health_router
from crowdstrike_connector.features.metrics.router import router as metrics_router

if TYPE_CHECKING:
    from fastapi import FastAPI

    from crowdstrike_connector.core.settings.app import AppSettings

logger = logging.getLogger(__name__)


def setup_routers(app: FastAPI, app_settings: AppSettings | None = None) -> None:
    """Register all feature routers with the application.

    Health and metrics stay at the root; the page endpoint sits under the
    API prefix.
    """
    settings = app_settings or get_app_settings()

    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(entities_router, prefix=settings.api_prefix)

    logger.info("Routers configured", extra={"api_prefix": settings.api_prefix})
