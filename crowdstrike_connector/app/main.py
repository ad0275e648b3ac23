"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from crowdstrike_connector.app.exception_handlers import configure_exception_handlers
from crowdstrike_connector.app.lifespan import lifespan
from crowdstrike_connector.app.middleware import RequestIDMiddleware
from crowdstrike_connector.app.router import setup_routers
from crowdstrike_connector.core.settings import get_app_settings


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app_settings = get_app_settings()

    docs_url = None if app_settings.disable_docs else app_settings.docs_url
    openapi_url = None if app_settings.disable_docs else app_settings.openapi_url

    app = FastAPI(
        title=app_settings.title,
        description=app_settings.description,
        version=app_settings.version,
        docs_url=docs_url,
        redoc_url=None,
        openapi_url=openapi_url,
        debug=app_settings.debug,
        lifespan=lifespan,
    )

    configure_exception_handlers(app)
    app.add_middleware(RequestIDMiddleware)
    setup_routers(app, app_settings)

    return app


# Application instance for uvicorn
app = create_app()
