"""Pydantic Settings v2 configuration.

Settings are split by domain (app/connector/logging), loaded from the
environment or a ``.env`` file, frozen, and cached by the loaders:

    from crowdstrike_connector.core.settings import get_connector_settings

    settings = get_connector_settings()
    print(settings.request_timeout_seconds)

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables (production)
    3. .env file (development only)
"""

from __future__ import annotations

from .app import AppSettings
from .connector import SUPPORTED_API_VERSIONS, ConnectorSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_connector_settings,
    get_logging_settings,
)
from .logs import LoggingSettings

__all__ = [
    "SUPPORTED_API_VERSIONS",
    "AppSettings",
    "ConnectorSettings",
    "LoggingSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_connector_settings",
    "get_logging_settings",
]
