"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the process.

Usage:
    from crowdstrike_connector.core.settings.loader import get_connector_settings

    settings = get_connector_settings()  # First call: loads and validates
    settings = get_connector_settings()  # Subsequent calls: returns cached instance

Testing:
    In tests, clear the cache to force reload:
    get_connector_settings.cache_clear()
"""

from __future__ import annotations

from functools import lru_cache

from .app import AppSettings
from .connector import ConnectorSettings
from .logs import LoggingSettings


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """Get cached application settings.

    Returns:
        Validated and frozen AppSettings instance.
    """
    return AppSettings()


@lru_cache(maxsize=1)
def get_connector_settings() -> ConnectorSettings:
    """Get cached Falcon datasource settings.

    Returns:
        Validated and frozen ConnectorSettings instance.
    """
    return ConnectorSettings()


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


def clear_all_caches() -> None:
    """Clear every cached settings instance."""
    get_app_settings.cache_clear()
    get_connector_settings.cache_clear()
    get_logging_settings.cache_clear()
