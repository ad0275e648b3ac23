"""Logging configuration setup.

Provides logging configuration using:
- dictConfig for flexible configuration
- ContextInjectingFilter for automatic context propagation
- All handlers on root logger (child loggers propagate)
- JSONL format for machine parsing

Console output goes to stderr so that CLI commands can write JSON to stdout.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

if TYPE_CHECKING:
    from crowdstrike_connector.core.settings.logs import LoggingSettings


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from crowdstrike_connector.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = settings_obj.to_logging_kwargs()
    if configure_kwargs:
        log_config = {**log_config, **configure_kwargs}

    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    console_enabled: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    include_uvicorn: bool = True,
    service_name: str = "crowdstrike-connector",
    **kwargs: Any,
) -> None:
    """Configure logging with dictConfig.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Enable JSONL (JSON Lines) structured logging.
        console_enabled: Enable console/stderr logging.
        include_context: Enable ContextInjectingFilter for auto context.
        capture_warnings: Forward Python warnings to logging system.
        include_uvicorn: Let uvicorn access logs propagate to the root logger.
        service_name: Static ``service`` field of every JSON record.
        **kwargs: Ignored extra settings.

    Example:
        from crowdstrike_connector.core.settings import get_logging_settings
        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs.keys())))

    if capture_warnings:
        logging.captureWarnings(True)

    logging.config.dictConfig(
        _build_config(
            log_level=log_level,
            json_logs=json_logs,
            console_enabled=console_enabled,
            include_context=include_context,
            include_uvicorn=include_uvicorn,
            service_name=service_name,
        ),
    )


def _build_config(
    log_level: str,
    json_logs: bool,
    console_enabled: bool,
    include_context: bool,
    include_uvicorn: bool,
    service_name: str,
) -> dict[str, Any]:
    """Build the dictConfig mapping."""
    formatters: dict[str, Any] = {}
    if json_logs:
        formatters["json"] = {
            "()": "crowdstrike_connector.infra.logging.formatters.JSONFormatter",
            "fmt_keys": {"level": "levelname", "logger": "name", "message": "message"},
            "static": {"service": service_name},
        }
    else:
        formatters["text"] = {
            "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }

    filters: dict[str, Any] = {}
    if include_context:
        filters["context"] = {
            "()": "crowdstrike_connector.infra.logging.context.ContextInjectingFilter",
        }

    handlers: dict[str, Any] = {}
    if console_enabled:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "json" if json_logs else "text",
            "filters": list(filters),
        }

    loggers: dict[str, Any] = {
        "httpx": {"level": "WARNING"},
        "httpcore": {"level": "WARNING"},
    }
    if not include_uvicorn:
        loggers["uvicorn.access"] = {"level": "WARNING", "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": loggers,
        "root": {
            "level": log_level.upper(),
            "handlers": list(handlers),
        },
    }
