"""Structured logging for the connector.

Usage:
    from crowdstrike_connector.infra.logging import get_logger, set_log_context

    set_log_context(request_id="abc-123")
    log = get_logger(__name__, entity_external_id="user")
    log.info("Starting datasource request", extra={"page_size": 2})
"""

from crowdstrike_connector.infra.logging.config import configure_logging, setup_logging
from crowdstrike_connector.infra.logging.context import (
    ContextBoundLogger,
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    get_logger,
    remove_from_log_context,
    set_log_context,
)
from crowdstrike_connector.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextBoundLogger",
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "get_logger",
    "remove_from_log_context",
    "set_log_context",
    "setup_logging",
]
