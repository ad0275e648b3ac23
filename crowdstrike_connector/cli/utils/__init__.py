"""CLI utilities for running async operations and formatting output."""

from crowdstrike_connector.cli.utils.async_runner import coro
from crowdstrike_connector.cli.utils.formatters import (
    error,
    header,
    info,
    success,
)

__all__ = [
    "coro",
    "error",
    "header",
    "info",
    "success",
]
