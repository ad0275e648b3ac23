"""CLI command modules."""

from crowdstrike_connector.cli.commands import fetch, server

__all__ = [
    "fetch",
    "server",
]
