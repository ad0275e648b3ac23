"""Main CLI entry point for crowdstrike-connector."""

import click

from crowdstrike_connector.cli.commands import fetch, server
from crowdstrike_connector.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="crowdstrike-connector")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """CrowdStrike Falcon connector.

    \b
    Commands:
      fetch      Fetch one page of an entity kind into a JSON file
      entities   List the supported entity kinds
      serve      Run the HTTP page endpoint

    \b
    Quick Start:
      crowdstrike-connector entities
      crowdstrike-connector fetch --token $TOKEN --entity user -o users.json
    """
    ctx.ensure_object(dict)


cli.add_command(fetch.fetch)
cli.add_command(fetch.entities)
cli.add_command(server.serve)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
