"""Page fetch commands."""

from datetime import UTC, datetime
import json
from pathlib import Path
import sys
from typing import Any

import click

from crowdstrike_connector.cli.utils import coro, error, header, info, success
from crowdstrike_connector.core.exceptions import ConnectorException
from crowdstrike_connector.core.settings import get_connector_settings
from crowdstrike_connector.features.entities import (
    ENTITY_TABLE,
    EntityKind,
    EntityRequest,
    FalconAdapter,
    FalconConfig,
    PageRequest,
)


def build_adapter() -> FalconAdapter:
    """Create the adapter used by the fetch command."""
    return FalconAdapter(settings=get_connector_settings())


@click.command(name="fetch")
@click.option(
    "--address",
    default=None,
    help="Falcon API address (default: FALCON_BASE_URL or https://api.us-2.crowdstrike.com)",
)
@click.option(
    "--token",
    envvar="FALCON_TOKEN",
    required=True,
    help="Bearer token; sent as 'Bearer <token>'",
)
@click.option(
    "--entity",
    default=EntityKind.COMBINED_ALERT.value,
    type=click.Choice([kind.value for kind in EntityKind]),
    show_default=True,
    help="Entity kind to fetch",
)
@click.option(
    "--output",
    "-o",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="File to write the page to",
)
@click.option("--page-size", default=10, type=int, show_default=True, help="Records per page")
@click.option("--cursor", default="", help="Cursor returned by a previous fetch")
@click.option("--filter", "filter_", default=None, help="Filter expression (REST entities only)")
@coro
async def fetch(
    address: str | None,
    token: str,
    entity: str,
    output: Path,
    page_size: int,
    cursor: str,
    filter_: str | None,
) -> None:
    """Fetch one page of an entity kind and save it as JSON."""
    address = address or get_connector_settings().base_url or "https://api.us-2.crowdstrike.com"

    request = PageRequest(
        address=address,
        authorization=f"Bearer {token}",
        config=FalconConfig(
            api_version="v1",
            archived=False,
            enabled=True,
            filters={entity: filter_} if filter_ else None,
        ),
        entity=EntityRequest(external_id=entity),
        page_size=page_size,
        cursor=cursor or None,
    )

    info(f"Fetching {entity} from {address}...")
    try:
        async with build_adapter() as adapter:
            page = await adapter.get_page(request)
    except ConnectorException as e:
        error(f"Error from adapter: {e.detail}")
        sys.exit(1)

    page_data = page.model_dump(mode="json", by_alias=True)
    output_data: dict[str, Any] = {
        "request": {
            "address": address,
            "entity": entity,
            "pageSize": page_size,
            "cursor": cursor,
            "timestamp": datetime.now(UTC).isoformat(timespec="seconds"),
        },
        "response": {
            "objectCount": len(page.objects),
            "nextCursor": page.next_cursor or "",
            "objects": page_data["objects"],
        },
    }

    output.write_text(json.dumps(output_data, indent=2))

    success(f"Response saved to: {output}")
    info(f"Objects retrieved: {len(page.objects)}")
    if page.next_cursor:
        info(f"Next cursor: {page.next_cursor}")
    else:
        info("No more pages available")


@click.command(name="entities")
def entities() -> None:
    """List the supported entity kinds."""
    header("Supported entity kinds")
    for kind, binding in ENTITY_TABLE.items():
        endpoint = binding.connection or binding.search_path or binding.list_path
        click.echo(f"  {kind.value:<38} {binding.surface.value:<8} {binding.driver.name:<13} {endpoint}")
