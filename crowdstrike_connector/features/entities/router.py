"""Page fetch endpoint.

Endpoints:
    POST /pages - Fetch one page of an entity kind

Failures are rendered by the application's exception handlers as RFC 7807
problem details.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from crowdstrike_connector.features.entities.adapter import FalconAdapter
from crowdstrike_connector.features.entities.dependencies import get_adapter
from crowdstrike_connector.features.entities.schemas import Page, PageRequest

router = APIRouter(tags=["entities"])


@router.post(
    "/pages",
    response_model=Page,
    response_model_exclude_none=True,
    responses={
        400: {"description": "Invalid configuration, cursor or entity"},
        502: {"description": "Datasource rejected or failed the request"},
        503: {"description": "Datasource unreachable"},
        504: {"description": "Datasource timed out"},
    },
    summary="Fetch a page",
    description="Fetch one page of CrowdStrike Falcon records for an entity kind",
)
async def get_page(
    request: PageRequest,
    adapter: Annotated[FalconAdapter, Depends(get_adapter)],
) -> Page:
    """Fetch one page.

    Args:
        request: Page request body.
        adapter: Shared adapter instance.

    Returns:
        Normalized records and the next cursor.
    """
    return await adapter.get_page(request)
