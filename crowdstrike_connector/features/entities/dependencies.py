"""FastAPI dependencies for the entities feature."""

from __future__ import annotations

from fastapi import Request

from crowdstrike_connector.features.entities.adapter import FalconAdapter


def get_adapter(request: Request) -> FalconAdapter:
    """Return the adapter created by the application lifespan.

    Example:
        ```python
        @router.post("/pages")
        async def get_page(adapter: FalconAdapter = Depends(get_adapter)):
            ...
        ```
    """
    return request.app.state.adapter
