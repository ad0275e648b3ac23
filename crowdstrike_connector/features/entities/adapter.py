"""Page fetch entry point.

``FalconAdapter.get_page`` is the single paging contract exposed to callers:

    validation -> cursor decode -> datasource call -> classification
    -> normalization -> cursor encode

It either returns a ``Page`` or raises a ``ConnectorException``.
"""

from __future__ import annotations

from crowdstrike_connector.core.normalization import normalize_all
from crowdstrike_connector.core.pagination import CursorCodec
from crowdstrike_connector.core.settings import ConnectorSettings, get_connector_settings
from crowdstrike_connector.features.entities.schemas import Page, PageRequest
from crowdstrike_connector.features.entities.service import FalconDatasource
from crowdstrike_connector.features.entities.validation import resolve_page_request
from crowdstrike_connector.infra.external import FalconClient
from crowdstrike_connector.infra.metrics.tracking import track_page_fetch


class FalconAdapter:
    """Serve pages of CrowdStrike Falcon entities.

    Example:
            async with FalconAdapter() as adapter:
                page = await adapter.get_page(
                    PageRequest(
                        address="api.us-2.crowdstrike.com",
                        authorization="Bearer <token>",
                        config=FalconConfig(api_version="v1"),
                        entity=EntityRequest(external_id="user"),
                        page_size=100,
                    ),
                )
    """

    def __init__(
        self,
        client: FalconClient | None = None,
        settings: ConnectorSettings | None = None,
    ) -> None:
        self.settings = settings or get_connector_settings()
        self.client = client or FalconClient(
            timeout=self.settings.request_timeout_seconds,
            verify=self.settings.verify_tls,
            max_connections=self.settings.max_connections,
        )
        self.datasource = FalconDatasource(self.client)

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> FalconAdapter:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def get_page(self, request: PageRequest) -> Page:
        """Fetch and normalize one page.

        Args:
            request: Page request as received from the caller.

        Returns:
            Normalized records and the opaque cursor of the next page.

        Raises:
            ConnectorException: Validation, cursor, datasource and parsing failures.
        """
        async with track_page_fetch(request.entity.external_id) as tracker:
            resolved = resolve_page_request(request, self.settings)
            raw = await self.datasource.get_page(resolved)
            objects = normalize_all(raw.records, resolved.tree)
            tracker.record_count = len(objects)

        next_cursor = raw.advance.next_cursor
        return Page(
            objects=objects,
            next_cursor=CursorCodec.encode(next_cursor) if next_cursor is not None else None,
        )
