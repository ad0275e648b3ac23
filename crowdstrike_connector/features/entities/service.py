"""Datasource orchestration for one page fetch.

``FalconDatasource.get_page`` turns a resolved page request into the vendor
calls its surface needs, classifies every response, and runs the entity's
pagination driver over the result:

- GraphQL entities: one query, continued by ``pageInfo.endCursor``.
- Offset entities: a listing of identifiers, then one detail call for exactly
  those identifiers, continued by the offset.
- Scroll entities: the same two calls, continued by the vendor's string
  offset. The listing one page past the end comes back empty with an empty
  offset, and no detail call is made for it.
- Combined alerts: one search-after call, continued by the vendor's token.

Records are returned raw; normalization belongs to the adapter.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from crowdstrike_connector.core.exceptions import (
    ConnectorException,
    DatasourceTimeout,
    MalformedResponse,
)
from crowdstrike_connector.core.pagination import (
    CursorCodec,
    OffsetDriver,
    OffsetPagination,
    PageAdvance,
    PageInfo,
    ScrollDriver,
    SearchAfterCursor,
    SearchAfterPagination,
    SimpleCursor,
    pagination_block,
)
from crowdstrike_connector.features.entities import queries
from crowdstrike_connector.features.entities.endpoints import (
    graphql_url,
    list_url,
    resource_url,
)
from crowdstrike_connector.features.entities.registry import Surface
from crowdstrike_connector.features.entities.validation import ResolvedPageRequest
from crowdstrike_connector.infra.external import FalconClient
from crowdstrike_connector.infra.logging import ContextBoundLogger, get_logger
from crowdstrike_connector.infra.tracing import add_span_attributes, get_tracer, record_exception

tracer = get_tracer(__name__)


@dataclass(frozen=True)
class DatasourcePage:
    """Raw outcome of one page fetch.

    Attributes:
        status_code: Status of the last datasource call
        records: Raw records, in vendor order
        advance: Next cursor decision of the pagination driver
    """

    status_code: int
    records: list[Any] = field(default_factory=list)
    advance: PageAdvance = field(default_factory=PageAdvance.last)


def _resources(body: dict[str, Any], what: str) -> list[Any]:
    resources = body.get("resources")
    if not isinstance(resources, list):
        raise MalformedResponse(detail=f"Missing {what} in the datasource response.")
    return resources


def _graphql_connection(body: dict[str, Any], connection: str) -> dict[str, Any]:
    data = body.get("data")
    block = data.get(connection) if isinstance(data, dict) else None
    if not isinstance(block, dict):
        raise MalformedResponse(
            detail=f"Missing {connection} in the datasource response.",
            extra={"connection": connection},
        )
    return block


class FalconDatasource:
    """Fetch one page of an entity kind from CrowdStrike Falcon.

    Example:
            async with FalconClient() as client:
                datasource = FalconDatasource(client)
                page = await datasource.get_page(resolved)
    """

    def __init__(self, client: FalconClient) -> None:
        self.client = client

    async def get_page(self, request: ResolvedPageRequest) -> DatasourcePage:
        """Fetch one page within the request's deadline.

        Raises:
            ConnectorException: For every classified failure; nothing is retried.
        """
        log = get_logger(
            __name__,
            entity_external_id=request.binding.kind.value,
            page_size=request.page_size,
        )
        log.info("Starting datasource request")

        with tracer.start_as_current_span("falcon.get_page"):
            add_span_attributes(
                {
                    "falcon.entity": request.binding.kind.value,
                    "falcon.surface": request.binding.surface.value,
                    "falcon.page_size": request.page_size,
                },
            )
            try:
                async with asyncio.timeout(request.timeout_seconds):
                    page = await self._dispatch(request, log)
            except TimeoutError as e:
                error = DatasourceTimeout(timeout_seconds=request.timeout_seconds)
                record_exception(error)
                log.error("Datasource request failed", extra={"error_type": error.type})
                raise error from e
            except ConnectorException as e:
                record_exception(e)
                log.error(
                    "Datasource request failed",
                    extra={"error_type": e.type, "status_code": e.status_code},
                )
                raise

        next_cursor = page.advance.next_cursor
        log.info(
            "Datasource request completed successfully",
            extra={
                "status_code": page.status_code,
                "object_count": len(page.records),
                "next_cursor": next_cursor.to_wire() if next_cursor else None,
            },
        )
        return page

    async def _dispatch(self, request: ResolvedPageRequest, log: ContextBoundLogger) -> DatasourcePage:
        binding = request.binding
        if binding.surface is Surface.GRAPHQL:
            return await self._graphql_page(request, log)
        if binding.search_path is not None:
            return await self._search_after_page(request, log)
        return await self._offset_page(request, log)

    async def _graphql_page(self, request: ResolvedPageRequest, log: ContextBoundLogger) -> DatasourcePage:
        binding = request.binding
        cursor = request.cursor if isinstance(request.cursor, SimpleCursor) else None

        query = queries.build(
            binding.kind,
            queries.QueryParameters(
                page_size=request.page_size,
                archived=request.archived,
                enabled=request.enabled,
                after=cursor.cursor if cursor else None,
            ),
        )
        url = graphql_url(request.base_url, request.api_version)

        log.info("Sending HTTP request to datasource", extra={"url": url})
        response = await self.client.graphql(
            url,
            query,
            request.authorization,
            timeout=request.timeout_seconds,
        )

        connection = _graphql_connection(response.body, binding.connection)
        nodes = connection.get("nodes")
        if nodes is None:
            nodes = []
        if not isinstance(nodes, list):
            raise MalformedResponse(detail=f"Expected {binding.connection}.nodes to be a list.")

        page_info = PageInfo.model_validate(connection.get("pageInfo") or {})
        advance = binding.driver.advance(
            page_info,
            request.cursor,
            record_count=len(nodes),
            page_size=request.page_size,
        )
        return DatasourcePage(status_code=response.status_code, records=nodes, advance=advance)

    async def _offset_page(self, request: ResolvedPageRequest, log: ContextBoundLogger) -> DatasourcePage:
        binding = request.binding
        scroll = isinstance(binding.driver, ScrollDriver)
        offset = ScrollDriver.offset_of(request.cursor) if scroll else OffsetDriver.offset_of(request.cursor)

        url = list_url(
            request.base_url,
            binding.list_path,
            limit=request.page_size,
            offset=offset,
            filter=request.filter,
        )
        log.info("Sending HTTP request to datasource", extra={"url": url})
        listing = await self.client.list_ids(url, request.authorization, timeout=request.timeout_seconds)
        ids = _resources(listing.body, "resource IDs")
        pagination = OffsetPagination.model_validate(pagination_block(listing.body))

        if scroll and not ids and not pagination.offset:
            log.info("Scroll listing is exhausted; skipping detail request")
            return DatasourcePage(status_code=listing.status_code, records=[], advance=PageAdvance.last())

        # Sent even when empty: the vendor decides what an empty id set means
        url = resource_url(request.base_url, binding.detail_path)
        log.info("Sending HTTP request to datasource", extra={"url": url, "id_count": len(ids)})
        details = await self.client.get_details(
            url,
            [str(resource_id) for resource_id in ids],
            request.authorization,
            id_field=binding.detail_id_field,
            timeout=request.timeout_seconds,
        )
        records = _resources(details.body, "detailed resources")

        advance = binding.driver.advance(
            pagination,
            request.cursor,
            record_count=len(ids),
            page_size=request.page_size,
        )
        return DatasourcePage(status_code=details.status_code, records=records, advance=advance)

    async def _search_after_page(self, request: ResolvedPageRequest, log: ContextBoundLogger) -> DatasourcePage:
        binding = request.binding
        cursor = request.cursor if isinstance(request.cursor, SearchAfterCursor) else None

        body: dict[str, Any] = {"limit": request.page_size}
        if cursor is not None and not cursor.is_empty:
            body["after"] = CursorCodec.encode_search_after(cursor)
        if request.filter:
            body["filter"] = request.filter

        url = resource_url(request.base_url, binding.search_path)
        log.info("Sending HTTP request to datasource", extra={"url": url})
        response = await self.client.combined_alerts(
            url,
            body,
            request.authorization,
            timeout=request.timeout_seconds,
        )
        records = _resources(response.body, "resources")

        advance = binding.driver.advance(
            SearchAfterPagination.model_validate(pagination_block(response.body)),
            request.cursor,
            record_count=len(records),
            page_size=request.page_size,
        )
        return DatasourcePage(status_code=response.status_code, records=records, advance=advance)
