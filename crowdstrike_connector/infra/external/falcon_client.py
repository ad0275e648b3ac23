"""CrowdStrike Falcon API client.

Wraps the two query surfaces the connector reads from:

- Identity Protection GraphQL (users, endpoints, incidents)
- Falcon REST APIs (detections, incidents and alerts)

Every method sends exactly one request and returns the classified body; see
``classifier`` for how statuses and vendor error envelopes are mapped.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from crowdstrike_connector.infra.external.base_client import BaseHTTPClient
from crowdstrike_connector.infra.external.classifier import classify_response
from crowdstrike_connector.infra.metrics.tracking import track_datasource_request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatasourceResponse:
    """Classified response of one datasource call.

    Attributes:
        status_code: HTTP status the datasource answered with
        body: Parsed JSON object
    """

    status_code: int
    body: dict[str, Any]


class FalconClient(BaseHTTPClient):
    """HTTP client for the CrowdStrike Falcon APIs.

    URLs are absolute and built by the caller, so one client can serve
    requests for several Falcon clouds.

    Example:
        ```python
        async with FalconClient(timeout=30.0) as client:
            response = await client.graphql(
                "https://api.crowdstrike.com/identity-protection/combined/graphql/v1",
                query="{ entities(first: 2) { nodes { entityId } } }",
                authorization="Bearer <token>",
            )
        ```
    """

    @staticmethod
    def _headers(authorization: str) -> dict[str, str]:
        return {
            "Authorization": authorization,
            "Cache-Control": "no-cache",
            "Accept": "application/json",
        }

    async def graphql(
        self,
        url: str,
        query: str,
        authorization: str,
        timeout: float | None = None,
    ) -> DatasourceResponse:
        """POST a GraphQL query with ``variables`` set to null."""
        response = await self.post(
            url,
            json={"query": query, "variables": None},
            headers=self._headers(authorization),
            timeout=timeout,
        )
        track_datasource_request("graphql", response.status_code)
        return DatasourceResponse(response.status_code, classify_response(response))

    async def list_ids(
        self,
        url: str,
        authorization: str,
        timeout: float | None = None,
    ) -> DatasourceResponse:
        """GET one page of resource identifiers from a ``/queries/`` endpoint."""
        response = await self.get(url, headers=self._headers(authorization), timeout=timeout)
        track_datasource_request("rest", response.status_code)
        return DatasourceResponse(response.status_code, classify_response(response))

    async def get_details(
        self,
        url: str,
        ids: list[str],
        authorization: str,
        id_field: str = "ids",
        timeout: float | None = None,
    ) -> DatasourceResponse:
        """POST identifiers to an ``/entities/`` endpoint and return full records.

        An empty ``ids`` list is sent as-is. Some endpoints answer with no
        resources, others reject it; a rejection surfaces as a classified error.
        """
        response = await self.post(
            url,
            json={id_field: ids},
            headers=self._headers(authorization),
            timeout=timeout,
        )
        track_datasource_request("rest", response.status_code)
        return DatasourceResponse(response.status_code, classify_response(response))

    async def combined_alerts(
        self,
        url: str,
        body: dict[str, Any],
        authorization: str,
        timeout: float | None = None,
    ) -> DatasourceResponse:
        """POST a search-after page request to the combined alerts endpoint."""
        response = await self.post(
            url,
            json=body,
            headers=self._headers(authorization),
            timeout=timeout,
        )
        track_datasource_request("rest", response.status_code)
        return DatasourceResponse(response.status_code, classify_response(response))
