"""Base HTTP client for the datasource.

Provides a base class for datasource clients with:
- Connection pooling
- Request/response logging
- Timeout configuration
- Transport failures mapped to connector exceptions

No retries happen at this layer; the caller owns retry policy.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from crowdstrike_connector.core.exceptions import DatasourceTimeout, DatasourceUnreachable

logger = logging.getLogger(__name__)


class BaseHTTPClient:
    """Base HTTP client for datasource integrations.

    Responses are returned as-is, whatever their status; deciding what a
    status or body means is the classifier's job.

    Example:
        ```python
        async with BaseHTTPClient(timeout=10.0) as http:
            response = await http.get("https://api.crowdstrike.com/detects/queries/detects/v1")
        ```
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        verify: bool = True,
        max_connections: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            base_url: Base URL for relative paths; absolute URLs bypass it.
            timeout: Default request timeout in seconds.
            headers: Default headers to include in all requests.
            verify: Verify TLS certificates.
            max_connections: Connection pool size.
            transport: Custom transport (tests use httpx.MockTransport).
        """
        self.base_url = base_url
        self.timeout = timeout
        self.default_headers = headers or {}

        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            headers=self.default_headers,
            verify=verify,
            limits=httpx.Limits(
                max_keepalive_connections=max_connections,
                max_connections=max_connections,
            ),
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        await self.client.aclose()

    async def __aenter__(self) -> BaseHTTPClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Make GET request to the datasource.

        Raises:
            DatasourceTimeout: When the timeout elapses.
            DatasourceUnreachable: On connection and protocol failures.
        """
        return await self._send("GET", url, params=params, headers=headers, timeout=timeout)

    async def post(
        self,
        url: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Make POST request to the datasource.

        Raises:
            DatasourceTimeout: When the timeout elapses.
            DatasourceUnreachable: On connection and protocol failures.
        """
        return await self._send(
            "POST", url, json=json, params=params, headers=headers, timeout=timeout,
        )

    async def _send(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        effective_timeout = timeout if timeout is not None else self.timeout
        logger.debug(f"{method} request to {url}", extra={"method": method, "url": url})

        try:
            response = await self.client.request(
                method,
                url,
                json=json,
                params=params,
                headers=headers,
                timeout=httpx.Timeout(effective_timeout),
            )
        except httpx.TimeoutException as e:
            raise DatasourceTimeout(
                timeout_seconds=effective_timeout,
                extra={"url": url, "method": method},
            ) from e
        except httpx.HTTPError as e:
            raise DatasourceUnreachable(
                detail=f"Failed to execute CrowdStrike request: {e}.",
                extra={"url": url, "method": method},
            ) from e

        logger.debug(
            f"{method} response from {url}",
            extra={
                "method": method,
                "url": url,
                "status_code": response.status_code,
                "duration_ms": response.elapsed.total_seconds() * 1000,
            },
        )
        return response
