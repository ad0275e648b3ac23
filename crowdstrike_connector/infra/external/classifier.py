"""Classification of datasource responses.

Rules, applied in order to a response that made it over the wire:

1. The body is a vendor error envelope with a non-empty ``errors`` array:
   ``DatasourceFailed`` with the vendor's codes and messages, whatever the
   HTTP status was (the vendor sends these with 200 as well).
2. The status is not 2xx: ``DatasourceRejected`` with the status and any
   ``Retry-After`` header.
3. The body is not a JSON object: ``MalformedResponse``.
4. Otherwise the parsed body is returned.

Transport failures never reach this module; the HTTP client raises
``DatasourceUnreachable`` for them.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from crowdstrike_connector.core.exceptions import (
    DatasourceFailed,
    DatasourceRejected,
    MalformedResponse,
)

logger = logging.getLogger(__name__)


def parse_body(response: httpx.Response) -> Any | None:
    """Parse a JSON body, returning None when there is none or it is not JSON."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def vendor_errors(body: Any) -> list[tuple[int | None, str]]:
    """Extract ``(code, message)`` pairs from a REST or GraphQL error envelope.

    REST envelopes carry ``{"code": 404, "message": "..."}`` entries; GraphQL
    errors carry ``message`` and optionally ``extensions.code``.
    """
    if not isinstance(body, dict):
        return []
    errors = body.get("errors")
    if not isinstance(errors, list):
        return []

    pairs: list[tuple[int | None, str]] = []
    for entry in errors:
        if not isinstance(entry, dict):
            pairs.append((None, str(entry)))
            continue
        code = entry.get("code")
        if code is None and isinstance(entry.get("extensions"), dict):
            code = entry["extensions"].get("code")
        if isinstance(code, str) and code.isdigit():
            code = int(code)
        if not isinstance(code, int) or isinstance(code, bool):
            code = None
        pairs.append((code, str(entry.get("message", ""))))
    return pairs


def classify_response(response: httpx.Response) -> dict[str, Any]:
    """Classify one HTTP response from the datasource.

    Args:
        response: Raw response, any status.

    Returns:
        The parsed JSON body of a successful response.

    Raises:
        DatasourceFailed: Vendor error envelope with at least one error.
        DatasourceRejected: Non-2xx status without a vendor error envelope.
        MalformedResponse: 2xx status whose body is not a JSON object.
    """
    body = parse_body(response)

    errors = vendor_errors(body)
    if errors:
        logger.debug(
            "Datasource returned error envelope",
            extra={"status_code": response.status_code, "errors": len(errors)},
        )
        raise DatasourceFailed(errors=errors, status_code=response.status_code)

    if not response.is_success:
        raise DatasourceRejected(
            status_code=response.status_code,
            retry_after=response.headers.get("Retry-After"),
        )

    if not isinstance(body, dict):
        raise MalformedResponse(
            detail="Failed to parse the datasource response as a JSON object.",
            status_code=response.status_code,
        )

    return body
