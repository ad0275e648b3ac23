"""Cursor encoding and decoding for pagination.

Cursors are opaque strings that encode where the next page starts. Two shapes
exist, and the entity table decides which one an entity kind produces:

1. Simple cursor: a single string. Either the vendor's forward cursor
   (GraphQL ``endCursor``) or a decimal offset for REST list endpoints.
2. Search-after cursor: the vendor's search-after token for the combined
   alerts endpoint, carried verbatim, plus the running count of records
   fetched so far. When the token is readable its fields are copied out too.

The cursor format is:
1. Canonical JSON object (compact separators, fixed key order)
2. Base64 URL-safe encoded for use in URLs

Example cursor payloads:
    {"cursor":"eyJyaXNrU2NvcmUiOjAuNjQ1fQ=="}
    {"version":"v1","total_hits":23,"total_relation":"eq","cluster_id":"test","after":[1749611157221,"ind:5388c5"],"total_fetched":2}
    {"version":"v1","total_hits":0,"total_relation":"eq","cluster_id":"","after":[],"total_fetched":4,"vendor_after":"opaque-token"}
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from crowdstrike_connector.core.exceptions import InvalidCursor


class SimpleCursor(BaseModel):
    """Single-string continuation value.

    Attributes:
        cursor: Vendor cursor or decimal offset. ``None`` and ``""`` both mean
            "start from the first page" but survive a round trip unchanged.
    """

    kind: Literal["simple"] = Field(default="simple", exclude=True)
    cursor: str | None = Field(default=None, description="Vendor cursor or decimal offset")

    model_config = {"frozen": True}

    @field_validator("cursor", mode="before")
    @classmethod
    def _coerce_numeric(cls, value: Any) -> Any:
        # Offsets written by older callers may arrive as JSON numbers.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def is_empty(self) -> bool:
        return not self.cursor

    def to_wire(self) -> dict[str, Any]:
        return {"cursor": self.cursor}


class SearchAfterCursor(BaseModel):
    """Search-after state for the combined alerts endpoint.

    Attributes:
        version: Vendor schema version of the search-after token.
        total_hits: Total hits reported by the vendor (approximate).
        total_relation: ``eq`` when ``total_hits`` is exact, ``gte`` when it is a lower bound.
        cluster_id: Vendor cluster/shard identifier.
        after: Sort-key values of the last record already returned.
        total_fetched: Records returned so far across the whole sequence.
        vendor_after: The vendor's token exactly as issued; sent back unchanged.
    """

    kind: Literal["search_after"] = Field(default="search_after", exclude=True)
    version: str = Field(default="v1", description="Search-after schema version")
    total_hits: int = Field(default=0, ge=0, description="Total hits reported by the vendor")
    total_relation: str = Field(default="eq", description="Relation qualifier for total_hits")
    cluster_id: str = Field(default="", description="Vendor cluster identifier")
    after: tuple[Any, ...] = Field(default=(), description="Sort-key values to search after")
    total_fetched: int = Field(default=0, ge=0, description="Running count of fetched records")
    vendor_after: str | None = Field(default=None, description="Vendor search-after token")

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not self.after and not self.vendor_after

    def to_wire(self) -> dict[str, Any]:
        wire: dict[str, Any] = {
            "version": self.version,
            "total_hits": self.total_hits,
            "total_relation": self.total_relation,
            "cluster_id": self.cluster_id,
            "after": list(self.after),
            "total_fetched": self.total_fetched,
        }
        if self.vendor_after:
            wire["vendor_after"] = self.vendor_after
        return wire


CompositeCursor = SimpleCursor | SearchAfterCursor

_SEARCH_AFTER_KEYS = frozenset(SearchAfterCursor.model_fields) - {"kind"}
_VENDOR_KEYS = _SEARCH_AFTER_KEYS - {"vendor_after"}


class CursorCodec:
    """Encode and decode composite pagination cursors.

    Cursors are URL-safe base64 strings of a canonical JSON payload. Callers
    treat them as opaque and hand them back unchanged.

    Usage:
        # Encoding
        token = CursorCodec.encode(SimpleCursor(cursor="4"))

        # Decoding, checking the shape the entity kind expects
        cursor = CursorCodec.decode(token, SimpleCursor)
        print(cursor.cursor)  # "4"
    """

    @staticmethod
    def encode(cursor: CompositeCursor) -> str:
        """Encode a cursor to an opaque string.

        Args:
            cursor: Simple or search-after cursor.

        Returns:
            URL-safe base64 encoded string.
        """
        return base64.urlsafe_b64encode(_dumps(cursor.to_wire())).decode()

    @staticmethod
    def decode(
        token: str | None,
        shape: type[SimpleCursor] | type[SearchAfterCursor] | None = None,
    ) -> CompositeCursor | None:
        """Decode a cursor string to a cursor.

        Args:
            token: Encoded cursor. Empty or absent means "first page".
            shape: Cursor type the caller expects; a token of another shape is rejected.

        Returns:
            The decoded cursor, or ``None`` when there is no token.

        Raises:
            InvalidCursor: If the token is corrupted or has the wrong shape.
        """
        if not token:
            return None

        payload = _loads(token)
        cursor = _from_payload(payload)

        if shape is not None and not isinstance(cursor, shape):
            raise InvalidCursor(
                detail=f"Cursor of type {cursor.kind} cannot be used here.",
                extra={"expected": shape.model_fields["kind"].default},
            )

        return cursor

    @staticmethod
    def decode_search_after(vendor_token: str) -> SearchAfterCursor:
        """Read what we can out of the vendor's search-after token.

        Current tokens are standard base64 of a JSON object sharing our field
        names. Unknown keys are ignored and the token itself is kept on
        ``vendor_after`` so it can be sent back byte for byte.

        Raises:
            InvalidCursor: If the token is not a JSON object with sort values.
        """
        payload = _loads(vendor_token)
        known = {key: value for key, value in payload.items() if key in _VENDOR_KEYS}
        if "after" not in known:
            raise InvalidCursor(detail="Search-after token is missing its sort values.")
        try:
            return SearchAfterCursor.model_validate({**known, "vendor_after": vendor_token})
        except ValidationError as e:
            raise InvalidCursor(detail=f"Invalid search-after token: {e.errors()[0]['msg']}") from e

    @staticmethod
    def encode_search_after(cursor: SearchAfterCursor) -> str:
        """Render a search-after cursor the way the vendor expects it back.

        The vendor's own token wins when we hold one; the structured fields
        are only rendered for cursors built without it.
        """
        if cursor.vendor_after:
            return cursor.vendor_after
        return base64.b64encode(_dumps(cursor.to_wire())).decode()


def _dumps(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode()


def _loads(token: str) -> dict[str, Any]:
    normalized = token.strip().replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        raw = base64.b64decode(normalized, validate=True)
        payload = json.loads(raw.decode())
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise InvalidCursor(detail=f"Invalid cursor: {e}") from e

    if not isinstance(payload, dict):
        raise InvalidCursor(detail="Invalid cursor: expected a JSON object.")
    return payload


def _from_payload(payload: dict[str, Any]) -> CompositeCursor:
    keys = set(payload)
    try:
        if keys == {"cursor"}:
            return SimpleCursor.model_validate(payload)
        if keys and keys <= _SEARCH_AFTER_KEYS and keys & {"after", "vendor_after"}:
            return SearchAfterCursor.model_validate(payload)
    except ValidationError as e:
        raise InvalidCursor(detail=f"Invalid cursor: {e.errors()[0]['msg']}") from e

    raise InvalidCursor(
        detail="Invalid cursor: unrecognized cursor fields.",
        extra={"fields": sorted(keys)},
    )


__all__ = [
    "CompositeCursor",
    "CursorCodec",
    "SearchAfterCursor",
    "SimpleCursor",
]
