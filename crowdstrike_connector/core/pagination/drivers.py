"""Pagination drivers.

A driver looks at one page response and the cursor that requested it, and
decides which cursor (if any) continues the sequence:

- ``CursorDriver``: GraphQL ``pageInfo``; wraps ``endCursor`` verbatim.
- ``OffsetDriver``: REST listings; advances a decimal offset by the record count.
- ``ScrollDriver``: REST scroll listings; passes the vendor's string offset through.
- ``SearchAfterDriver``: combined alerts; carries the vendor's search-after
  token verbatim and a running ``total_fetched`` count.

A page with zero records always ends the sequence.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Protocol

from crowdstrike_connector.core.exceptions import InvalidCursor
from crowdstrike_connector.core.pagination.cursor import (
    CompositeCursor,
    CursorCodec,
    SearchAfterCursor,
    SimpleCursor,
)
from crowdstrike_connector.core.pagination.schemas import (
    OffsetPagination,
    PageAdvance,
    PageInfo,
    SearchAfterPagination,
)

logger = logging.getLogger(__name__)


class PaginationDriver(Protocol):
    """Protocol shared by the pagination drivers."""

    name: ClassVar[str]
    cursor_type: ClassVar[type[SimpleCursor] | type[SearchAfterCursor]]

    def advance(
        self,
        pagination: Any,
        cursor: CompositeCursor | None,
        *,
        record_count: int,
        page_size: int,
    ) -> PageAdvance:
        """Compute the next cursor from a page response.

        Args:
            pagination: Parsed pagination block of the response
            cursor: Cursor that requested this page (None for the first page)
            record_count: Records returned on this page
            page_size: Page size that was requested

        Returns:
            PageAdvance with the next cursor, or none when the sequence ends
        """
        ...


def _require(cursor: CompositeCursor | None, expected: type, driver: str) -> Any:
    if cursor is not None and not isinstance(cursor, expected):
        raise InvalidCursor(
            detail=f"Cursor of type {cursor.kind} cannot be used with the {driver} driver.",
        )
    return cursor


class CursorDriver:
    """Forward-cursor pagination for GraphQL connections."""

    name: ClassVar[str] = "cursor"
    cursor_type: ClassVar[type[SimpleCursor]] = SimpleCursor

    def advance(
        self,
        pagination: PageInfo,
        cursor: CompositeCursor | None,
        *,
        record_count: int,
        page_size: int,
    ) -> PageAdvance:
        current: SimpleCursor | None = _require(cursor, SimpleCursor, self.name)

        if record_count == 0 or not pagination.has_next_page or not pagination.end_cursor:
            return PageAdvance.last()

        # A vendor echoing the incoming cursor would loop forever.
        if current is not None and current.cursor == pagination.end_cursor:
            logger.warning(
                "Datasource returned the requested cursor as end cursor; stopping",
                extra={"cursor": pagination.end_cursor},
            )
            return PageAdvance.last()

        return PageAdvance(next_cursor=SimpleCursor(cursor=pagination.end_cursor))


class OffsetDriver:
    """Offset pagination for REST list-then-detail entities.

    The total reported by the listing is ignored; only the record count
    against the page size decides termination.
    """

    name: ClassVar[str] = "offset"
    cursor_type: ClassVar[type[SimpleCursor]] = SimpleCursor

    @staticmethod
    def offset_of(cursor: CompositeCursor | None) -> int:
        """Return the offset carried by a cursor, defaulting to zero.

        Raises:
            InvalidCursor: If the cursor is not a non-negative decimal
        """
        current: SimpleCursor | None = _require(cursor, SimpleCursor, OffsetDriver.name)
        if current is None or current.is_empty:
            return 0

        try:
            offset = int(current.cursor)
        except ValueError as e:
            raise InvalidCursor(
                detail="Cursor must be a non-negative integer.",
                extra={"cursor": current.cursor},
            ) from e

        if offset < 0:
            raise InvalidCursor(
                detail="Cursor must be greater than 0.",
                extra={"cursor": current.cursor},
            )
        return offset

    def advance(
        self,
        pagination: Any,
        cursor: CompositeCursor | None,
        *,
        record_count: int,
        page_size: int,
    ) -> PageAdvance:
        offset = self.offset_of(cursor)

        if record_count == 0 or record_count < page_size:
            return PageAdvance.last()

        return PageAdvance(next_cursor=SimpleCursor(cursor=str(offset + record_count)))


class ScrollDriver:
    """Scroll pagination for REST listings that issue their own offset token.

    The device scroll listing hands out an opaque string offset and keeps
    doing so one page past the end, where it finally answers with no
    identifiers and an empty offset.
    """

    name: ClassVar[str] = "scroll"
    cursor_type: ClassVar[type[SimpleCursor]] = SimpleCursor

    @staticmethod
    def offset_of(cursor: CompositeCursor | None) -> str | None:
        """Return the vendor offset carried by a cursor, or None for the first page."""
        current: SimpleCursor | None = _require(cursor, SimpleCursor, ScrollDriver.name)
        if current is None or current.is_empty:
            return None
        return current.cursor

    def advance(
        self,
        pagination: OffsetPagination,
        cursor: CompositeCursor | None,
        *,
        record_count: int,
        page_size: int,
    ) -> PageAdvance:
        current = self.offset_of(cursor)
        token = "" if pagination.offset is None else str(pagination.offset)

        if record_count == 0 or not token:
            return PageAdvance.last()

        if token == current:
            logger.warning(
                "Datasource returned the requested scroll offset; stopping",
                extra={"offset": token},
            )
            return PageAdvance.last()

        return PageAdvance(next_cursor=SimpleCursor(cursor=token))


def _same_position(current: SearchAfterCursor, vendor: SearchAfterCursor) -> bool:
    if current.vendor_after and current.vendor_after == vendor.vendor_after:
        return True
    return bool(vendor.after) and vendor.after == current.after


class SearchAfterDriver:
    """Search-after pagination for the combined alerts endpoint.

    The vendor's empty ``after`` is the only exhaustion signal that counts;
    ``total_hits`` is approximate and never compared against ``total_fetched``.
    The token is opaque: it goes back to the vendor unchanged whether or not
    its contents could be read.
    """

    name: ClassVar[str] = "search_after"
    cursor_type: ClassVar[type[SearchAfterCursor]] = SearchAfterCursor

    def advance(
        self,
        pagination: SearchAfterPagination,
        cursor: CompositeCursor | None,
        *,
        record_count: int,
        page_size: int,
    ) -> PageAdvance:
        current: SearchAfterCursor | None = _require(cursor, SearchAfterCursor, self.name)

        if record_count == 0 or not pagination.after:
            return PageAdvance.last()

        token = pagination.after
        try:
            vendor = CursorCodec.decode_search_after(token)
        except InvalidCursor:
            logger.debug("Search-after token is not readable; carrying it as is")
            vendor = SearchAfterCursor(vendor_after=token)

        if current is not None and _same_position(current, vendor):
            logger.warning(
                "Datasource returned the requested search-after position; stopping",
                extra={"after": token},
            )
            return PageAdvance.last()

        fetched = (current.total_fetched if current is not None else 0) + record_count
        total_hits = pagination.total if pagination.total is not None else vendor.total_hits

        return PageAdvance(
            next_cursor=vendor.model_copy(
                update={"total_fetched": fetched, "total_hits": total_hits},
            ),
        )


__all__ = [
    "CursorDriver",
    "OffsetDriver",
    "PaginationDriver",
    "ScrollDriver",
    "SearchAfterDriver",
]
