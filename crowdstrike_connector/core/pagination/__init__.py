"""Composite cursors and the pagination drivers that produce them.

Four continuation mechanisms sit behind one opaque cursor type:

GraphQL forward cursor:
    driver = CursorDriver()
    advance = driver.advance(page_info, cursor, record_count=2, page_size=2)

REST offset:
    driver = OffsetDriver()
    advance = driver.advance(None, SimpleCursor(cursor="2"), record_count=2, page_size=2)
    advance.next_cursor  # SimpleCursor(cursor="4")

REST scroll:
    driver = ScrollDriver()
    advance = driver.advance(OffsetPagination(offset="FQluY2x1"), None, record_count=2, page_size=2)
    advance.next_cursor  # SimpleCursor(cursor="FQluY2x1")

REST search-after:
    driver = SearchAfterDriver()
    advance = driver.advance(pagination, cursor, record_count=2, page_size=2)

Cursors are opaque base64 strings that clients pass back unchanged.
"""

from crowdstrike_connector.core.pagination.cursor import (
    CompositeCursor,
    CursorCodec,
    SearchAfterCursor,
    SimpleCursor,
)
from crowdstrike_connector.core.pagination.drivers import (
    CursorDriver,
    OffsetDriver,
    PaginationDriver,
    ScrollDriver,
    SearchAfterDriver,
)
from crowdstrike_connector.core.pagination.schemas import (
    OffsetPagination,
    PageAdvance,
    PageInfo,
    SearchAfterPagination,
    pagination_block,
)

__all__ = [
    # Cursor utilities
    "CompositeCursor",
    "CursorCodec",
    # Drivers
    "CursorDriver",
    "OffsetDriver",
    "OffsetPagination",
    "PageAdvance",
    "PageInfo",
    "PaginationDriver",
    "ScrollDriver",
    "SearchAfterCursor",
    "SearchAfterDriver",
    "SearchAfterPagination",
    "SimpleCursor",
    "pagination_block",
]
