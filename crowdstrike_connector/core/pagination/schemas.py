"""Pagination envelope schemas.

Each surface reports its continuation state differently:

1. GraphQL Connection (Relay style):
   - ``pageInfo { hasNextPage endCursor }`` next to ``nodes``

2. REST offset listing:
   - ``meta.pagination { offset limit total }`` next to a list of identifiers
   - scroll listings put the vendor's own string token in ``offset``

3. REST search-after:
   - ``meta.pagination { total limit after }`` where ``after`` is the vendor's token

The drivers in ``drivers`` read these models; they never touch raw JSON.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from crowdstrike_connector.core.pagination.cursor import CompositeCursor


class PageInfo(BaseModel):
    """Pagination metadata following the GraphQL Relay specification.

    Attributes:
        has_next_page: Whether more items exist after this page
        end_cursor: Vendor cursor of the last item in this page
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    has_next_page: bool = Field(
        default=False,
        alias="hasNextPage",
        description="Whether more items exist",
    )
    end_cursor: str | None = Field(
        default=None,
        alias="endCursor",
        description="Cursor of the last item",
    )


class OffsetPagination(BaseModel):
    """``meta.pagination`` block of a REST identifier listing.

    ``offset`` is a number for offset listings and an opaque string for scroll listings.
    """

    model_config = ConfigDict(extra="ignore")

    offset: int | str | None = None
    limit: int | None = None
    total: int | None = None


class SearchAfterPagination(BaseModel):
    """``meta.pagination`` block of the combined alerts endpoint.

    Attributes:
        total: Approximate number of hits; the vendor may revise it between pages
        limit: Page size the vendor applied
        after: Vendor search-after token, empty on the last page
    """

    model_config = ConfigDict(extra="ignore")

    total: int | None = Field(default=None, description="Approximate total hits")
    limit: int | None = Field(default=None, description="Applied page size")
    after: str | None = Field(default=None, description="Vendor search-after token")


@dataclass(frozen=True)
class PageAdvance:
    """Outcome of a pagination driver for one page.

    Attributes:
        next_cursor: Cursor for the next call, or None when the sequence is exhausted
    """

    next_cursor: CompositeCursor | None = None

    @property
    def is_last_page(self) -> bool:
        return self.next_cursor is None

    @classmethod
    def last(cls) -> PageAdvance:
        return cls(next_cursor=None)


def pagination_block(body: Any) -> dict[str, Any]:
    """Return ``meta.pagination`` from a REST envelope, or an empty mapping."""
    if not isinstance(body, dict):
        return {}
    meta = body.get("meta")
    if not isinstance(meta, dict):
        return {}
    block = meta.get("pagination")
    return block if isinstance(block, dict) else {}


__all__ = [
    "OffsetPagination",
    "PageAdvance",
    "PageInfo",
    "SearchAfterPagination",
    "pagination_block",
]
