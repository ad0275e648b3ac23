"""Pydantic schemas for page requests and pages."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from crowdstrike_connector.core.normalization import AttributeSpec, ChildSelector


class FalconConfig(BaseModel):
    """Per-call datasource configuration.

    Example:
        {
            "apiVersion": "v1",
            "archived": false,
            "enabled": true,
            "filters": {"endpoint_protection_detect": "status:'new'"}
        }
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_version: str | None = Field(default=None, alias="apiVersion")
    archived: bool = False
    enabled: bool = False
    filters: dict[str, str] | None = Field(
        default=None,
        description="Filter expression per entity external ID (REST entities only)",
    )
    request_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        alias="requestTimeoutSeconds",
        description="Per-call deadline; falls back to FALCON_REQUEST_TIMEOUT_SECONDS",
    )


class EntityRequest(BaseModel):
    """Entity kind plus the selector tree to normalize its records with.

    Leaving ``attributes`` empty selects the entity kind's default tree.
    """

    model_config = ConfigDict(populate_by_name=True)

    external_id: str = Field(..., alias="externalId", min_length=1)
    attributes: tuple[AttributeSpec, ...] = ()
    children: tuple[ChildSelector, ...] = Field(default=(), alias="childEntities")
    ordered: bool = False


class PageRequest(BaseModel):
    """One GetPage call."""

    model_config = ConfigDict(populate_by_name=True)

    address: str | None = Field(default=None, description="Falcon API address")
    authorization: SecretStr | None = Field(
        default=None,
        description="Authorization header value sent verbatim, e.g. 'Bearer <token>'",
    )
    config: FalconConfig | None = None
    entity: EntityRequest
    page_size: int = Field(..., alias="pageSize")
    cursor: str | None = Field(default=None, description="Opaque cursor from the previous page")


class Page(BaseModel):
    """One page of normalized records."""

    model_config = ConfigDict(populate_by_name=True)

    objects: list[dict[str, Any]] = Field(default_factory=list)
    next_cursor: str | None = Field(
        default=None,
        alias="nextCursor",
        description="Opaque cursor of the next page; absent on the last page",
    )
