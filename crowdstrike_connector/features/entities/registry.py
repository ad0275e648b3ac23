"""Static entity table.

Every supported entity kind maps to one binding: which surface it is read
from, which pagination driver continues it, and where its records live.
Adding an entity kind means adding a row here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from crowdstrike_connector.core.exceptions import UnsupportedEntity
from crowdstrike_connector.core.pagination import (
    CursorDriver,
    OffsetDriver,
    PaginationDriver,
    ScrollDriver,
    SearchAfterDriver,
)


class EntityKind(StrEnum):
    """External IDs of the supported entity kinds."""

    USER = "user"
    ENDPOINT = "endpoint"
    INCIDENT = "incident"
    DEVICE = "endpoint_protection_device"
    DETECT = "endpoint_protection_detect"
    ENDPOINT_INCIDENT = "endpoint_protection_incident"
    ALERT = "endpoint_protection_alert"
    COMBINED_ALERT = "endpoint_protection_combined_alert"


class Surface(StrEnum):
    GRAPHQL = "graphql"
    REST = "rest"


@dataclass(frozen=True)
class EntityBinding:
    """How one entity kind is queried and paged.

    Attributes:
        kind: Entity kind.
        surface: GraphQL or REST.
        driver: Pagination driver that continues the sequence.
        unique_id: Attribute the selector tree must mark as unique (GraphQL only).
        connection: GraphQL connection field holding ``nodes`` and ``pageInfo``.
        list_path: REST path returning identifiers.
        detail_path: REST path returning records for identifiers.
        detail_id_field: Body field carrying identifiers on the detail call.
        search_path: REST path of a combined search-after endpoint.
    """

    kind: EntityKind
    surface: Surface
    driver: PaginationDriver
    unique_id: str | None = None
    connection: str | None = None
    list_path: str | None = None
    detail_path: str | None = None
    detail_id_field: str = "ids"
    search_path: str | None = None


_CURSOR = CursorDriver()
_OFFSET = OffsetDriver()
_SCROLL = ScrollDriver()
_SEARCH_AFTER = SearchAfterDriver()

ENTITY_TABLE: dict[EntityKind, EntityBinding] = {
    EntityKind.USER: EntityBinding(
        kind=EntityKind.USER,
        surface=Surface.GRAPHQL,
        driver=_CURSOR,
        unique_id="entityId",
        connection="entities",
    ),
    EntityKind.ENDPOINT: EntityBinding(
        kind=EntityKind.ENDPOINT,
        surface=Surface.GRAPHQL,
        driver=_CURSOR,
        unique_id="entityId",
        connection="entities",
    ),
    EntityKind.INCIDENT: EntityBinding(
        kind=EntityKind.INCIDENT,
        surface=Surface.GRAPHQL,
        driver=_CURSOR,
        unique_id="incidentId",
        connection="incidents",
    ),
    EntityKind.DEVICE: EntityBinding(
        kind=EntityKind.DEVICE,
        surface=Surface.REST,
        driver=_SCROLL,
        list_path="devices/queries/devices-scroll/v1",
        detail_path="devices/entities/devices/v2",
    ),
    EntityKind.DETECT: EntityBinding(
        kind=EntityKind.DETECT,
        surface=Surface.REST,
        driver=_OFFSET,
        list_path="detects/queries/detects/v1",
        detail_path="detects/entities/summaries/GET/v1",
    ),
    EntityKind.ENDPOINT_INCIDENT: EntityBinding(
        kind=EntityKind.ENDPOINT_INCIDENT,
        surface=Surface.REST,
        driver=_OFFSET,
        list_path="incidents/queries/incidents/v1",
        detail_path="incidents/entities/incidents/GET/v1",
    ),
    EntityKind.ALERT: EntityBinding(
        kind=EntityKind.ALERT,
        surface=Surface.REST,
        driver=_OFFSET,
        list_path="alerts/queries/alerts/v2",
        detail_path="alerts/entities/alerts/v2",
        detail_id_field="composite_ids",
    ),
    EntityKind.COMBINED_ALERT: EntityBinding(
        kind=EntityKind.COMBINED_ALERT,
        surface=Surface.REST,
        driver=_SEARCH_AFTER,
        search_path="alerts/combined/alerts/v1",
    ),
}


def get_binding(entity_external_id: str) -> EntityBinding:
    """Look up the binding of an entity kind.

    Raises:
        UnsupportedEntity: If the kind is not in the table.
    """
    try:
        return ENTITY_TABLE[EntityKind(entity_external_id)]
    except ValueError as e:
        raise UnsupportedEntity(entity_external_id) from e
