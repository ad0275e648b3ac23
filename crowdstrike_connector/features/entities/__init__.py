"""CrowdStrike Falcon entities: catalogue, queries and page fetching."""

from crowdstrike_connector.features.entities.adapter import FalconAdapter
from crowdstrike_connector.features.entities.registry import (
    ENTITY_TABLE,
    EntityBinding,
    EntityKind,
    Surface,
    get_binding,
)
from crowdstrike_connector.features.entities.schemas import (
    EntityRequest,
    FalconConfig,
    Page,
    PageRequest,
)
from crowdstrike_connector.features.entities.service import DatasourcePage, FalconDatasource

__all__ = [
    "ENTITY_TABLE",
    "DatasourcePage",
    "EntityBinding",
    "EntityKind",
    "EntityRequest",
    "FalconAdapter",
    "FalconConfig",
    "FalconDatasource",
    "Page",
    "PageRequest",
    "Surface",
    "get_binding",
]
