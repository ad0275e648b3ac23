"""Validation of page requests.

Every check here runs before any cursor reaches a driver or any request
reaches the network, in the order the checks are listed in
``resolve_page_request``.
"""

from __future__ import annotations

from dataclasses import dataclass

from crowdstrike_connector.core.exceptions import (
    InvalidDatasourceConfig,
    InvalidEntityConfig,
    InvalidPageRequest,
)
from crowdstrike_connector.core.normalization import SelectorTree
from crowdstrike_connector.core.pagination import CompositeCursor, CursorCodec, OffsetDriver
from crowdstrike_connector.core.settings import (
    SUPPORTED_API_VERSIONS,
    ConnectorSettings,
    get_connector_settings,
)
from crowdstrike_connector.features.entities.endpoints import normalize_address
from crowdstrike_connector.features.entities.registry import (
    EntityBinding,
    Surface,
    get_binding,
)
from crowdstrike_connector.features.entities.schemas import FalconConfig, PageRequest
from crowdstrike_connector.features.entities.selectors import default_selector_tree


@dataclass(frozen=True)
class ResolvedPageRequest:
    """A validated page request with every default filled in."""

    binding: EntityBinding
    base_url: str
    authorization: str
    page_size: int
    cursor: CompositeCursor | None
    tree: SelectorTree
    api_version: str
    archived: bool
    enabled: bool
    filter: str | None
    timeout_seconds: float


def validate_config(config: FalconConfig | None) -> FalconConfig:
    """Check the per-call config.

    Raises:
        InvalidDatasourceConfig: If the config or its API version is missing or unsupported.
    """
    if config is None:
        reason = "The request contains an empty configuration"
    elif not config.api_version:
        reason = "apiVersion is not set in the configuration"
    elif config.api_version not in SUPPORTED_API_VERSIONS:
        reason = "apiVersion is not supported"
    else:
        return config
    raise InvalidDatasourceConfig(detail=f"CrowdStrike config is invalid: {reason}.")


def _selector_tree(request: PageRequest, binding: EntityBinding) -> SelectorTree:
    if not request.entity.attributes:
        return default_selector_tree(binding.kind)
    return SelectorTree(attributes=request.entity.attributes, children=request.entity.children)


def _check_unique_id(tree: SelectorTree, binding: EntityBinding) -> None:
    unique = tree.unique_id_attributes
    if not unique:
        raise InvalidEntityConfig(detail="Requested entity attributes are missing unique ID attribute.")
    if len(unique) > 1:
        raise InvalidEntityConfig(
            detail="Requested entity attributes must contain exactly one unique ID attribute.",
            extra={"unique_id_attributes": [attr.name for attr in unique]},
        )
    # GraphQL entities mandate a specific unique ID attribute
    if binding.surface is Surface.GRAPHQL and unique[0].name != binding.unique_id:
        raise InvalidEntityConfig(detail=f"Expected unique ID attribute: {binding.unique_id}")


def resolve_page_request(
    request: PageRequest,
    settings: ConnectorSettings | None = None,
) -> ResolvedPageRequest:
    """Validate a page request and resolve its defaults.

    Checks, in order: config, address, credentials, entity kind, unique ID
    attribute, ordering, page size, cursor.

    Args:
        request: Page request as received.
        settings: Process defaults; loaded from the environment when omitted.

    Returns:
        The resolved request.

    Raises:
        InvalidConfiguration: For config, entity config and page size problems.
        UnsupportedEntity: If the entity kind is not in the entity table.
        InvalidCursor: If the cursor is malformed or of the wrong shape.
    """
    settings = settings or get_connector_settings()

    config = validate_config(request.config)
    base_url = normalize_address(request.address)

    authorization = request.authorization.get_secret_value() if request.authorization else ""
    if not authorization:
        raise InvalidDatasourceConfig(detail="Provided datasource auth is missing required credentials.")

    binding = get_binding(request.entity.external_id)

    tree = _selector_tree(request, binding)
    _check_unique_id(tree, binding)

    if request.entity.ordered:
        raise InvalidEntityConfig(detail="Ordered must be set to false.")

    if request.page_size < 1:
        raise InvalidPageRequest(detail=f"Provided page size ({request.page_size}) must be at least 1.")
    if request.page_size > settings.max_page_size:
        raise InvalidPageRequest(
            detail=(
                f"Provided page size ({request.page_size}) exceeds the maximum "
                f"allowed ({settings.max_page_size})."
            ),
        )

    cursor = CursorCodec.decode(request.cursor, binding.driver.cursor_type)
    if isinstance(binding.driver, OffsetDriver):
        OffsetDriver.offset_of(cursor)

    # Filters only apply to REST entities
    filter_expression = None
    if binding.surface is Surface.REST and config.filters:
        filter_expression = config.filters.get(binding.kind.value) or None

    return ResolvedPageRequest(
        binding=binding,
        base_url=base_url,
        authorization=authorization,
        page_size=request.page_size,
        cursor=cursor,
        tree=tree,
        api_version=config.api_version,
        archived=config.archived,
        enabled=config.enabled,
        filter=filter_expression,
        timeout_seconds=config.request_timeout_seconds or settings.request_timeout_seconds,
    )
