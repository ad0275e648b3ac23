"""Tests for page request validation and default resolution."""

from __future__ import annotations

import pytest

from crowdstrike_connector.core.exceptions import (
    InvalidCursor,
    InvalidDatasourceConfig,
    InvalidEntityConfig,
    InvalidPageRequest,
    UnsupportedEntity,
)
from crowdstrike_connector.core.pagination import CursorCodec, SearchAfterCursor, SimpleCursor
from crowdstrike_connector.core.settings import ConnectorSettings
from crowdstrike_connector.features.entities import EntityKind, PageRequest
from crowdstrike_connector.features.entities.selectors import default_selector_tree
from crowdstrike_connector.features.entities.validation import resolve_page_request
from tests.conftest import page_request_payload


@pytest.fixture
def settings() -> ConnectorSettings:
    return ConnectorSettings(request_timeout_seconds=12.0, max_page_size=1000)


def _resolve(settings: ConnectorSettings, entity: str = "user", **kwargs):
    return resolve_page_request(PageRequest.model_validate(page_request_payload(entity, **kwargs)), settings)


class TestDatasourceConfig:
    """Tests for config, address and credential checks."""

    @pytest.mark.parametrize(
        ("config", "reason"),
        [
            (None, "The request contains an empty configuration"),
            ({}, "apiVersion is not set in the configuration"),
            ({"apiVersion": "v2"}, "apiVersion is not supported"),
        ],
    )
    def test_invalid_config(self, settings, config, reason):
        payload = page_request_payload("user")
        payload["config"] = config

        with pytest.raises(InvalidDatasourceConfig) as exc_info:
            resolve_page_request(PageRequest.model_validate(payload), settings)

        assert exc_info.value.detail == f"CrowdStrike config is invalid: {reason}."

    def test_empty_address(self, settings):
        with pytest.raises(InvalidDatasourceConfig, match="address is empty"):
            _resolve(settings, address="")

    @pytest.mark.parametrize("authorization", ["", None])
    def test_missing_credentials(self, settings, authorization):
        payload = page_request_payload("user")
        payload["authorization"] = authorization

        with pytest.raises(InvalidDatasourceConfig) as exc_info:
            resolve_page_request(PageRequest.model_validate(payload), settings)

        assert exc_info.value.detail == "Provided datasource auth is missing required credentials."

    def test_config_is_checked_before_address(self, settings):
        payload = page_request_payload("user", address="")
        payload["config"] = None

        with pytest.raises(InvalidDatasourceConfig, match="config is invalid"):
            resolve_page_request(PageRequest.model_validate(payload), settings)


class TestEntityConfig:
    """Tests for entity kind and selector tree checks."""

    def test_unsupported_entity(self, settings):
        with pytest.raises(UnsupportedEntity):
            _resolve(settings, "group")

    def test_default_tree_when_no_attributes(self, settings):
        resolved = _resolve(settings, "endpoint_protection_detect")

        assert resolved.tree == default_selector_tree(EntityKind.DETECT)

    def test_missing_unique_id(self, settings):
        with pytest.raises(InvalidEntityConfig) as exc_info:
            _resolve(settings, attributes=[{"name": "entityId"}])

        assert exc_info.value.detail == "Requested entity attributes are missing unique ID attribute."

    def test_more_than_one_unique_id(self, settings):
        attributes = [{"name": "incident_id", "unique_id": True}, {"name": "cid", "unique_id": True}]

        with pytest.raises(InvalidEntityConfig) as exc_info:
            _resolve(settings, "endpoint_protection_incident", attributes=attributes)

        assert exc_info.value.extra == {"unique_id_attributes": ["incident_id", "cid"]}

    def test_graphql_requires_specific_unique_id(self, settings):
        with pytest.raises(InvalidEntityConfig) as exc_info:
            _resolve(settings, "incident", attributes=[{"name": "entityId", "unique_id": True}])

        assert exc_info.value.detail == "Expected unique ID attribute: incidentId"

    def test_rest_accepts_any_unique_id(self, settings):
        resolved = _resolve(
            settings,
            "endpoint_protection_alert",
            attributes=[{"name": "aggregate_id", "unique_id": True}],
        )

        assert resolved.tree.unique_id_attributes[0].name == "aggregate_id"

    def test_custom_tree_with_children(self, settings):
        resolved = _resolve(
            settings,
            attributes=[{"name": "entityId", "unique_id": True}],
            childEntities=[{"path": "$.riskFactors", "attributes": [{"name": "type"}], "expect_list": True}],
        )

        assert resolved.tree.children[0].path == "$.riskFactors"
        assert resolved.tree.children[0].expect_list is True

    def test_ordered_is_rejected(self, settings):
        with pytest.raises(InvalidEntityConfig, match="Ordered must be set to false."):
            _resolve(settings, ordered=True)


class TestPageRequestChecks:
    """Tests for page size and cursor checks."""

    @pytest.mark.parametrize("page_size", [0, -5])
    def test_page_size_too_small(self, settings, page_size):
        with pytest.raises(InvalidPageRequest) as exc_info:
            _resolve(settings, page_size=page_size)

        assert exc_info.value.detail == f"Provided page size ({page_size}) must be at least 1."

    def test_page_size_too_large(self, settings):
        with pytest.raises(InvalidPageRequest) as exc_info:
            _resolve(settings, page_size=1001)

        assert exc_info.value.detail == "Provided page size (1001) exceeds the maximum allowed (1000)."

    def test_offset_cursor_must_be_numeric(self, settings):
        cursor = CursorCodec.encode(SimpleCursor(cursor="abc"))

        with pytest.raises(InvalidCursor):
            _resolve(settings, "endpoint_protection_detect", cursor=cursor)

    def test_cursor_shape_must_match_entity(self, settings):
        cursor = CursorCodec.encode(SimpleCursor(cursor="2"))

        with pytest.raises(InvalidCursor):
            _resolve(settings, "endpoint_protection_combined_alert", cursor=cursor)

    def test_search_after_cursor_is_decoded(self, settings):
        cursor = SearchAfterCursor(after=(1, "x"), total_fetched=2)

        resolved = _resolve(settings, "endpoint_protection_combined_alert", cursor=CursorCodec.encode(cursor))

        assert resolved.cursor == cursor


class TestResolvedDefaults:
    def test_defaults(self, settings):
        resolved = _resolve(settings, "user")

        assert resolved.base_url == "https://api.test.crowdstrike.com"
        assert resolved.authorization == "Bearer Testtoken"
        assert resolved.api_version == "v1"
        assert resolved.enabled is True
        assert resolved.cursor is None
        assert resolved.filter is None
        assert resolved.timeout_seconds == 12.0

    def test_config_timeout_wins(self, settings):
        resolved = _resolve(settings, config={"apiVersion": "v1", "requestTimeoutSeconds": 3})

        assert resolved.timeout_seconds == 3

    def test_filter_applies_to_rest_entities_only(self, settings):
        config = {
            "apiVersion": "v1",
            "filters": {"user": "ignored", "endpoint_protection_detect": "status:'new'"},
        }

        assert _resolve(settings, "user", config=config).filter is None
        assert _resolve(settings, "endpoint_protection_detect", config=config).filter == "status:'new'"
