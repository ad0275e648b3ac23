"""End-to-end paging through the adapter against the in-process Falcon API.

Each test drives ``FalconAdapter.get_page`` the way a caller would: first
page without a cursor, later pages with the cursor the previous page
returned, until no cursor comes back.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from crowdstrike_connector.core.exceptions import (
    DatasourceFailed,
    DatasourceRejected,
    DatasourceTimeout,
    DatasourceUnreachable,
    InvalidCursor,
)
from crowdstrike_connector.core.pagination import CursorCodec, SearchAfterCursor, SimpleCursor
from crowdstrike_connector.features.entities import FalconAdapter
from crowdstrike_connector.infra.external import FalconClient
from tests.fixtures import falcon_responses as responses

AD_ACCOUNTS = '$.accounts[?(@.__typename=="ActiveDirectoryAccountDescriptor")]'


def _offset(cursor: str | None) -> str:
    decoded = CursorCodec.decode(cursor, SimpleCursor)
    assert decoded is not None
    return decoded.cursor


class TestGraphQLEntities:
    """Users, endpoints and incidents paged by GraphQL end cursors."""

    async def test_users_over_three_pages(self, adapter, page_request):
        first = await adapter.get_page(page_request("user"))
        second = await adapter.get_page(page_request("user", cursor=first.next_cursor))
        third = await adapter.get_page(page_request("user", cursor=second.next_cursor))

        assert [obj["entityId"] for obj in first.objects] == [
            "095b6929-44b9-4525-a0cc-9ef4552011f3",
            "45dc40e2-7b7b-4f38-9ac7-98f4a35b24e1",
        ]
        assert CursorCodec.decode(first.next_cursor) == SimpleCursor(cursor=responses.USER_CURSOR_PAGE_2)
        assert [obj["entityId"] for obj in second.objects] == [
            "c1732de2-853c-4375-a479-17b0afbe114f",
            "83a49ef1-17a7-4fa4-b90f-9142dfa49577",
        ]
        assert [obj["entityId"] for obj in third.objects] == ["6b4c76ba-2493-4a87-bfb3-1ea91985cce5"]
        assert third.next_cursor is None

    async def test_endpoint_last_page_ignores_end_cursor(self, adapter, page_request):
        first = await adapter.get_page(page_request("endpoint"))
        second = await adapter.get_page(page_request("endpoint", cursor=first.next_cursor))

        assert len(first.objects) == 2
        assert first.next_cursor is not None
        assert len(second.objects) == 1
        assert second.next_cursor is None

    async def test_endpoint_accounts_keep_directory_descriptors_only(self, adapter, page_request):
        page = await adapter.get_page(page_request("endpoint"))

        raw_nodes = responses.ENDPOINT_PAGE_1["data"]["entities"]["nodes"]
        for obj, raw in zip(page.objects, raw_nodes, strict=True):
            expected = [
                account["objectGuid"]
                for account in raw["accounts"]
                if account["__typename"] == "ActiveDirectoryAccountDescriptor"
            ]
            assert [account["objectGuid"] for account in obj.get(AD_ACCOUNTS, [])] == expected
            assert len(expected) < len(raw["accounts"])

    async def test_incident_empty_page_ends_sequence(self, adapter, page_request):
        first = await adapter.get_page(page_request("incident"))
        second = await adapter.get_page(page_request("incident", cursor=first.next_cursor))

        assert [obj["incidentId"] for obj in first.objects] == ["INC-16", "INC-15"]
        assert second.objects == []
        assert second.next_cursor is None

    async def test_graphql_errors_surface_as_datasource_failure(self, adapter, page_request):
        with pytest.raises(DatasourceFailed) as exc_info:
            await adapter.get_page(page_request("user", page_size=3))

        assert exc_info.value.code == 400
        assert exc_info.value.message == "Unexpected query"
        assert exc_info.value.status_code == 200


class TestOffsetEntities:
    """REST list-then-detail entities paged by offset."""

    async def test_detections_over_three_pages(self, adapter, page_request, falcon_server):
        first = await adapter.get_page(page_request("endpoint_protection_detect"))
        second = await adapter.get_page(page_request("endpoint_protection_detect", cursor=first.next_cursor))
        third = await adapter.get_page(page_request("endpoint_protection_detect", cursor=second.next_cursor))

        assert [obj["detection_id"] for obj in first.objects] == responses.DETECTION_IDS[:2]
        assert _offset(first.next_cursor) == "2"
        assert _offset(second.next_cursor) == "4"
        assert [obj["detection_id"] for obj in third.objects] == responses.DETECTION_IDS[4:]
        assert third.next_cursor is None

        listings = [request for request in falcon_server.requests if request.method == "GET"]
        assert [request.url.params.get("offset") for request in listings] == [None, "2", "4"]
        assert falcon_server.bodies[0] == {"ids": responses.DETECTION_IDS[:2]}

    async def test_vendor_error_with_success_status(self, adapter, page_request):
        cursor = CursorCodec.encode(SimpleCursor(cursor="999"))

        with pytest.raises(DatasourceFailed) as exc_info:
            await adapter.get_page(page_request("endpoint_protection_detect", cursor=cursor))

        assert exc_info.value.status_code == 200
        assert exc_info.value.errors == [(404, "404: Page Not Found")]

    async def test_bare_not_found(self, adapter, page_request, falcon_server):
        cursor = CursorCodec.encode(SimpleCursor(cursor="1000"))

        with pytest.raises(DatasourceRejected) as exc_info:
            await adapter.get_page(page_request("endpoint_protection_detect", cursor=cursor))

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Datasource rejected request, returned status code: 404."
        # The detail call is never attempted after a failed listing
        assert falcon_server.bodies == []

    async def test_non_numeric_cursor_is_rejected_before_any_call(self, adapter, page_request, falcon_server):
        cursor = CursorCodec.encode(SimpleCursor(cursor="page-two"))

        with pytest.raises(InvalidCursor):
            await adapter.get_page(page_request("endpoint_protection_detect", cursor=cursor))

        assert falcon_server.requests == []

    async def test_endpoint_incidents_with_filter(self, adapter, page_request, falcon_server):
        config = {
            "apiVersion": "v1",
            "filters": {"endpoint_protection_incident": responses.ENDPOINT_INCIDENT_FILTER},
        }

        page = await adapter.get_page(page_request("endpoint_protection_incident", config=config))

        assert [obj["incident_id"] for obj in page.objects] == [responses.ENDPOINT_INCIDENT_ID]
        assert page.next_cursor is None
        assert falcon_server.requests[0].url.params["filter"] == responses.ENDPOINT_INCIDENT_FILTER

    async def test_endpoint_incidents_empty_listing_still_calls_details(self, adapter, page_request, falcon_server):
        with pytest.raises(DatasourceFailed) as exc_info:
            await adapter.get_page(page_request("endpoint_protection_incident"))

        assert exc_info.value.code == 400
        assert exc_info.value.status_code == 400
        assert falcon_server.bodies == [{"ids": []}]

    async def test_alerts_send_composite_ids(self, adapter, page_request, falcon_server):
        page = await adapter.get_page(page_request("endpoint_protection_alert"))

        assert [obj["composite_id"] for obj in page.objects] == responses.ALERT_IDS[:2]
        assert _offset(page.next_cursor) == "2"
        assert falcon_server.bodies == [{"composite_ids": responses.ALERT_IDS[:2]}]

    async def test_alerts_past_the_end(self, adapter, page_request):
        cursor = CursorCodec.encode(SimpleCursor(cursor="4"))

        page = await adapter.get_page(page_request("endpoint_protection_alert", cursor=cursor))

        assert page.objects == []
        assert page.next_cursor is None


class TestScrollEntities:
    """Devices paged by the scroll listing's own string offset."""

    async def test_devices_until_the_listing_runs_dry(self, adapter, page_request, falcon_server):
        first = await adapter.get_page(page_request("endpoint_protection_device"))
        second = await adapter.get_page(page_request("endpoint_protection_device", cursor=first.next_cursor))
        third = await adapter.get_page(page_request("endpoint_protection_device", cursor=second.next_cursor))

        assert [obj["device_id"] for obj in first.objects] == responses.DEVICE_IDS[:2]
        assert _offset(first.next_cursor) == responses.DEVICE_SCROLL_PAGE_2
        # A short page still continues while the listing hands out an offset
        assert [obj["device_id"] for obj in second.objects] == responses.DEVICE_IDS[2:]
        assert _offset(second.next_cursor) == responses.DEVICE_SCROLL_PAGE_3
        assert third.objects == []
        assert third.next_cursor is None

        listings = [request for request in falcon_server.requests if request.method == "GET"]
        assert [request.url.params.get("offset") for request in listings] == [
            None,
            responses.DEVICE_SCROLL_PAGE_2,
            responses.DEVICE_SCROLL_PAGE_3,
        ]
        # No detail call for the exhausted listing
        assert falcon_server.bodies == [
            {"ids": responses.DEVICE_IDS[:2]},
            {"ids": responses.DEVICE_IDS[2:]},
        ]

    async def test_device_records_are_normalized(self, adapter, page_request):
        page = await adapter.get_page(page_request("endpoint_protection_device"))

        first = page.objects[0]
        assert first["hostname"] == "MLX40LWGRK.localdomain"
        assert first["platform_name"] == "Mac"
        assert first["last_seen"].day == 16

    async def test_device_filter_is_sent(self, adapter, page_request, falcon_server):
        config = {"apiVersion": "v1", "filters": {"endpoint_protection_device": responses.DEVICE_FILTER}}

        await adapter.get_page(page_request("endpoint_protection_device", config=config))

        assert falcon_server.requests[0].url.params["filter"] == responses.DEVICE_FILTER

    async def test_string_offset_is_not_numeric_checked(self, adapter, page_request):
        cursor = CursorCodec.encode(SimpleCursor(cursor=responses.DEVICE_SCROLL_PAGE_2))

        page = await adapter.get_page(page_request("endpoint_protection_device", cursor=cursor))

        assert [obj["device_id"] for obj in page.objects] == responses.DEVICE_IDS[2:]


class TestCombinedAlerts:
    """Combined alerts paged by the vendor's search-after token."""

    async def test_two_pages(self, adapter, page_request, falcon_server):
        first = await adapter.get_page(page_request("endpoint_protection_combined_alert"))
        second = await adapter.get_page(
            page_request("endpoint_protection_combined_alert", cursor=first.next_cursor),
        )

        assert [obj["composite_id"] for obj in first.objects] == responses.ALERT_IDS[:2]
        cursor = CursorCodec.decode(first.next_cursor, SearchAfterCursor)
        assert cursor.total_fetched == 2
        assert cursor.total_hits == 23
        assert cursor.after == (
            1749611157221,
            "testid:ind:5388c592189444ad9e84df071c8f3954:9782782614-10303-31831568",
        )

        assert [obj["composite_id"] for obj in second.objects] == responses.ALERT_IDS[2:]
        assert second.next_cursor is None

        assert falcon_server.bodies == [
            {"limit": 2},
            {"limit": 2, "after": responses.COMBINED_ALERTS_AFTER},
        ]

    async def test_opaque_token_is_sent_back_unchanged(self, adapter, page_request, falcon_server):
        falcon_server.combined_after = responses.COMBINED_ALERTS_OPAQUE_AFTER

        first = await adapter.get_page(page_request("endpoint_protection_combined_alert"))
        second = await adapter.get_page(
            page_request("endpoint_protection_combined_alert", cursor=first.next_cursor),
        )

        cursor = CursorCodec.decode(first.next_cursor, SearchAfterCursor)
        assert cursor.vendor_after == responses.COMBINED_ALERTS_OPAQUE_AFTER
        assert cursor.total_fetched == 2
        assert [obj["composite_id"] for obj in second.objects] == responses.ALERT_IDS[2:]
        assert second.next_cursor is None
        assert falcon_server.bodies == [
            {"limit": 2},
            {"limit": 2, "after": responses.COMBINED_ALERTS_OPAQUE_AFTER},
        ]

    async def test_records_are_normalized(self, adapter, page_request):
        page = await adapter.get_page(page_request("endpoint_protection_combined_alert"))

        first = page.objects[0]
        assert first["severity"] == 70
        assert first["created_timestamp"].year == 2025
        assert [entry["filename"] for entry in first["$.files_accessed"]] == ["cat", "passwd"]

    async def test_unknown_token_is_rejected_by_the_vendor(self, adapter, page_request):
        cursor = CursorCodec.encode(SearchAfterCursor(after=(1, "unknown"), total_fetched=2))

        with pytest.raises(DatasourceRejected) as exc_info:
            await adapter.get_page(page_request("endpoint_protection_combined_alert", cursor=cursor))

        assert exc_info.value.status_code == 400


class TestDatasourceFailures:
    async def test_wrong_token(self, adapter, page_request):
        with pytest.raises(DatasourceFailed) as exc_info:
            await adapter.get_page(page_request("user", authorization="Bearer wrong"))

        assert exc_info.value.status_code == 401
        assert exc_info.value.errors == [(401, "access denied, invalid bearer token")]

    async def test_deadline_from_config(self, connector_settings, page_request):
        async def slow(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, json=responses.USER_PAGE_1)

        config = {"apiVersion": "v1", "requestTimeoutSeconds": 0.05}
        async with FalconAdapter(
            client=FalconClient(timeout=5.0, transport=httpx.MockTransport(slow)),
            settings=connector_settings,
        ) as adapter:
            with pytest.raises(DatasourceTimeout) as exc_info:
                await adapter.get_page(page_request("user", config=config))

        assert exc_info.value.timeout_seconds == 0.05

    async def test_connection_refused(self, connector_settings, page_request):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with FalconAdapter(
            client=FalconClient(timeout=5.0, transport=httpx.MockTransport(refuse)),
            settings=connector_settings,
        ) as adapter:
            with pytest.raises(DatasourceUnreachable) as exc_info:
                await adapter.get_page(page_request("endpoint_protection_detect"))

        assert not isinstance(exc_info.value, DatasourceTimeout)
