"""Integration tests for the HTTP surface: page endpoint, health and metrics."""

from __future__ import annotations

from crowdstrike_connector.core.pagination import CursorCodec, SimpleCursor
from tests.conftest import page_request_payload
from tests.fixtures import falcon_responses as responses


class TestPagesEndpoint:
    async def test_first_page(self, client):
        response = await client.post("/api/v1/pages", json=page_request_payload("user"))

        assert response.status_code == 200
        data = response.json()
        assert [obj["entityId"] for obj in data["objects"]] == [
            "095b6929-44b9-4525-a0cc-9ef4552011f3",
            "45dc40e2-7b7b-4f38-9ac7-98f4a35b24e1",
        ]
        assert CursorCodec.decode(data["nextCursor"]) == SimpleCursor(cursor=responses.USER_CURSOR_PAGE_2)

    async def test_last_page_has_no_cursor(self, client):
        cursor = CursorCodec.encode(SimpleCursor(cursor="4"))

        response = await client.post(
            "/api/v1/pages",
            json=page_request_payload("endpoint_protection_detect", cursor=cursor),
        )

        assert response.status_code == 200
        data = response.json()
        assert [obj["detection_id"] for obj in data["objects"]] == responses.DETECTION_IDS[4:]
        assert "nextCursor" not in data

    async def test_invalid_config_is_bad_request(self, client):
        response = await client.post(
            "/api/v1/pages",
            json=page_request_payload("user", config={"apiVersion": "v2"}),
        )

        assert response.status_code == 400
        data = response.json()
        assert data["type"] == "invalid-datasource-config"
        assert data["detail"] == "CrowdStrike config is invalid: apiVersion is not supported."
        assert data["request_id"] == response.headers["x-request-id"]

    async def test_unsupported_entity(self, client):
        response = await client.post("/api/v1/pages", json=page_request_payload("group"))

        assert response.status_code == 400
        assert response.json()["entity_external_id"] == "group"

    async def test_vendor_rejection_is_bad_gateway(self, client):
        cursor = CursorCodec.encode(SimpleCursor(cursor="1000"))

        response = await client.post(
            "/api/v1/pages",
            json=page_request_payload("endpoint_protection_detect", cursor=cursor),
        )

        assert response.status_code == 502
        data = response.json()
        assert data["type"] == "datasource-rejected"
        assert data["status_code"] == 404

    async def test_vendor_error_envelope_is_bad_gateway(self, client):
        response = await client.post(
            "/api/v1/pages",
            json=page_request_payload("user", authorization="Bearer wrong"),
        )

        assert response.status_code == 502
        data = response.json()
        assert data["type"] == "datasource-failed"
        assert data["status_code"] == 401
        assert data["errors"] == [{"code": 401, "message": "access denied, invalid bearer token"}]

    async def test_missing_page_size_is_unprocessable(self, client):
        payload = page_request_payload("user")
        del payload["pageSize"]

        response = await client.post("/api/v1/pages", json=payload)

        assert response.status_code == 422

    async def test_request_id_is_echoed(self, client):
        response = await client.post(
            "/api/v1/pages",
            json=page_request_payload("user"),
            headers={"X-Request-ID": "test-request-1"},
        )

        assert response.headers["x-request-id"] == "test-request-1"


class TestOperationalEndpoints:
    async def test_liveness(self, client):
        response = await client.get("/health/live")

        assert response.status_code == 200
        data = response.json()
        assert data["alive"] is True
        assert data["service"]

    async def test_metrics_after_page_fetch(self, client):
        await client.post("/api/v1/pages", json=page_request_payload("incident"))

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert 'connector_page_fetch_total{entity="incident",outcome="success"}' in response.text
        assert "connector_datasource_requests_total" in response.text
