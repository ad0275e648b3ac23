"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: connector settings and cache reset
    - Datasource Fixtures: in-process Falcon API, client and adapter
    - Application Fixtures: FastAPI app and HTTP client
    - Request Fixtures: page request builders
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
import os
from typing import Any

import httpx
from httpx import ASGITransport, AsyncClient
import pytest

# Ensure tests never read a developer's .env or reach a real tenant
os.environ.setdefault("FALCON_BASE_URL", "")
os.environ.setdefault("FALCON_TOKEN", "")
os.environ.setdefault("FALCON_REQUEST_TIMEOUT_SECONDS", "5")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("APP_ENVIRONMENT", "test")

from crowdstrike_connector.core.settings import ConnectorSettings, clear_all_caches  # noqa: E402
from crowdstrike_connector.features.entities import FalconAdapter, PageRequest  # noqa: E402
from crowdstrike_connector.infra.external import FalconClient  # noqa: E402
from tests.fixtures.falcon_responses import TOKEN  # noqa: E402
from tests.fixtures.falcon_server import FalconMockServer  # noqa: E402

FALCON_ADDRESS = "api.test.crowdstrike.com"


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Drop cached settings so monkeypatched environment variables apply."""
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def connector_settings() -> ConnectorSettings:
    """Connector settings with a short deadline and the vendor page size cap."""
    return ConnectorSettings(request_timeout_seconds=5.0, max_page_size=1000)


# ============================================================================
# Datasource Fixtures
# ============================================================================


@pytest.fixture
def falcon_server() -> FalconMockServer:
    """In-process Falcon API recording every request it receives."""
    return FalconMockServer()


@pytest.fixture
async def falcon_client(falcon_server: FalconMockServer) -> AsyncGenerator[FalconClient]:
    """FalconClient wired to the in-process Falcon API."""
    client = FalconClient(timeout=5.0, transport=httpx.MockTransport(falcon_server))
    yield client
    await client.close()


@pytest.fixture
async def adapter(
    falcon_client: FalconClient,
    connector_settings: ConnectorSettings,
) -> AsyncGenerator[FalconAdapter]:
    """Adapter reading from the in-process Falcon API.

    Example:
        async def test_users(adapter, page_request):
            page = await adapter.get_page(page_request("user"))
            assert len(page.objects) == 2
    """
    yield FalconAdapter(client=falcon_client, settings=connector_settings)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
async def app(adapter: FalconAdapter):
    """Create FastAPI application for testing.

    ASGITransport does not run the lifespan, so the adapter is installed on
    the application state directly.
    """
    from crowdstrike_connector.app.main import create_app

    application = create_app()
    application.state.adapter = adapter
    return application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing.

    Example:
        async def test_liveness(client):
            response = await client.get("/health/live")
            assert response.status_code == 200
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ============================================================================
# Request Fixtures
# ============================================================================


def page_request_payload(
    entity: str,
    *,
    page_size: int = 2,
    cursor: str | None = None,
    config: dict[str, Any] | None = None,
    authorization: str = TOKEN,
    address: str = FALCON_ADDRESS,
    **entity_fields: Any,
) -> dict[str, Any]:
    """Build a page request body in its wire shape (camelCase aliases)."""
    payload: dict[str, Any] = {
        "address": address,
        "authorization": authorization,
        "config": config
        if config is not None
        else {"apiVersion": "v1", "archived": False, "enabled": True},
        "entity": {"externalId": entity, **entity_fields},
        "pageSize": page_size,
    }
    if cursor is not None:
        payload["cursor"] = cursor
    return payload


@pytest.fixture
def page_request() -> Callable[..., PageRequest]:
    """Factory for page requests against the in-process Falcon API."""

    def _build(entity: str, **kwargs: Any) -> PageRequest:
        return PageRequest.model_validate(page_request_payload(entity, **kwargs))

    return _build
