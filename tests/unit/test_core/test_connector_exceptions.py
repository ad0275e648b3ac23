"""Tests for connector exception classes."""

from __future__ import annotations

import pytest

from crowdstrike_connector.core.exceptions import (
    ConnectorException,
    DatasourceFailed,
    DatasourceRejected,
    DatasourceTimeout,
    DatasourceUnreachable,
    InvalidConfiguration,
    InvalidDatasourceConfig,
    InvalidEntityConfig,
    InvalidPageRequest,
    UnsupportedEntity,
)


class TestConnectorException:
    def test_defaults(self):
        exc = ConnectorException(detail="boom")

        assert str(exc) == "boom"
        assert exc.type == "internal-error"
        assert exc.title == "Internal Error"
        assert exc.status_code is None
        assert exc.extra == {}

    def test_to_dict_merges_extra(self):
        exc = ConnectorException(detail="boom", type="x", status_code=502, extra={"url": "u"})

        assert exc.to_dict() == {
            "type": "x",
            "title": "Internal Error",
            "detail": "boom",
            "status_code": 502,
            "url": "u",
        }


class TestDatasourceErrors:
    """Tests for the datasource failure classes."""

    def test_rejected_message(self):
        exc = DatasourceRejected(status_code=404)

        assert exc.detail == "Datasource rejected request, returned status code: 404."
        assert exc.status_code == 404
        assert exc.retry_after is None

    def test_rejected_retry_after(self):
        exc = DatasourceRejected(status_code=429, retry_after="30")

        assert exc.extra == {"retry_after": "30"}

    def test_failed_carries_vendor_errors_in_order(self):
        exc = DatasourceFailed(errors=[(404, "404: Page Not Found"), (None, "second")], status_code=200)

        assert exc.code == 404
        assert exc.message == "404: Page Not Found"
        assert exc.detail == (
            "Failed to query the datasource.\n"
            "Got errors: Code: 404, Message: 404: Page Not Found\nCode: None, Message: second."
        )
        assert exc.extra["errors"] == [
            {"code": 404, "message": "404: Page Not Found"},
            {"code": None, "message": "second"},
        ]

    def test_timeout_is_unreachable(self):
        """A timeout is a transport failure with its own title."""
        exc = DatasourceTimeout(timeout_seconds=2.5)

        assert isinstance(exc, DatasourceUnreachable)
        assert exc.type == "datasource-unreachable"
        assert exc.title == "Datasource Timeout"
        assert "2.5 seconds" in exc.detail
        assert exc.extra["timeout_seconds"] == 2.5


class TestConfigurationErrors:
    @pytest.mark.parametrize(
        ("exception_cls", "expected_type"),
        [
            (InvalidDatasourceConfig, "invalid-datasource-config"),
            (InvalidEntityConfig, "invalid-entity-config"),
            (InvalidPageRequest, "invalid-page-request-config"),
        ],
    )
    def test_types(self, exception_cls, expected_type):
        exc = exception_cls(detail="bad")

        assert isinstance(exc, InvalidConfiguration)
        assert exc.type == expected_type

    def test_unsupported_entity(self):
        exc = UnsupportedEntity("group")

        assert exc.detail == "Provided entity external ID is invalid."
        assert exc.extra == {"entity_external_id": "group"}
