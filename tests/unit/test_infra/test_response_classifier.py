"""Tests for datasource response classification."""

from __future__ import annotations

import httpx
import pytest

from crowdstrike_connector.core.exceptions import (
    DatasourceFailed,
    DatasourceRejected,
    MalformedResponse,
)
from crowdstrike_connector.infra.external import classify_response, vendor_errors
from tests.fixtures.falcon_responses import EMPTY_IDS_ERROR, PAGE_NOT_FOUND, UNAUTHORIZED


def _response(status_code: int, **kwargs) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("GET", "https://falcon.test/x"), **kwargs)


class TestVendorErrors:
    """Tests for error envelope parsing."""

    def test_rest_envelope(self):
        assert vendor_errors(PAGE_NOT_FOUND) == [(404, "404: Page Not Found")]

    def test_graphql_errors(self):
        body = {"errors": [{"message": "Bad cursor", "extensions": {"code": "400"}}, {"message": "Other"}]}

        assert vendor_errors(body) == [(400, "Bad cursor"), (None, "Other")]

    @pytest.mark.parametrize("body", [None, [], {"errors": []}, {"errors": None}, {"resources": []}])
    def test_no_errors(self, body):
        assert vendor_errors(body) == []


class TestClassifyResponse:
    """Tests for the classification rules, in order."""

    def test_success_returns_body(self):
        body = {"resources": ["a"], "errors": []}

        assert classify_response(_response(200, json=body)) == body

    def test_error_envelope_with_ok_status(self):
        """Vendor errors win even when the status is 200."""
        with pytest.raises(DatasourceFailed) as exc_info:
            classify_response(_response(200, json=PAGE_NOT_FOUND))

        assert exc_info.value.code == 404
        assert exc_info.value.status_code == 200

    def test_error_envelope_with_error_status(self):
        with pytest.raises(DatasourceFailed) as exc_info:
            classify_response(_response(401, json=UNAUTHORIZED))

        assert exc_info.value.code == 401
        assert exc_info.value.message == "access denied, invalid bearer token"

    def test_empty_ids_envelope(self):
        with pytest.raises(DatasourceFailed) as exc_info:
            classify_response(_response(400, json=EMPTY_IDS_ERROR))

        assert exc_info.value.code == 400

    @pytest.mark.parametrize("status_code", [301, 404, 429, 500, 503])
    def test_error_status_without_envelope(self, status_code):
        with pytest.raises(DatasourceRejected) as exc_info:
            classify_response(_response(status_code, content=b""))

        assert exc_info.value.status_code == status_code

    def test_retry_after_is_kept(self):
        with pytest.raises(DatasourceRejected) as exc_info:
            classify_response(_response(429, headers={"Retry-After": "17"}, content=b"slow down"))

        assert exc_info.value.retry_after == "17"

    @pytest.mark.parametrize("content", [b"", b"<html>ok</html>", b"[1, 2]"])
    def test_success_without_json_object(self, content):
        with pytest.raises(MalformedResponse):
            classify_response(_response(200, content=content))
