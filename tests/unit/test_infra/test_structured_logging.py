"""Tests for structured logging: context propagation and JSON output."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from crowdstrike_connector.infra.logging import (
    ContextInjectingFilter,
    JSONFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    remove_from_log_context,
    set_log_context,
)
from crowdstrike_connector.infra.logging.config import _build_config


@pytest.fixture(autouse=True)
def _clean_context():
    clear_log_context()
    yield
    clear_log_context()


def _record(message: str = "Starting datasource request", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="crowdstrike_connector.features.entities.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogContext:
    def test_set_and_remove(self):
        set_log_context(request_id="abc", entity_external_id="user")
        remove_from_log_context("entity_external_id")

        assert get_log_context() == {"request_id": "abc"}

    def test_filter_injects_without_overwriting(self):
        set_log_context(request_id="abc", page_size=10)
        record = _record(page_size=2)

        assert ContextInjectingFilter().filter(record) is True
        assert record.request_id == "abc"
        assert record.page_size == 2

    def test_bound_logger_merges_extra(self, caplog: pytest.LogCaptureFixture):
        log = get_logger("crowdstrike_connector.test", entity_external_id="user").bind(page_size=2)

        with caplog.at_level(logging.INFO, logger="crowdstrike_connector.test"):
            log.info("Sending HTTP request to datasource", extra={"url": "https://falcon.test"})

        record = caplog.records[-1]
        assert record.entity_external_id == "user"
        assert record.page_size == 2
        assert record.url == "https://falcon.test"


class TestJSONFormatter:
    def test_output_fields(self):
        formatter = JSONFormatter(static={"service": "crowdstrike-connector"})

        data = json.loads(formatter.format(_record(object_count=2, next_cursor={"cursor": "4"})))

        assert data["level"] == "INFO"
        assert data["logger"] == "crowdstrike_connector.features.entities.service"
        assert data["message"] == "Starting datasource request"
        assert data["service"] == "crowdstrike-connector"
        assert data["object_count"] == 2
        assert data["next_cursor"] == {"cursor": "4"}
        assert data["timestamp"].endswith("Z")
        assert "msg" not in data
        assert "trace_id" not in data

    def test_exception_on_one_line(self):
        try:
            raise ValueError("bad value")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()

        output = JSONFormatter().format(record)

        assert "\n" not in output
        assert "bad value" in json.loads(output)["exception"]


class TestLoggingConfig:
    def test_json_console_handler(self):
        config = _build_config(
            log_level="debug",
            json_logs=True,
            console_enabled=True,
            include_context=True,
            include_uvicorn=False,
            service_name="svc",
        )

        assert config["root"] == {"level": "DEBUG", "handlers": ["console"]}
        assert config["handlers"]["console"]["stream"] == "ext://sys.stderr"
        assert config["handlers"]["console"]["filters"] == ["context"]
        assert config["formatters"]["json"]["static"] == {"service": "svc"}
        assert config["loggers"]["uvicorn.access"]["propagate"] is False

    def test_text_without_console(self):
        config = _build_config(
            log_level="INFO",
            json_logs=False,
            console_enabled=False,
            include_context=False,
            include_uvicorn=True,
            service_name="svc",
        )

        assert "text" in config["formatters"]
        assert config["handlers"] == {}
        assert config["filters"] == {}
