"""OpenTelemetry span helpers.

Only the API package is used here: without a configured SDK the tracer is a
no-op, and a host process that installs one gets connector spans for free.
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer instance for creating custom spans.

    Args:
        name: Tracer name, typically __name__ of the module.

    Example:
            tracer = get_tracer(__name__)

            with tracer.start_as_current_span("falcon.get_page") as span:
                span.set_attribute("falcon.entity", "user")
    """
    return trace.get_tracer(name)


def add_span_attributes(attributes: dict[str, Any]) -> None:
    """Add attributes to the current span, skipping ``None`` values."""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(key, value)


def record_exception(exception: Exception) -> None:
    """Record an exception in the current span and mark it as failed."""
    span = trace.get_current_span()
    if span.is_recording():
        span.record_exception(exception)
        span.set_status(trace.Status(trace.StatusCode.ERROR))
