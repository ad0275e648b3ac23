"""OpenTelemetry tracing helpers.

- get_tracer(): Get a tracer for creating custom spans
- add_span_attributes(): Add attributes to current span
- record_exception(): Record exceptions in current span
"""

from crowdstrike_connector.infra.tracing.opentelemetry import (
    add_span_attributes,
    get_tracer,
    record_exception,
)

__all__ = [
    "add_span_attributes",
    "get_tracer",
    "record_exception",
]
