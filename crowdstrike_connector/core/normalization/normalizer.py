"""Flatten raw vendor records into attribute maps plus named child collections.

Output shape of ``normalize``:

    {
        "entityId": "095b6929-...",
        "creationTime": datetime(2024, 5, 15, 15, 29, 10, tzinfo=UTC),
        '$.accounts[?(@.__typename=="ActiveDirectoryAccountDescriptor")]': [
            {"samAccountName": "Wendolyn.Garber"},
        ],
    }

Attributes are keyed by their declared name and child collections by their
path expression. Fields missing from the raw record are left out rather
than defaulted.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta, timezone
import json
import re
from typing import Any

from crowdstrike_connector.core.exceptions import MalformedResponse
from crowdstrike_connector.core.normalization.selectors import (
    MISSING,
    AttributeSpec,
    AttributeType,
    ChildSelector,
    SelectorTree,
)

# RFC 3339 (any fractional precision), "+hhmm" offsets, and bare dates
_TIMESTAMP_RE = re.compile(
    r"""
    ^(?P<date>\d{4}-\d{2}-\d{2})
    (?:
        [Tt\ ](?P<time>\d{2}:\d{2}:\d{2})
        (?:\.(?P<fraction>\d+))?
        (?P<zone>[Zz]|[+-]\d{2}:?\d{2})?
    )?$
    """,
    re.VERBOSE,
)

_DURATION_RE = re.compile(r"(?P<value>\d+(?:\.\d+)?)(?P<unit>ns|us|µs|ms|s|m|h)")

_DURATION_UNITS = {
    "ns": timedelta(microseconds=0.001),
    "us": timedelta(microseconds=1),
    "µs": timedelta(microseconds=1),
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
}


def parse_timestamp(value: str) -> datetime:
    """Parse a vendor timestamp into an aware UTC datetime.

    Accepts ``2024-05-15T15:29:10Z``, ``2025-06-16T19:46:56.218776698Z``,
    ``2024-05-15T15:29:10.000+0000`` and ``2024-05-15``. Values without a
    zone are taken as UTC. Digits beyond microseconds are truncated.

    Raises:
        ValueError: If the value matches none of the accepted layouts.
    """
    match = _TIMESTAMP_RE.match(value.strip())
    if match is None:
        msg = f"Unsupported timestamp: {value!r}"
        raise ValueError(msg)

    year, month, day = (int(part) for part in match.group("date").split("-"))
    hour = minute = second = microsecond = 0
    if match.group("time"):
        hour, minute, second = (int(part) for part in match.group("time").split(":"))
    if match.group("fraction"):
        microsecond = int(match.group("fraction")[:6].ljust(6, "0"))

    tz = UTC
    zone = match.group("zone")
    if zone and zone.upper() != "Z":
        sign = -1 if zone[0] == "-" else 1
        digits = zone[1:].replace(":", "")
        offset = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
        tz = timezone(sign * offset)

    parsed = datetime(year, month, day, hour, minute, second, microsecond, tzinfo=tz)
    return parsed.astimezone(UTC)


def parse_duration(value: str | int | float) -> timedelta:
    """Parse ``1h30m``-style durations; bare numbers are seconds."""
    if isinstance(value, int | float) and not isinstance(value, bool):
        return timedelta(seconds=value)

    text = str(value).strip()
    try:
        return timedelta(seconds=float(text))
    except ValueError:
        pass

    negative = text.startswith("-")
    text = text.lstrip("+-")
    total = timedelta()
    pos = 0
    for match in _DURATION_RE.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group("value")) * _DURATION_UNITS[match.group("unit")]
        pos = match.end()
    if pos != len(text) or not text:
        msg = f"Unsupported duration: {value!r}"
        raise ValueError(msg)
    return -total if negative else total


def coerce(value: Any, attribute_type: AttributeType) -> Any:
    """Convert one raw JSON value to the declared attribute type.

    Raises:
        ValueError: If the value cannot represent the type.
    """
    match attribute_type:
        case AttributeType.STRING:
            if isinstance(value, str):
                return value
            if isinstance(value, bool):
                return "true" if value else "false"
            if isinstance(value, int | float):
                return str(value)
            return json.dumps(value, separators=(",", ":"), sort_keys=True)

        case AttributeType.BOOL:
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.lower() in {"true", "false"}:
                return value.lower() == "true"
            msg = f"Expected a boolean, got {value!r}"
            raise ValueError(msg)

        case AttributeType.INT64:
            if isinstance(value, bool):
                msg = f"Expected an integer, got {value!r}"
                raise ValueError(msg)
            if isinstance(value, int):
                return value
            if isinstance(value, float) and value.is_integer():
                return int(value)
            if isinstance(value, str):
                return int(value)
            msg = f"Expected an integer, got {value!r}"
            raise ValueError(msg)

        case AttributeType.DOUBLE:
            if isinstance(value, bool):
                msg = f"Expected a number, got {value!r}"
                raise ValueError(msg)
            if isinstance(value, int | float):
                return float(value)
            if isinstance(value, str):
                return float(value)
            msg = f"Expected a number, got {value!r}"
            raise ValueError(msg)

        case AttributeType.DATETIME:
            if isinstance(value, str):
                return parse_timestamp(value)
            msg = f"Expected a timestamp string, got {value!r}"
            raise ValueError(msg)

        case AttributeType.DURATION:
            return parse_duration(value)

    msg = f"Unknown attribute type: {attribute_type}"
    raise ValueError(msg)


def _extract_attribute(record: Mapping[str, Any], spec: AttributeSpec) -> Any:
    raw = spec.path.resolve(record)
    if raw is MISSING:
        return [] if spec.is_list else MISSING

    try:
        if spec.is_list:
            items = raw if isinstance(raw, list) else [raw]
            return [coerce(item, spec.type) for item in items if item is not None]
        if isinstance(raw, list):
            msg = f"Expected a single value, got a list of {len(raw)}"
            raise ValueError(msg)
        return coerce(raw, spec.type)
    except (ValueError, TypeError, OverflowError) as e:
        raise MalformedResponse(
            detail=f"Failed to convert attribute {spec.name} to {spec.type.value}: {e}",
            extra={"attribute": spec.name, "type": spec.type.value},
        ) from e


def _normalize_object(
    record: Mapping[str, Any],
    attributes: tuple[AttributeSpec, ...],
    children: tuple[ChildSelector, ...],
) -> dict[str, Any]:
    output: dict[str, Any] = {}

    for spec in attributes:
        value = _extract_attribute(record, spec)
        if value is not MISSING:
            output[spec.name] = value

    # Every selector reads the raw record; two selectors may share an array
    for child in children:
        matches = child.json_path.select(record)
        if matches is MISSING:
            matches = []
        objects = [
            _normalize_object(element, child.attributes, child.children)
            for element in matches
            if isinstance(element, Mapping)
        ]
        if objects or child.expect_list:
            output[child.path] = objects

    return output


def normalize(record: Mapping[str, Any], tree: SelectorTree) -> dict[str, Any]:
    """Normalize one raw record against a selector tree.

    Args:
        record: Raw JSON object from the vendor.
        tree: Attributes and child selectors to extract.

    Returns:
        Flat attribute map plus one list of child records per matched selector.

    Raises:
        MalformedResponse: If a present value cannot be converted to its declared type.
    """
    return _normalize_object(record, tree.attributes, tree.children)


def normalize_all(records: list[Any], tree: SelectorTree) -> list[dict[str, Any]]:
    """Normalize a page of raw records, preserving order."""
    objects = []
    for record in records:
        if not isinstance(record, Mapping):
            raise MalformedResponse(
                detail="Expected every record to be a JSON object.",
                extra={"record_type": type(record).__name__},
            )
        objects.append(normalize(record, tree))
    return objects
