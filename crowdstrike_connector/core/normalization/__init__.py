"""Selector-driven normalization of raw vendor records."""

from crowdstrike_connector.core.normalization.normalizer import (
    coerce,
    normalize,
    normalize_all,
    parse_duration,
    parse_timestamp,
)
from crowdstrike_connector.core.normalization.selectors import (
    AttributeSpec,
    AttributeType,
    ChildSelector,
    JsonPath,
    SelectorTree,
)

__all__ = [
    "AttributeSpec",
    "AttributeType",
    "ChildSelector",
    "JsonPath",
    "SelectorTree",
    "coerce",
    "normalize",
    "normalize_all",
    "parse_duration",
    "parse_timestamp",
]
