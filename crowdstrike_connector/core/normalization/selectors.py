"""Declarative selector trees and the path expressions they use.

A selector tree names the attributes to extract from a raw record and the
child collections to carve out of it:

    SelectorTree(
        attributes=(
            AttributeSpec(name="entityId", unique_id=True),
            AttributeSpec(name="creationTime", type=AttributeType.DATETIME),
        ),
        children=(
            ChildSelector(
                path='$.accounts[?(@.__typename=="ActiveDirectoryAccountDescriptor")]',
                attributes=(AttributeSpec(name="samAccountName"),),
            ),
        ),
    )

Path expressions are a small JSONPath subset:

- ``name``: a top-level field
- ``$.a.b``: nested fields
- ``$.a[?(@.key=="value")]``: elements of array ``a`` whose ``key`` equals ``value``
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

# One path segment: a field name, optionally followed by a filter
_SEGMENT_RE = re.compile(
    r"""
    \.(?P<field>[A-Za-z_][A-Za-z0-9_]*)
    (?:
        \[\?\(@\.(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*==\s*
        (?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)')
        \)\]
    )?
    """,
    re.VERBOSE,
)

_PLAIN_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class AttributeType(StrEnum):
    """Value types a selector attribute can be coerced to."""

    STRING = "string"
    BOOL = "bool"
    INT64 = "int64"
    DOUBLE = "double"
    DATETIME = "datetime"
    DURATION = "duration"


@dataclass(frozen=True)
class PathStep:
    """One field access, with an optional discriminator filter on array elements."""

    field: str
    filter_key: str | None = None
    filter_value: str | None = None

    def matches(self, element: Any) -> bool:
        if self.filter_key is None:
            return True
        return isinstance(element, dict) and element.get(self.filter_key) == self.filter_value


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


@dataclass(frozen=True)
class JsonPath:
    """Compiled path expression."""

    expression: str
    steps: tuple[PathStep, ...]

    @classmethod
    def parse(cls, expression: str) -> JsonPath:
        """Compile a path expression.

        Raises:
            ValueError: If the expression is outside the supported subset.
        """
        if _PLAIN_NAME_RE.match(expression):
            return cls(expression=expression, steps=(PathStep(field=expression),))

        if not expression.startswith("$"):
            msg = f"Unsupported path expression: {expression}"
            raise ValueError(msg)

        steps: list[PathStep] = []
        pos = 1
        while pos < len(expression):
            match = _SEGMENT_RE.match(expression, pos)
            if match is None:
                msg = f"Unsupported path expression: {expression}"
                raise ValueError(msg)
            value = match.group("dq") if match.group("dq") is not None else match.group("sq")
            steps.append(
                PathStep(
                    field=match.group("field"),
                    filter_key=match.group("key"),
                    filter_value=value,
                ),
            )
            pos = match.end()

        if not steps:
            msg = f"Path expression selects nothing: {expression}"
            raise ValueError(msg)
        return cls(expression=expression, steps=tuple(steps))

    def resolve(self, document: Any) -> Any:
        """Read a single value through nested objects.

        Returns:
            The value, or ``MISSING`` when any step is absent or null.
        """
        current = document
        for step in self.steps:
            if not isinstance(current, dict) or current.get(step.field) is None:
                return MISSING
            current = current[step.field]
            if step.filter_key is not None:
                if not isinstance(current, list):
                    return MISSING
                current = [element for element in current if step.matches(element)]
        return current

    def select(self, document: Any) -> list[Any] | Any:
        """Collect every node the path reaches, flattening arrays on the way.

        Returns:
            Matching nodes in document order, or ``MISSING`` when the path
            does not exist in the document at all.
        """
        nodes = [document]
        for step in self.steps:
            found = False
            next_nodes: list[Any] = []
            for node in nodes:
                if not isinstance(node, dict) or node.get(step.field) is None:
                    continue
                found = True
                value = node[step.field]
                items = value if isinstance(value, list) else [value]
                next_nodes.extend(item for item in items if step.matches(item))
            if not found:
                return MISSING
            nodes = next_nodes
        return nodes


class AttributeSpec(BaseModel):
    """One attribute to extract from a record.

    Attributes:
        name: Field name or ``$.a.b`` path; also the key in the normalized record.
        type: Value type to coerce to.
        is_list: Whether the value is a list of ``type`` (``list`` on the wire).
        unique_id: Whether this attribute identifies the record.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    type: AttributeType = AttributeType.STRING
    is_list: bool = Field(default=False, alias="list")
    unique_id: bool = False

    _path: JsonPath = PrivateAttr()

    @field_validator("name")
    @classmethod
    def _valid_path(cls, v: str) -> str:
        JsonPath.parse(v)
        return v

    def model_post_init(self, __context: Any) -> None:
        self._path = JsonPath.parse(self.name)

    @property
    def path(self) -> JsonPath:
        return self._path


class ChildSelector(BaseModel):
    """A nested collection carved out of a record.

    Attributes:
        path: Path expression; also the key of the collection in the normalized record.
        attributes: Attributes extracted from every matched element.
        children: Collections nested inside every matched element.
        expect_list: Emit ``[]`` instead of leaving the key absent when nothing matches.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(min_length=1)
    attributes: tuple[AttributeSpec, ...] = ()
    children: tuple[ChildSelector, ...] = ()
    expect_list: bool = False

    _json_path: JsonPath = PrivateAttr()

    @field_validator("path")
    @classmethod
    def _valid_path(cls, v: str) -> str:
        JsonPath.parse(v)
        return v

    def model_post_init(self, __context: Any) -> None:
        self._json_path = JsonPath.parse(self.path)

    @property
    def json_path(self) -> JsonPath:
        return self._json_path


class SelectorTree(BaseModel):
    """Top-level attributes and child collections of one entity kind."""

    model_config = ConfigDict(frozen=True)

    attributes: tuple[AttributeSpec, ...] = ()
    children: tuple[ChildSelector, ...] = ()

    @property
    def unique_id_attributes(self) -> list[AttributeSpec]:
        return [attr for attr in self.attributes if attr.unique_id]


__all__ = [
    "MISSING",
    "AttributeSpec",
    "AttributeType",
    "ChildSelector",
    "JsonPath",
    "PathStep",
    "SelectorTree",
]
