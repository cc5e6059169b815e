"""Typed value model exchanged between the host runtime and MCP tools."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Never, TypeAlias


@dataclass(slots=True)
class StringValue:
    """A text value."""

    value: str


@dataclass(slots=True)
class NumberValue:
    """A numeric value; integers and floats share one kind."""

    value: int | float


@dataclass(slots=True)
class BooleanValue:
    """A boolean value."""

    value: bool


@dataclass(slots=True)
class NullValue:
    """The absence of a value."""


@dataclass(slots=True)
class ListValue:
    """An ordered sequence of typed values."""

    elements: list[TypedValue] = field(default_factory=list)


@dataclass(slots=True)
class MappingValue:
    """A string-keyed mapping; dict insertion order is the mapping order."""

    entries: dict[str, TypedValue] = field(default_factory=dict)


TypedValue: TypeAlias = (
    StringValue | NumberValue | BooleanValue | NullValue | ListValue | MappingValue
)


def unrepresentable(value: Never) -> str:
    # Typed as Never so a new TypedValue variant fails type checking at every
    # exhaustive match; at runtime unknown objects still render as strings.
    return str(value)


def format_number(number: int | float) -> str:
    if isinstance(number, float):
        if math.isnan(number):
            return "NaN"
        if math.isinf(number):
            return "Infinity" if number > 0 else "-Infinity"
        if number.is_integer():
            return str(int(number))
    return str(number)


def value_to_string(value: TypedValue) -> str:
    """Render a typed value in its canonical string form."""
    match value:
        case StringValue(value=text):
            return text
        case NumberValue(value=number):
            return format_number(number)
        case BooleanValue(value=flag):
            return "true" if flag else "false"
        case NullValue():
            return "null"
        case ListValue(elements=elements):
            return "[" + ", ".join(value_to_string(item) for item in elements) + "]"
        case MappingValue(entries=entries):
            rendered = (f"{key}: {value_to_string(item)}" for key, item in entries.items())
            return "{" + ", ".join(rendered) + "}"
        case _:
            return unrepresentable(value)
