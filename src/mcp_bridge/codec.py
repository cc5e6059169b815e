"""Conversion between typed values and JSON-shaped data.

Both directions are total: shapes without a typed counterpart degrade to
their string rendering instead of raising.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mcp_bridge.values import (
    BooleanValue,
    ListValue,
    MappingValue,
    NullValue,
    NumberValue,
    StringValue,
    TypedValue,
    unrepresentable,
)

JSONValue = Any


def encode(value: TypedValue) -> JSONValue:
    match value:
        case StringValue(value=text):
            return text
        case NumberValue(value=number):
            return number
        case BooleanValue(value=flag):
            return flag
        case NullValue():
            return None
        case ListValue(elements=elements):
            return [encode(item) for item in elements]
        case MappingValue(entries=entries):
            return {key: encode(item) for key, item in entries.items()}
        case _:
            return unrepresentable(value)


def encode_arguments(args: Mapping[str, TypedValue]) -> dict[str, JSONValue]:
    """Encode tool-call keyword arguments into a JSON argument object."""
    return {key: encode(value) for key, value in args.items()}


def decode(data: JSONValue) -> TypedValue:
    if data is None:
        return NullValue()
    # bool is a subclass of int, so it has to be matched first.
    if isinstance(data, bool):
        return BooleanValue(data)
    if isinstance(data, (int, float)):
        return NumberValue(data)
    if isinstance(data, str):
        return StringValue(data)
    if isinstance(data, (list, tuple)):
        return ListValue([decode(item) for item in data])
    if isinstance(data, Mapping):
        return MappingValue({str(key): decode(item) for key, item in data.items()})
    return StringValue(str(data))
