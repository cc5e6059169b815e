from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from mcp_bridge.codec import decode
from mcp_bridge.values import ListValue, NullValue, StringValue, TypedValue

ERROR_PLACEHOLDER = "Unknown MCP tool error"


def block_field(block: Any, name: str) -> Any:
    """Read a field from an SDK content model or a plain dict block."""
    if isinstance(block, dict):
        return block.get(name)
    return getattr(block, name, None)


def text_blocks(content: Sequence[Any]) -> list[str]:
    texts: list[str] = []
    for block in content:
        if block_field(block, "type") != "text":
            continue
        text = block_field(block, "text")
        texts.append(text if isinstance(text, str) else "")
    return texts


def error_text(content: Sequence[Any] | None) -> str:
    """Join the text blocks of a failed call, or fall back to a placeholder."""
    return "\n".join(text_blocks(content or [])) or ERROR_PLACEHOLDER


def reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON.
    raise ValueError(f"invalid JSON constant: {name}")


def render_block(block: Any) -> str:
    kind = block_field(block, "type")
    if kind == "text":
        return str(block_field(block, "text") or "")
    if kind == "image":
        return f"[image: {block_field(block, 'mimeType')}]"
    if kind == "resource_link":
        return f"[resource: {block_field(block, 'uri')}]"
    return f"[{kind}]"


def interpret_result(
    content: Sequence[Any] | None,
    structured: Any = None,
) -> TypedValue:
    """Turn a tool call's content blocks and structured payload into one value.

    A structured payload always wins. Otherwise a lone text block is parsed as
    JSON when possible, several text blocks become a list of strings, and
    content without any text is rendered block by block into one string.
    """
    if structured is not None:
        return decode(structured)

    blocks = list(content or [])
    if not blocks:
        return NullValue()

    texts = text_blocks(blocks)
    if len(texts) == 1:
        try:
            return decode(json.loads(texts[0], parse_constant=reject_constant))
        except (ValueError, RecursionError):
            return StringValue(texts[0])

    if len(texts) > 1:
        return ListValue([StringValue(text) for text in texts])

    return StringValue("\n".join(render_block(block) for block in blocks))
