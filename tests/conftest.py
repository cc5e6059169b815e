from __future__ import annotations

import types
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any
from unittest.mock import AsyncMock

import pytest

from mcp_bridge import transport as transport_module


@dataclass
class FakeMCP:
    """Records what the bridge asked of the SDK seams."""

    initialize: AsyncMock = field(default_factory=AsyncMock)
    list_tools: AsyncMock = field(default_factory=AsyncMock)
    call_tool: AsyncMock = field(default_factory=AsyncMock)
    stdio_params: list[Any] = field(default_factory=list)
    http_calls: list[tuple[str, dict[str, str] | None]] = field(default_factory=list)
    client_infos: list[Any] = field(default_factory=list)
    closed: list[str] = field(default_factory=list)
    failing_close: set[str] = field(default_factory=set)

    def set_tools(self, *names: str) -> None:
        self.list_tools.return_value = types.SimpleNamespace(
            tools=[tool(name) for name in names]
        )

    def respond(
        self,
        *texts: str,
        blocks: list[Any] | None = None,
        structured: Any = None,
        is_error: bool = False,
    ) -> None:
        content = [text(value) for value in texts] + list(blocks or [])
        self.call_tool.return_value = call_result(content, structured, is_error)


def tool(name: str, description: str = "", schema: dict[str, Any] | None = None) -> Any:
    return types.SimpleNamespace(
        name=name, description=description, inputSchema=schema or {"type": "object"}
    )


def text(value: str) -> Any:
    return types.SimpleNamespace(type="text", text=value)


def call_result(
    content: list[Any] | None = None,
    structured: Any = None,
    is_error: bool = False,
) -> Any:
    return types.SimpleNamespace(
        content=content or [], structuredContent=structured, isError=is_error
    )


@pytest.fixture
def fake_mcp(monkeypatch: pytest.MonkeyPatch) -> FakeMCP:
    state = FakeMCP()
    state.list_tools.return_value = types.SimpleNamespace(
        tools=[
            tool("search", "Search papers", {"type": "object", "properties": {"query": {"type": "string"}}}),
            tool("fetch", "Fetch a document"),
        ]
    )
    state.call_tool.return_value = call_result([text("Mock MCP result")])

    class FakeSession:
        def __init__(self, read: object, write: object, client_info: Any = None) -> None:
            self.read = read
            self.write = write
            state.client_infos.append(client_info)
            self.initialize = state.initialize
            self.list_tools = state.list_tools
            self.call_tool = state.call_tool

        async def __aenter__(self) -> FakeSession:
            return self

        async def __aexit__(self, *exc_info: object) -> None:
            return None

    @asynccontextmanager
    async def stdio_client(params: Any):
        state.stdio_params.append(params)
        try:
            yield object(), object()
        finally:
            state.closed.append(params.command)
        if params.command in state.failing_close:
            raise RuntimeError(f"{params.command} did not exit cleanly")

    @asynccontextmanager
    async def streamablehttp_client(url: str, headers: dict[str, str] | None = None):
        state.http_calls.append((url, headers))
        try:
            yield object(), object(), lambda: None
        finally:
            state.closed.append(url)

    monkeypatch.setattr(transport_module, "ClientSession", FakeSession)
    monkeypatch.setattr(transport_module, "stdio_client", stdio_client)
    monkeypatch.setattr(transport_module, "streamablehttp_client", streamablehttp_client)
    return state
