from __future__ import annotations

import asyncio
import os
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Any, ClassVar

from mcp import ClientSession, StdioServerParameters  # type: ignore[import-not-found]
from mcp.client.stdio import stdio_client  # type: ignore[import-not-found]
from mcp.client.streamable_http import streamablehttp_client  # type: ignore[import-not-found]
from mcp.types import Implementation  # type: ignore[import-not-found]

from mcp_bridge import __version__
from mcp_bridge.config import ServerConfig
from mcp_bridge.errors import ConfigurationError, DiscoveryWarning, ServerConnectionError

SessionOpener = Callable[[AsyncExitStack], Awaitable[ClientSession]]


@dataclass(slots=True)
class ToolInfo:
    """One tool advertised by a connected server."""

    name: str
    description: str | None = None
    input_schema: dict[str, Any] | None = None


class ServerHandle:
    """Owns one live client session inside a dedicated task.

    The SDK transports are async context managers backed by anyio task
    groups, which must be exited from the task that entered them. Keeping
    them in one task lets ``close`` be awaited from anywhere.
    """

    def __init__(self, name: str, opener: SessionOpener) -> None:
        self.name = name
        self._opener = opener
        self._session: ClientSession | None = None
        self._ready = asyncio.Event()
        self._closing = asyncio.Event()
        self._startup_error: BaseException | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError(f'MCP server "{self.name}" has no open session')
        return self._session

    async def start(self) -> None:
        self._task = asyncio.create_task(self._run(), name=f"mcp-bridge:{self.name}")
        try:
            await self._ready.wait()
        except asyncio.CancelledError:
            self._task.cancel()
            raise
        if self._startup_error is not None:
            await self._task
            raise self._startup_error
        if self._session is None:
            # cancelled during startup; re-raise the cancellation
            await self._task

    async def close(self) -> None:
        self._closing.set()
        if self._task is not None:
            await self._task
        self._session = None

    async def _run(self) -> None:
        try:
            async with AsyncExitStack() as stack:
                self._session = await self._opener(stack)
                self._ready.set()
                await self._closing.wait()
        except Exception as exc:
            if self._ready.is_set():
                raise
            self._startup_error = exc
        finally:
            self._ready.set()


@dataclass(slots=True)
class ConnectedTransport:
    """A started session plus the catalog discovered right after the handshake."""

    handle: ServerHandle
    tools: dict[str, ToolInfo] = field(default_factory=dict)
    discovery_error: DiscoveryWarning | None = None


class TransportConnector(ABC):
    """Connect-and-discover capability for one transport kind."""

    kind: ClassVar[str]

    @abstractmethod
    def validate(self, name: str, config: ServerConfig) -> None:
        """Raise ``ConfigurationError`` if required fields are missing."""

    @abstractmethod
    def describe_target(self, config: ServerConfig) -> str:
        """Human-readable command or URL, used in connection errors."""

    @abstractmethod
    async def open_streams(
        self, stack: AsyncExitStack, config: ServerConfig
    ) -> tuple[Any, Any]:
        """Enter the transport context on ``stack`` and return its streams."""

    async def connect(self, name: str, config: ServerConfig) -> ConnectedTransport:
        self.validate(name, config)
        target = self.describe_target(config)

        async def opener(stack: AsyncExitStack) -> ClientSession:
            read, write = await self.open_streams(stack, config)
            session = await stack.enter_async_context(
                ClientSession(
                    read,
                    write,
                    client_info=Implementation(
                        name=f"mcp-bridge-{name}", version=__version__
                    ),
                )
            )
            await session.initialize()
            return session

        handle = ServerHandle(name, opener)
        try:
            await handle.start()
        except Exception as exc:
            raise ServerConnectionError(
                f'Failed to connect to MCP server "{name}" ({target}): {exc}',
                server=name,
                target=target,
                cause=exc,
            ) from exc

        tools, warning = await discover_tools(name, handle.session)
        return ConnectedTransport(handle=handle, tools=tools, discovery_error=warning)


class StdioConnector(TransportConnector):
    kind = "stdio"

    def validate(self, name: str, config: ServerConfig) -> None:
        if not config.command:
            raise ConfigurationError(
                f'MCP server "{name}" is configured for stdio transport '
                'but has no "command" specified.',
                server=name,
            )

    def describe_target(self, config: ServerConfig) -> str:
        return " ".join([config.command or "", *config.args]).strip()

    def server_parameters(self, config: ServerConfig) -> StdioServerParameters:
        return StdioServerParameters(
            command=config.command,
            args=list(config.args),
            env={**os.environ, **config.env},
            cwd=config.cwd,
        )

    async def open_streams(
        self, stack: AsyncExitStack, config: ServerConfig
    ) -> tuple[Any, Any]:
        read, write = await stack.enter_async_context(
            stdio_client(self.server_parameters(config))
        )
        return read, write


class HttpConnector(TransportConnector):
    kind = "http"

    def validate(self, name: str, config: ServerConfig) -> None:
        if not config.url:
            raise ConfigurationError(
                f'MCP server "{name}" is configured for HTTP transport '
                'but has no "url" specified.',
                server=name,
            )

    def describe_target(self, config: ServerConfig) -> str:
        return config.url or ""

    async def open_streams(
        self, stack: AsyncExitStack, config: ServerConfig
    ) -> tuple[Any, Any]:
        read, write, _get_session_id = await stack.enter_async_context(
            streamablehttp_client(config.url, headers=dict(config.headers) or None)
        )
        return read, write


def default_connectors() -> dict[str, TransportConnector]:
    return {"stdio": StdioConnector(), "http": HttpConnector()}


async def discover_tools(
    name: str, session: ClientSession
) -> tuple[dict[str, ToolInfo], DiscoveryWarning | None]:
    """List the session's tools; a failure yields an empty catalog and a warning."""
    try:
        result = await session.list_tools()
    except Exception as exc:
        return {}, DiscoveryWarning(
            f'Tool discovery failed for MCP server "{name}": {exc}',
            server=name,
            cause=exc,
        )

    tools: dict[str, ToolInfo] = {}
    for tool in getattr(result, "tools", None) or []:
        info = serialize_tool(tool)
        tools[info.name] = info
    return tools, None


def serialize_tool(tool: Any) -> ToolInfo:
    if isinstance(tool, dict):
        name = tool.get("name", "")
        description = tool.get("description")
        schema = tool.get("inputSchema")
    else:
        name = getattr(tool, "name", "")
        description = getattr(tool, "description", None)
        schema = getattr(tool, "inputSchema", None)

    return ToolInfo(
        name=str(name),
        description=description,
        input_schema=schema if isinstance(schema, dict) else None,
    )
