"""Lifecycle and invocation routing for named MCP server connections."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from mcp_bridge.codec import encode_arguments
from mcp_bridge.config import BridgeConfig, ServerConfig
from mcp_bridge.errors import (
    ConfigurationError,
    DiscoveryWarning,
    MCPBridgeError,
    NotConnectedError,
    ServerConnectionError,
    ToolExecutionError,
    ToolNotFoundError,
)
from mcp_bridge.logging import get_logger
from mcp_bridge.results import block_field, error_text, interpret_result
from mcp_bridge.transport import (
    ServerHandle,
    ToolInfo,
    TransportConnector,
    default_connectors,
    discover_tools,
)
from mcp_bridge.values import TypedValue

logger = get_logger(__name__)


@dataclass(slots=True)
class Connection:
    """A live server connection and the catalog discovered for it."""

    name: str
    config: ServerConfig
    handle: ServerHandle
    tools: dict[str, ToolInfo] = field(default_factory=dict)
    discovery_error: DiscoveryWarning | None = None


class MCPManager:
    """Owns the namespace -> connection map for one bridge instance.

    Connections are created by ``connect`` from the configuration handed in
    at construction and live until ``disconnect`` or ``disconnect_all``.

    Every lifecycle event is recorded in ``trace_log``. With ``trace=True``
    the events are logged at info level, otherwise at debug. structlog's
    default configuration prints debug too, so a host that wants a quiet
    bridge should call ``configure_logging`` with ``level="INFO"`` or higher.
    """

    def __init__(
        self,
        config: BridgeConfig | Mapping[str, ServerConfig] | None = None,
        *,
        trace: bool = False,
        connectors: Mapping[str, TransportConnector] | None = None,
    ) -> None:
        if config is None:
            config = BridgeConfig()
        elif not isinstance(config, BridgeConfig):
            config = BridgeConfig(servers=dict(config))
        self._config = config
        self._connectors = dict(connectors) if connectors is not None else default_connectors()
        self._servers: dict[str, Connection] = {}
        self._connect_locks: dict[str, asyncio.Lock] = {}
        self.trace_enabled = trace
        self._trace_log: list[dict[str, Any]] = []

    async def __aenter__(self) -> MCPManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.disconnect_all()

    @property
    def trace_log(self) -> list[dict[str, Any]]:
        return list(self._trace_log)

    async def connect(self, name: str) -> None:
        if name in self._servers:
            self._trace("mcp_already_connected", name)
            return

        config = self._config.get(name)
        if config is None:
            raise ConfigurationError(
                f'No MCP server configuration found for "{name}". '
                'Add it to the config file under "mcpServers".',
                server=name,
            )

        connector = self._connectors.get(config.transport)
        if connector is None:
            raise ConfigurationError(
                f'Unknown transport type "{config.transport}" '
                f'for MCP server "{name}".',
                server=name,
            )

        lock = self._connect_locks.setdefault(name, asyncio.Lock())
        async with lock:
            # A concurrent connect for the same name may have finished first.
            if name in self._servers:
                self._trace("mcp_already_connected", name)
                return

            self._trace(
                "mcp_connect_start",
                name,
                transport=config.transport,
                target=connector.describe_target(config),
            )
            try:
                connected = await connector.connect(name, config)
            except ServerConnectionError as exc:
                self._trace(
                    "mcp_connect_failed", name, level="error", exception=str(exc.cause)
                )
                raise

            self._servers[name] = Connection(
                name=name,
                config=config,
                handle=connected.handle,
                tools=connected.tools,
                discovery_error=connected.discovery_error,
            )
            self._trace("mcp_connect", name, transport=config.transport)
            self._trace_discovery(name, connected.tools, connected.discovery_error)

    def is_configured(self, name: str) -> bool:
        return name in self._config

    def has_server(self, name: str) -> bool:
        return name in self._servers

    def get_tools(self, name: str) -> list[ToolInfo]:
        connection = self._servers.get(name)
        if connection is None:
            return []
        return list(connection.tools.values())

    def get_connected_servers(self) -> list[str]:
        return list(self._servers)

    def discovery_failed(self, name: str) -> bool:
        """True when the live connection's catalog is empty because listing failed."""
        connection = self._servers.get(name)
        return connection is not None and connection.discovery_error is not None

    async def refresh_tools(self, name: str) -> list[ToolInfo]:
        connection = self._require_connection(name)
        tools, warning = await discover_tools(name, connection.handle.session)
        connection.tools = tools
        connection.discovery_error = warning
        self._trace_discovery(name, tools, warning)
        return list(tools.values())

    async def call_tool(
        self, name: str, operation: str, args: Mapping[str, TypedValue]
    ) -> TypedValue:
        connection = self._require_connection(name)

        if operation not in connection.tools:
            available = list(connection.tools)
            raise ToolNotFoundError(
                f'Tool "{operation}" not found on MCP server "{name}". '
                f"Available tools: {', '.join(available) or '(none)'}",
                server=name,
                tool=operation,
                available=available,
            )

        arguments = encode_arguments(args)
        self._trace("mcp_call", name, tool=operation, arguments=arguments)

        try:
            result = await connection.handle.session.call_tool(
                operation, arguments=arguments
            )
        except MCPBridgeError:
            raise
        except Exception as exc:
            raise ToolExecutionError(
                f"Failed to call {name}:{operation}: {exc}",
                server=name,
                tool=operation,
                cause=exc,
            ) from exc

        content = block_field(result, "content")
        if block_field(result, "isError"):
            raise ToolExecutionError(
                f"MCP tool error from {name}:{operation}: {error_text(content)}",
                server=name,
                tool=operation,
            )

        try:
            return interpret_result(content, block_field(result, "structuredContent"))
        except RecursionError as exc:
            raise ToolExecutionError(
                f"Failed to decode result of {name}:{operation}: nesting too deep",
                server=name,
                tool=operation,
                cause=exc,
            ) from exc

    async def disconnect(self, name: str) -> None:
        connection = self._servers.get(name)
        if connection is None:
            return

        try:
            await connection.handle.close()
        except Exception as exc:
            self._trace("mcp_disconnect_failed", name, level="warning", exception=str(exc))
        finally:
            self._servers.pop(name, None)
        self._trace("mcp_disconnect", name)

    async def disconnect_all(self) -> None:
        names = list(self._servers)
        results = await asyncio.gather(
            *(self.disconnect(name) for name in names), return_exceptions=True
        )
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                self._trace(
                    "mcp_disconnect_failed", name, level="warning", exception=str(result)
                )
            self._servers.pop(name, None)

    def _require_connection(self, name: str) -> Connection:
        connection = self._servers.get(name)
        if connection is None:
            raise NotConnectedError(
                f'MCP server "{name}" is not connected. '
                f'Call connect("{name}") first.',
                server=name,
            )
        return connection

    def _trace_discovery(
        self,
        name: str,
        tools: dict[str, ToolInfo],
        warning: DiscoveryWarning | None,
    ) -> None:
        if warning is not None:
            self._trace(
                "mcp_discovery_failed",
                name,
                level="warning",
                exception=str(warning.cause),
            )
            return
        self._trace("mcp_discovery", name, tool_count=len(tools), tools=list(tools))

    def _trace(self, event: str, server: str, *, level: str = "info", **fields: Any) -> None:
        self._trace_log.append({"event": event, "server": server, **fields})
        if level == "info" and not self.trace_enabled:
            level = "debug"
        getattr(logger, level)(event, server=server, **fields)
