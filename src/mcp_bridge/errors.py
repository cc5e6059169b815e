"""Error taxonomy raised by the MCP bridge."""

from __future__ import annotations


class MCPBridgeError(Exception):
    """Base class for every error that originates inside the bridge."""

    def __init__(
        self,
        message: str,
        *,
        server: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.server = server
        self.cause = cause


class ConfigurationError(MCPBridgeError):
    """Missing server entry, unknown transport, or missing required field."""


class ServerConnectionError(MCPBridgeError):
    """Transport-level connect or handshake failure."""

    def __init__(
        self,
        message: str,
        *,
        server: str | None = None,
        target: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, server=server, cause=cause)
        self.target = target


class DiscoveryWarning(MCPBridgeError):
    """Tool listing failed after a successful handshake.

    Recorded on the connection and logged; never raised to callers.
    """


class NotConnectedError(MCPBridgeError):
    """Invocation against a namespace with no live connection."""


class ToolNotFoundError(MCPBridgeError):
    """Invocation names a tool absent from the discovered catalog."""

    def __init__(
        self,
        message: str,
        *,
        server: str | None = None,
        tool: str | None = None,
        available: list[str] | None = None,
    ) -> None:
        super().__init__(message, server=server)
        self.tool = tool
        self.available = list(available or [])


class ToolExecutionError(MCPBridgeError):
    """The provider reported a failure, or the transport call raised."""

    def __init__(
        self,
        message: str,
        *,
        server: str | None = None,
        tool: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, server=server, cause=cause)
        self.tool = tool
