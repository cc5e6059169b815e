"""Bridge between typed host values and MCP tool servers."""

__version__ = "0.1.0"

from mcp_bridge.codec import decode, encode, encode_arguments
from mcp_bridge.config import BridgeConfig, ServerConfig, load_config, load_config_for_script
from mcp_bridge.errors import (
    ConfigurationError,
    DiscoveryWarning,
    MCPBridgeError,
    NotConnectedError,
    ServerConnectionError,
    ToolExecutionError,
    ToolNotFoundError,
)
from mcp_bridge.logging import configure_logging, get_logger
from mcp_bridge.manager import Connection, MCPManager
from mcp_bridge.results import interpret_result
from mcp_bridge.transport import HttpConnector, StdioConnector, ToolInfo, TransportConnector
from mcp_bridge.values import (
    BooleanValue,
    ListValue,
    MappingValue,
    NullValue,
    NumberValue,
    StringValue,
    TypedValue,
    value_to_string,
)

__all__ = [
    "BooleanValue",
    "BridgeConfig",
    "ConfigurationError",
    "Connection",
    "DiscoveryWarning",
    "HttpConnector",
    "ListValue",
    "MCPBridgeError",
    "MCPManager",
    "MappingValue",
    "NotConnectedError",
    "NullValue",
    "NumberValue",
    "ServerConfig",
    "ServerConnectionError",
    "StdioConnector",
    "StringValue",
    "ToolExecutionError",
    "ToolInfo",
    "ToolNotFoundError",
    "TransportConnector",
    "TypedValue",
    "configure_logging",
    "decode",
    "encode",
    "encode_arguments",
    "get_logger",
    "interpret_result",
    "load_config",
    "load_config_for_script",
    "value_to_string",
]
