"""
Demonstrates the bridge against the bundled stdio echo server.

This example shows how to:
1. Describe a stdio MCP server with ServerConfig (or load one from mcp_bridge.config.json).
2. Connect through MCPManager and inspect the discovered tools.
3. Call tools with typed arguments and print the decoded typed results.
4. Tear every connection down when the manager's context exits.

Usage:
    uv run python examples/echo_bridge.py
"""

import asyncio
import sys
from pathlib import Path

from mcp_bridge import (
    MCPBridgeError,
    MCPManager,
    NumberValue,
    ServerConfig,
    StringValue,
    configure_logging,
    value_to_string,
)

SERVER_PATH = Path(__file__).resolve().parent.parent / "tests" / "fixtures" / "echo_server.py"


async def main() -> None:
    configure_logging(json_output=False, level="INFO")

    servers = {
        "echo": ServerConfig(command=sys.executable, args=(str(SERVER_PATH),)),
    }

    async with MCPManager(servers, trace=True) as manager:
        await manager.connect("echo")

        for tool in manager.get_tools("echo"):
            print(f"- {tool.name}: {tool.description or '(no description)'}")

        calls = [
            ("echo", {"text": StringValue("Hello from the bridge!")}),
            ("add", {"a": NumberValue(2), "b": NumberValue(40)}),
            ("get_object", {"key": StringValue("demo")}),
            ("fail", {"message": StringValue("expected failure")}),
        ]
        for operation, args in calls:
            try:
                result = await manager.call_tool("echo", operation, args)
            except MCPBridgeError as exc:
                print(f"{operation} -> error: {exc}")
                continue
            print(f"{operation} -> {type(result).__name__}: {value_to_string(result)}")


if __name__ == "__main__":
    asyncio.run(main())
