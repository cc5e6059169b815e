"""Server configuration model and JSON config file loading."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mcp_bridge.errors import ConfigurationError

CONFIG_FILENAMES = ("mcp_bridge.config.json", ".mcpbridgerc.json")
SERVERS_KEY = "mcpServers"
DEFAULT_TRANSPORT = "stdio"


@dataclass(slots=True, frozen=True)
class ServerConfig:
    """Connection parameters for one named MCP server."""

    transport: str = DEFAULT_TRANSPORT
    command: str | None = None
    args: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    cwd: str | None = None
    url: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ServerConfig:
        return cls(
            transport=str(data.get("transport") or DEFAULT_TRANSPORT),
            command=data.get("command"),
            args=tuple(str(arg) for arg in data.get("args") or ()),
            env={str(k): str(v) for k, v in (data.get("env") or {}).items()},
            cwd=data.get("cwd"),
            url=data.get("url"),
            headers={str(k): str(v) for k, v in (data.get("headers") or {}).items()},
        )


@dataclass(slots=True)
class BridgeConfig:
    """Mapping from namespace to server configuration."""

    servers: dict[str, ServerConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BridgeConfig:
        raw_servers = data.get(SERVERS_KEY) or {}
        return cls(
            servers={
                name: ServerConfig.from_dict(entry)
                for name, entry in raw_servers.items()
            }
        )

    def get(self, name: str) -> ServerConfig | None:
        return self.servers.get(name)

    def names(self) -> list[str]:
        return list(self.servers)

    def __contains__(self, name: object) -> bool:
        return name in self.servers

    def __iter__(self) -> Iterator[str]:
        return iter(self.servers)


def load_config(path: str | Path | None = None) -> BridgeConfig:
    """Load configuration from ``path`` or the working directory.

    Without an explicit path the first existing file from ``CONFIG_FILENAMES``
    in the current directory is used. No file at all means an empty config.
    """
    if path is not None:
        return read_config_file(Path(path))

    for filename in CONFIG_FILENAMES:
        candidate = Path.cwd() / filename
        if candidate.exists():
            return read_config_file(candidate)
    return BridgeConfig()


def load_config_for_script(script_path: str | Path) -> BridgeConfig:
    """Prefer a config file next to the script, then fall back to the cwd."""
    script_dir = Path(script_path).resolve().parent
    for filename in CONFIG_FILENAMES:
        candidate = script_dir / filename
        if candidate.exists():
            return read_config_file(candidate)
    return load_config()


def read_config_file(path: Path) -> BridgeConfig:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"Invalid JSON in config file {path}: {exc}", cause=exc
        ) from exc
    except OSError as exc:
        raise ConfigurationError(
            f"Cannot read config file {path}: {exc}", cause=exc
        ) from exc

    validate_config(data, path)
    return BridgeConfig.from_dict(data)


def validate_config(data: Any, path: Path) -> None:
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid config in {path}: must be a JSON object")

    servers = data.get(SERVERS_KEY)
    if servers is None:
        return
    if not isinstance(servers, dict):
        raise ConfigurationError(f'Invalid "{SERVERS_KEY}" in {path}: must be an object')

    for name, server in servers.items():
        if not isinstance(server, dict):
            raise ConfigurationError(
                f'Invalid MCP server config "{name}" in {path}: must be an object',
                server=name,
            )
        transport = server.get("transport") or DEFAULT_TRANSPORT
        if transport == "stdio" and not server.get("command"):
            raise ConfigurationError(
                f'MCP server "{name}" in {path} uses stdio transport '
                'but has no "command" specified',
                server=name,
            )
        if transport == "http" and not server.get("url"):
            raise ConfigurationError(
                f'MCP server "{name}" in {path} uses http transport '
                'but has no "url" specified',
                server=name,
            )
