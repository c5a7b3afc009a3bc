"""MCP protocol types for the server side of the handshake and tool calls.

MCP builds on JSON-RPC 2.0. This server advertises only the tools
capability (no resources, prompts or logging).

MCP Spec: https://modelcontextprotocol.io/specification/2024-11-05
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from webpuppet_mcp import __version__
from webpuppet_mcp.core.errors import InvalidParamsError

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "webpuppet-mcp"
SERVER_VERSION = __version__


def _require_object(params: Any, method: str) -> dict[str, Any]:
    if not isinstance(params, dict):
        raise InvalidParamsError(f"{method} requires an object of parameters")
    return params


@dataclass
class ClientInfo:
    """Client identity sent in initialize.

    Attributes:
        name: Client name.
        version: Client version.
    """

    name: str
    version: str

    @classmethod
    def from_dict(cls, data: Any) -> ClientInfo:
        if not isinstance(data, dict):
            raise InvalidParamsError("clientInfo must be an object")
        name = data.get("name")
        version = data.get("version")
        if not isinstance(name, str) or not isinstance(version, str):
            raise InvalidParamsError("clientInfo requires string 'name' and 'version'")
        return cls(name=name, version=version)


@dataclass
class ClientCapabilities:
    """Capabilities the client declared. Kept for logging; no behaviour depends on them."""

    roots: dict[str, Any] | None = None
    sampling: dict[str, Any] | None = None
    experimental: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ClientCapabilities:
        if not isinstance(data, dict):
            raise InvalidParamsError("capabilities must be an object")
        return cls(
            roots=data.get("roots"),
            sampling=data.get("sampling"),
            experimental=data.get("experimental"),
        )


@dataclass
class InitializeParams:
    """Parameters of the initialize request.

    Attributes:
        protocol_version: Protocol version the client speaks.
        capabilities: Client capabilities.
        client_info: Client identity.
    """

    protocol_version: str
    capabilities: ClientCapabilities
    client_info: ClientInfo

    @classmethod
    def from_dict(cls, params: Any) -> InitializeParams:
        """Validate and parse initialize params.

        Raises:
            InvalidParamsError: If a field is missing or malformed.
        """
        data = _require_object(params, "initialize")
        for key in ("protocolVersion", "capabilities", "clientInfo"):
            if key not in data:
                raise InvalidParamsError(f"initialize: missing '{key}'")

        protocol_version = data["protocolVersion"]
        if not isinstance(protocol_version, str):
            raise InvalidParamsError("initialize: 'protocolVersion' must be a string")

        return cls(
            protocol_version=protocol_version,
            capabilities=ClientCapabilities.from_dict(data["capabilities"]),
            client_info=ClientInfo.from_dict(data["clientInfo"]),
        )


@dataclass
class ServerInfo:
    name: str = SERVER_NAME
    version: str = SERVER_VERSION

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "version": self.version}


def server_capabilities() -> dict[str, Any]:
    """Capability descriptor returned by initialize: tools only."""
    return {"tools": {"listChanged": False}}


@dataclass
class InitializeResult:
    protocol_version: str = PROTOCOL_VERSION
    capabilities: dict[str, Any] = field(default_factory=server_capabilities)
    server_info: ServerInfo = field(default_factory=ServerInfo)

    def to_dict(self) -> dict[str, Any]:
        return {
            "protocolVersion": self.protocol_version,
            "capabilities": self.capabilities,
            "serverInfo": self.server_info.to_dict(),
        }


@dataclass
class ToolCallParams:
    """Parameters of tools/call.

    Attributes:
        name: Tool name.
        arguments: Tool arguments (empty when omitted).
    """

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, params: Any) -> ToolCallParams:
        data = _require_object(params, "tools/call")
        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParamsError("tools/call: 'name' must be a non-empty string")

        arguments = data.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidParamsError("tools/call: 'arguments' must be an object")
        return cls(name=name, arguments=arguments)
