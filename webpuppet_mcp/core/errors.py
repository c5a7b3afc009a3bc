"""Typed exception hierarchy for webpuppet-mcp.

Every protocol-level failure is a WebpuppetError subclass carrying a stable
JSON-RPC error code. error_code() maps any exception to exactly one code, so
the server can turn dispatch failures and tool failures into error objects
the same way.
"""

from __future__ import annotations

import re
from typing import Any

# JSON-RPC 2.0 reserved codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Application range (-32000 to -32099)
PERMISSION_DENIED = -32000
AUTOMATION_ERROR = -32001
TRANSPORT_ERROR = -32002
TOOL_NOT_FOUND = -32003


class WebpuppetError(Exception):
    """Base class for all webpuppet-mcp errors."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(WebpuppetError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""


class ParseError(WebpuppetError):
    """Raised when an incoming line is not valid JSON."""

    code = PARSE_ERROR


class InvalidRequestError(WebpuppetError):
    """Raised when a JSON value is not a valid JSON-RPC 2.0 message."""

    code = INVALID_REQUEST


class MethodNotFoundError(WebpuppetError):
    """Raised for an RPC method the server does not implement."""

    code = METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Method not found: {method}")


class InvalidParamsError(WebpuppetError):
    """Raised when method or tool parameters are invalid."""

    code = INVALID_PARAMS


class InternalError(WebpuppetError):
    """Raised for unexpected server-side failures."""


class SerializationError(WebpuppetError):
    """Raised when a result cannot be encoded as JSON."""


class PermissionDeniedError(WebpuppetError):
    """Raised when the permission guard rejects an operation."""

    code = PERMISSION_DENIED


class AutomationError(WebpuppetError):
    """Raised when a collaborator (browser engine, detector) fails."""

    code = AUTOMATION_ERROR


class TransportError(WebpuppetError):
    """Raised when reading from or writing to the transport fails."""

    code = TRANSPORT_ERROR


class ToolNotFoundError(WebpuppetError):
    """Raised when tools/call names a tool that is not registered."""

    code = TOOL_NOT_FOUND

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}")


class JsonRpcError(WebpuppetError):
    """An error with an explicit JSON-RPC code and optional structured data."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data


def error_code(error: BaseException) -> int:
    """Return the JSON-RPC error code for any exception.

    Library errors carry their own code; everything else is an internal error.
    """
    if isinstance(error, WebpuppetError):
        return error.code
    return INTERNAL_ERROR


# === Error Sanitization for Peer-Facing Messages ===

_PATH_PATTERN = re.compile(r'(/[^\s:\'"]+)+')
_HOME_PATTERN = re.compile(r'/home/[^/\s]+')
_WINDOWS_USER_PATTERN = re.compile(r'[A-Za-z]:[/\\]Users[/\\][^\\/\s]+', re.IGNORECASE)
_URL_PATTERN = re.compile(r'[a-z][a-z0-9+.-]*://\S+', re.IGNORECASE)


def sanitize_error_message(message: str) -> str:
    """Mask filesystem paths in a message that will be shown to the peer.

    URLs are kept intact since they are usually what the caller asked for.
    """
    if not message:
        return message

    urls: list[str] = []

    def _stash(match: re.Match[str]) -> str:
        urls.append(match.group(0))
        return f"\x00{len(urls) - 1}\x00"

    result = _URL_PATTERN.sub(_stash, message)
    result = _WINDOWS_USER_PATTERN.sub("C:\\\\Users\\\\[user]", result)
    result = _HOME_PATTERN.sub("/home/[user]", result)
    result = _PATH_PATTERN.sub("[path]", result)

    for index, url in enumerate(urls):
        result = result.replace(f"\x00{index}\x00", url)
    return result
