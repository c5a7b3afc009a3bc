"""JSON-RPC 2.0 message types.

An incoming line is classified once, at parse time, into one of the three
message kinds below. Downstream code dispatches on the type and never
re-inspects field presence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

JSONRPC_VERSION = "2.0"

RequestId = Union[str, int]


@dataclass
class Request:
    """JSON-RPC 2.0 request (a response is expected).

    Attributes:
        method: Name of the method to invoke.
        id: Request identifier, echoed in the response.
        params: Optional parameters for the method.
        jsonrpc: Protocol version, "2.0".
    """

    method: str
    id: RequestId
    params: dict[str, Any] | list[Any] | None = None
    jsonrpc: str = JSONRPC_VERSION


@dataclass
class Notification:
    """JSON-RPC 2.0 notification (no id, no response).

    Attributes:
        method: Name of the notification.
        params: Optional parameters.
        jsonrpc: Protocol version, "2.0".
    """

    method: str
    params: dict[str, Any] | list[Any] | None = None
    jsonrpc: str = JSONRPC_VERSION


@dataclass
class Response:
    """JSON-RPC 2.0 response.

    Attributes:
        id: Request identifier from the original request (None if unknown).
        result: Result of the method call (mutually exclusive with error).
        error: Error object if the method failed (mutually exclusive with result).
        jsonrpc: Protocol version, always "2.0".
    """

    id: RequestId | None
    result: Any | None = None
    error: dict[str, Any] | None = None
    jsonrpc: str = JSONRPC_VERSION

    @property
    def is_error(self) -> bool:
        return self.error is not None


Message = Union[Request, Notification, Response]
