"""JSON-RPC 2.0 message codec for webpuppet-mcp.

Messages travel as newline-delimited JSON over a byte stream (stdin/stdout
in normal use). Each line is classified once into a Request, Notification
or Response.
"""

from webpuppet_mcp.core.errors import (
    AUTOMATION_ERROR,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    PERMISSION_DENIED,
    TOOL_NOT_FOUND,
    TRANSPORT_ERROR,
    InvalidRequestError,
    ParseError,
)
from webpuppet_mcp.rpc.protocol import (
    make_error_response,
    make_success_response,
    parse_message,
    parse_request,
    serialize_request,
    serialize_response,
)
from webpuppet_mcp.rpc.types import (
    JSONRPC_VERSION,
    Message,
    Notification,
    Request,
    RequestId,
    Response,
)

__all__ = [
    # Types
    "Message",
    "Notification",
    "Request",
    "RequestId",
    "Response",
    "JSONRPC_VERSION",
    # Codec
    "parse_message",
    "parse_request",
    "serialize_request",
    "serialize_response",
    "make_error_response",
    "make_success_response",
    # Errors
    "InvalidRequestError",
    "ParseError",
    # Error codes
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "PERMISSION_DENIED",
    "AUTOMATION_ERROR",
    "TRANSPORT_ERROR",
    "TOOL_NOT_FOUND",
]
