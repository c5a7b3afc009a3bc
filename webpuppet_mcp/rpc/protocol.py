"""JSON-RPC 2.0 protocol parsing and serialization."""

from __future__ import annotations

import json
from typing import Any

from webpuppet_mcp.core.errors import (
    InvalidRequestError,
    ParseError,
    SerializationError,
)
from webpuppet_mcp.rpc.types import (
    JSONRPC_VERSION,
    Message,
    Notification,
    Request,
    RequestId,
    Response,
)


def _validate_id(value: Any) -> RequestId | None:
    """Return the id if it is a string or integer (booleans are not ids)."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise InvalidRequestError(
            f"id must be string, integer, or null, got: {type(value).__name__}"
        )
    return value


def parse_message(line: str) -> Message:
    """Parse a JSON line and classify it as a Request, Notification or Response.

    Classification:
        - an object with "method" and a non-null "id" is a Request
        - an object with "method" and no id (absent or null) is a Notification
        - an object with "result" or "error" and no "method" is a Response

    The "jsonrpc" field is optional on input; when present it must be "2.0".

    Args:
        line: A single line of JSON text.

    Returns:
        The classified message.

    Raises:
        ParseError: If the line is not valid JSON.
        InvalidRequestError: If the JSON is not a valid JSON-RPC 2.0 message.
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise InvalidRequestError("Message must be a JSON object")

    if "jsonrpc" in data and data["jsonrpc"] != JSONRPC_VERSION:
        raise InvalidRequestError(f"jsonrpc must be '2.0', got: {data['jsonrpc']!r}")

    if "method" in data:
        method = data["method"]
        if not isinstance(method, str):
            raise InvalidRequestError(
                f"method must be a string, got: {type(method).__name__}"
            )

        params = data.get("params")
        if params is not None and not isinstance(params, (dict, list)):
            raise InvalidRequestError(
                f"params must be object or array, got: {type(params).__name__}"
            )

        request_id = _validate_id(data.get("id"))
        if request_id is None:
            return Notification(method=method, params=params)
        return Request(method=method, id=request_id, params=params)

    if "result" in data or "error" in data:
        return _parse_response_object(data)

    raise InvalidRequestError("Message is neither a request, a notification, nor a response")


def _parse_response_object(data: dict[str, Any]) -> Response:
    if "result" in data and "error" in data:
        raise InvalidRequestError("Response cannot have both 'result' and 'error'")

    response_id = _validate_id(data.get("id"))

    error = data.get("error")
    if "error" in data:
        if not isinstance(error, dict):
            raise InvalidRequestError(f"error must be an object, got: {type(error).__name__}")
        if "code" not in error or "message" not in error:
            raise InvalidRequestError("error must have 'code' and 'message' fields")

    return Response(id=response_id, result=data.get("result"), error=error)


def parse_request(line: str) -> Request:
    """Parse a line that must be a Request (with an id).

    Raises:
        ParseError: If the JSON is invalid.
        InvalidRequestError: If the line is valid JSON but not a Request.
    """
    message = parse_message(line)
    if not isinstance(message, Request):
        raise InvalidRequestError(f"Expected a request, got a {type(message).__name__.lower()}")
    return message


def serialize_response(response: Response) -> str:
    """Serialize a Response to a JSON line.

    Args:
        response: The Response object to serialize.

    Returns:
        A single line of JSON text (no trailing newline).

    Raises:
        SerializationError: If the result contains values JSON cannot encode.
    """
    data: dict[str, Any] = {
        "jsonrpc": JSONRPC_VERSION,
        "id": response.id,
    }

    if response.error is not None:
        data["error"] = response.error
    else:
        data["result"] = response.result

    return _dumps(data)


def make_error_response(
    request_id: RequestId | None,
    code: int,
    message: str,
    data: Any = None,
) -> Response:
    """Create an error response.

    Args:
        request_id: The id from the original request (None if unknown).
        code: JSON-RPC error code.
        message: Human-readable error message.
        data: Optional additional error data.

    Returns:
        A Response with the error field populated.
    """
    error: dict[str, Any] = {
        "code": code,
        "message": message,
    }
    if data is not None:
        error["data"] = data

    return Response(id=request_id, error=error)


def make_success_response(request_id: RequestId | None, result: Any) -> Response:
    """Create a success response."""
    return Response(id=request_id, result=result)


# === Peer-side functions (used by tests and clients) ===


def serialize_request(request: Request | Notification) -> str:
    """Serialize a Request or Notification to a JSON line (no trailing newline)."""
    data: dict[str, Any] = {
        "jsonrpc": JSONRPC_VERSION,
        "method": request.method,
    }

    if request.params is not None:
        data["params"] = request.params

    if isinstance(request, Request):
        data["id"] = request.id

    return _dumps(data)


def _dumps(data: dict[str, Any]) -> str:
    try:
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Failed to encode message: {e}") from e
