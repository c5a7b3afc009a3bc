"""MCP server: lifecycle, method dispatch and the stdio read loop.

Lifecycle:
    UNINITIALIZED --initialize--> READY --shutdown/exit--> SHUTTING_DOWN

tools/list and tools/call are only served in READY. ping works in any state.
Nothing leaves SHUTTING_DOWN; the read loop stops after the line that
entered it.

Each input line is fully handled and its response flushed before the next
line is read. Reading happens in a worker thread so the event loop stays
responsive while waiting for input.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Callable, Coroutine
from enum import Enum
from typing import Any, TextIO

from webpuppet_mcp.core.errors import (
    INTERNAL_ERROR,
    InternalError,
    MethodNotFoundError,
    ParseError,
    SerializationError,
    TransportError,
    WebpuppetError,
    error_code,
    sanitize_error_message,
)
from webpuppet_mcp.core.rwlock import AsyncRWLock
from webpuppet_mcp.mcp.protocol import (
    ClientCapabilities,
    ClientInfo,
    InitializeParams,
    InitializeResult,
    PROTOCOL_VERSION,
    ToolCallParams,
)
from webpuppet_mcp.rpc.protocol import (
    make_error_response,
    make_success_response,
    parse_message,
    serialize_response,
)
from webpuppet_mcp.rpc.types import Notification, Request, Response
from webpuppet_mcp.tool.registry import ToolRegistry

logger = logging.getLogger(__name__)

# Handler type: takes raw params, returns a JSON-serializable result
Handler = Callable[[Any], Coroutine[Any, Any, Any]]


class ServerState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"


class MCPServer:
    """MCP server exposing a ToolRegistry over JSON-RPC 2.0.

    Example:
        registry = create_default_registry(ToolContext(guard_for_policy("secure")))
        server = MCPServer(registry)
        try:
            await server.run_stdio()
        finally:
            await server.close()
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry
        self._state = ServerState.UNINITIALIZED
        self._client_info: ClientInfo | None = None
        self._client_capabilities: ClientCapabilities | None = None
        self._lock = AsyncRWLock()

        self._handlers: dict[str, Handler] = {
            "initialize": self._handle_initialize,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
            "ping": self._handle_ping,
            "shutdown": self._handle_shutdown,
        }

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def state(self) -> ServerState:
        async with self._lock.read():
            return self._state

    async def client_info(self) -> ClientInfo | None:
        async with self._lock.read():
            return self._client_info

    # === Message handling ===

    async def handle_message(self, line: str) -> Response | None:
        """Handle one raw input line.

        Returns:
            A Response for requests and for lines that fail to parse, None
            for notifications and for responses sent by the peer.
        """
        try:
            message = parse_message(line)
        except WebpuppetError as e:
            logger.warning("Rejected message: %s", e.message)
            return make_error_response(None, error_code(e), e.message)

        if isinstance(message, Request):
            return await self.handle_request(message)

        if isinstance(message, Notification):
            await self.handle_notification(message)
            return None

        # This server never sends requests, so there is nothing to correlate
        logger.debug("Ignoring response from peer (id=%r)", message.id)
        return None

    async def handle_request(self, request: Request) -> Response:
        """Dispatch a request and build exactly one response with its id."""
        try:
            result = await self.dispatch(request.method, request.params)
        except Exception as e:
            code = error_code(e)
            if isinstance(e, WebpuppetError):
                if code == INTERNAL_ERROR:
                    logger.error("Error handling '%s': %s", request.method, e.message)
                else:
                    logger.info("'%s' failed (%d): %s", request.method, code, e.message)
                return make_error_response(request.id, code, e.message, getattr(e, "data", None))

            logger.error(
                "Unexpected error handling '%s': %s",
                request.method,
                e,
                exc_info=True,
            )
            return make_error_response(
                request.id,
                code,
                sanitize_error_message(f"Internal error: {type(e).__name__}: {e}"),
            )
        return make_success_response(request.id, result)

    async def dispatch(self, method: str, params: Any) -> Any:
        """Run the handler for a method.

        Raises:
            MethodNotFoundError: If the method is not in the method table.
            WebpuppetError: Whatever the handler raises.
        """
        handler = self._handlers.get(method)
        if handler is None:
            raise MethodNotFoundError(method)
        return await handler(params)

    async def handle_notification(self, notification: Notification) -> None:
        method = notification.method
        params = notification.params if isinstance(notification.params, dict) else {}

        if method == "notifications/initialized":
            logger.info("Client reports initialization complete")
        elif method == "notifications/cancelled":
            # Cancellation is advisory; the in-flight call runs to completion
            logger.info(
                "Client cancelled request %r: %s",
                params.get("requestId"),
                params.get("reason", "no reason given"),
            )
        elif method == "exit":
            await self._transition(ServerState.SHUTTING_DOWN)
            logger.info("Exit notification received")
        else:
            logger.debug("Ignoring notification: %s", method)

    # === Method handlers ===

    async def _handle_initialize(self, params: Any) -> dict[str, Any]:
        init = InitializeParams.from_dict(params)

        async with self._lock.write():
            if self._state == ServerState.SHUTTING_DOWN:
                raise InternalError("Server is shutting down")
            if self._state == ServerState.READY:
                logger.info("Re-initialize from %s; already ready", init.client_info.name)
            self._client_info = init.client_info
            self._client_capabilities = init.capabilities
            self._state = ServerState.READY

        if init.protocol_version != PROTOCOL_VERSION:
            logger.info(
                "Client requested protocol %s; answering with %s",
                init.protocol_version,
                PROTOCOL_VERSION,
            )
        logger.info(
            "Initialized by %s %s", init.client_info.name, init.client_info.version
        )
        return InitializeResult().to_dict()

    async def _handle_tools_list(self, params: Any) -> dict[str, Any]:
        await self._require_ready()
        return {"tools": [tool.to_dict() for tool in self._registry.list_tools()]}

    async def _handle_tools_call(self, params: Any) -> dict[str, Any]:
        await self._require_ready()
        call = ToolCallParams.from_dict(params)
        result = await self._registry.execute(call.name, call.arguments)
        if result.is_error:
            logger.info("Tool %s returned an error result", call.name)
        return result.to_dict()

    async def _handle_ping(self, params: Any) -> dict[str, Any]:
        return {}

    async def _handle_shutdown(self, params: Any) -> dict[str, Any]:
        await self._transition(ServerState.SHUTTING_DOWN)
        logger.info("Shutdown requested")
        return {}

    async def _require_ready(self) -> None:
        async with self._lock.read():
            state = self._state
        if state == ServerState.UNINITIALIZED:
            raise InternalError("Server not initialized")
        if state == ServerState.SHUTTING_DOWN:
            raise InternalError("Server is shutting down")

    async def _transition(self, state: ServerState) -> None:
        async with self._lock.write():
            self._state = state

    # === Transport ===

    async def run(self, reader: TextIO, writer: TextIO) -> None:
        """Serve newline-delimited JSON-RPC until shutdown or end of input.

        Args:
            reader: Text stream to read requests from.
            writer: Text stream to write responses to.

        Raises:
            TransportError: If reading or writing fails.
        """
        logger.info("Serving %d tools", len(self._registry))
        while True:
            try:
                line = await asyncio.to_thread(self._read_line, reader)
            except UnicodeDecodeError as e:
                logger.warning("Rejected undecodable input line: %s", e)
                error = ParseError(f"Parse error: input is not valid {e.encoding}")
                response = make_error_response(None, error_code(error), error.message)
                self._write(writer, self._encode(response))
                continue
            except (OSError, ValueError) as e:
                raise TransportError(f"Failed to read input: {e}") from e

            if not line:
                logger.info("End of input")
                break
            if not line.strip():
                continue

            logger.debug("<- %s", line.rstrip())
            response = await self.handle_message(line)
            if response is not None:
                self._write(writer, self._encode(response))

            if await self.state() == ServerState.SHUTTING_DOWN:
                logger.info("Shutting down")
                break

    async def run_stdio(self) -> None:
        """Serve on this process's stdin/stdout."""
        await self.run(sys.stdin, sys.stdout)

    async def close(self) -> None:
        """Release the automation handle, if one was built."""
        await self._registry.context.close()

    @staticmethod
    def _read_line(reader: TextIO) -> str:
        """Read one line, decoding it on its own when the stream exposes bytes.

        A text wrapper decodes whole buffered chunks, so one undecodable line
        would take the valid lines after it down with it.
        """
        buffer = getattr(reader, "buffer", None)
        if buffer is None:
            return reader.readline()
        raw = buffer.readline()
        return raw.decode(getattr(reader, "encoding", None) or "utf-8")

    @staticmethod
    def _encode(response: Response) -> str:
        try:
            return serialize_response(response)
        except SerializationError as e:
            logger.error("Could not encode response %r: %s", response.id, e.message)
            return serialize_response(make_error_response(response.id, error_code(e), e.message))

    @staticmethod
    def _write(writer: TextIO, line: str) -> None:
        logger.debug("-> %s", line)
        try:
            writer.write(line + "\n")
            writer.flush()
        except (OSError, ValueError) as e:
            raise TransportError(f"Failed to write output: {e}") from e
