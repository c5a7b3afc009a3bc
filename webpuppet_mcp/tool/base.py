"""Base tool interface for webpuppet-mcp.

This module defines the Tool protocol every tool implements and the
BaseTool convenience class:

- Tool: definition() plus async execute(arguments, context)
- BaseTool: stores name/description/input_schema and validates arguments
  against the schema with jsonschema before the tool sees them

Tools are the unit of capability the server exposes through tools/list and
tools/call. Authorization is the tool's own business: each execute() asks
the permission gate in the context before touching the browser.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import jsonschema

from webpuppet_mcp.core.errors import InvalidParamsError
from webpuppet_mcp.core.types import ToolCallResult, ToolDefinition

if TYPE_CHECKING:
    from webpuppet_mcp.tool.context import ToolContext

# Schema for tools that take no arguments
EMPTY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {},
    "required": [],
}


@runtime_checkable
class Tool(Protocol):
    """Protocol for all tools.

    Example:
        >>> class EchoTool:
        ...     def definition(self) -> ToolDefinition:
        ...         return ToolDefinition(
        ...             name="echo",
        ...             description="Echo back the input text",
        ...             input_schema={
        ...                 "type": "object",
        ...                 "properties": {"text": {"type": "string"}},
        ...                 "required": ["text"],
        ...             },
        ...         )
        ...
        ...     async def execute(self, arguments, context) -> ToolCallResult:
        ...         return ToolCallResult.text(arguments["text"])
    """

    def definition(self) -> ToolDefinition:
        """Static description of the tool. Must not have side effects."""
        ...

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        """Run the tool.

        Args:
            arguments: Arguments from tools/call (a JSON object).
            context: Shared execution context.

        Returns:
            ToolCallResult; is_error=True for a negative outcome the peer
            should see as content rather than a protocol error.

        Raises:
            InvalidParamsError: Arguments do not match the schema.
            PermissionDeniedError: The permission gate rejected the operation.
            AutomationError: A collaborator failed.
        """
        ...


class BaseTool(ABC):
    """Convenience base class for implementing tools.

    Subclasses pass their metadata to __init__ and implement run(), which
    receives arguments already validated against input_schema.

    Example:
        >>> class EchoTool(BaseTool):
        ...     def __init__(self):
        ...         super().__init__(
        ...             name="echo",
        ...             description="Echo back the input text",
        ...             input_schema={
        ...                 "type": "object",
        ...                 "properties": {"text": {"type": "string"}},
        ...                 "required": ["text"],
        ...             },
        ...         )
        ...
        ...     async def run(self, arguments, context) -> ToolCallResult:
        ...         return ToolCallResult.text(arguments["text"])
    """

    def __init__(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any] | None = None,
    ) -> None:
        self._name = name
        self._description = description
        self._input_schema = input_schema if input_schema is not None else dict(EMPTY_SCHEMA)

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def input_schema(self) -> dict[str, Any]:
        return self._input_schema

    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self._name,
            description=self._description,
            input_schema=self._input_schema,
        )

    def validate_arguments(self, arguments: Any) -> dict[str, Any]:
        """Validate arguments against input_schema.

        Unknown properties are dropped.

        Raises:
            InvalidParamsError: If validation fails.
        """
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidParamsError(
                f"{self._name}: arguments must be an object, got {type(arguments).__name__}"
            )

        try:
            jsonschema.validate(arguments, self._input_schema)
        except jsonschema.ValidationError as e:
            raise InvalidParamsError(format_validation_error(e, self._name)) from e

        known = set(self._input_schema.get("properties", {}).keys())
        return {k: v for k, v in arguments.items() if k in known}

    async def execute(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        validated = self.validate_arguments(arguments)
        return await self.run(validated, context)

    @abstractmethod
    async def run(self, arguments: dict[str, Any], context: ToolContext) -> ToolCallResult:
        """Run the tool with validated arguments."""
        ...


def format_validation_error(error: Any, tool_name: str) -> str:
    """Format a jsonschema ValidationError into a user-friendly message.

    Args:
        error: The jsonschema validation error.
        tool_name: Name of the tool for context.

    Returns:
        Human-readable error message.
    """
    path = ".".join(str(p) for p in error.absolute_path) if error.absolute_path else ""
    validator = error.validator

    if validator == "required":
        # "'url' is a required property"
        return f"{tool_name}: {error.message}"

    if validator == "type":
        if path:
            return f"{tool_name}: Parameter '{path}' has wrong type - {error.message}"
        return f"{tool_name}: {error.message}"

    if validator == "enum":
        if path:
            return f"{tool_name}: Parameter '{path}' must be one of {error.validator_value}"
        return f"{tool_name}: Value must be one of {error.validator_value}"

    if path:
        return f"{tool_name}: Parameter '{path}' - {error.message}"
    return f"{tool_name}: {error.message}"
