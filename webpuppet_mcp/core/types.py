"""Core types for webpuppet-mcp.

Tool definitions and tool call results as they appear on the wire. All
dataclasses are frozen; to_dict() produces the MCP (camelCase) shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ContentType = Literal["text", "image", "resource"]


@dataclass(frozen=True)
class ContentItem:
    """A single item in a tool call result.

    Attributes:
        type: One of "text", "image" or "resource".
        text: Text value (text items, optional for resources).
        data: Base64-encoded payload (image items).
        mime_type: MIME type (image and resource items).
        uri: Resource URI (resource items).
    """

    type: ContentType
    text: str | None = None
    data: str | None = None
    mime_type: str | None = None
    uri: str | None = None

    @classmethod
    def text_item(cls, text: str) -> ContentItem:
        return cls(type="text", text=text)

    @classmethod
    def image_item(cls, data: str, mime_type: str) -> ContentItem:
        return cls(type="image", data=data, mime_type=mime_type)

    @classmethod
    def resource_item(
        cls, uri: str, mime_type: str | None = None, text: str | None = None
    ) -> ContentItem:
        return cls(type="resource", uri=uri, mime_type=mime_type, text=text)

    def to_dict(self) -> dict[str, Any]:
        if self.type == "text":
            return {"type": "text", "text": self.text or ""}
        if self.type == "image":
            return {"type": "image", "data": self.data or "", "mimeType": self.mime_type}
        result: dict[str, Any] = {"type": "resource", "uri": self.uri}
        if self.mime_type is not None:
            result["mimeType"] = self.mime_type
        if self.text is not None:
            result["text"] = self.text
        return result


@dataclass(frozen=True)
class ToolDefinition:
    """Static description of a tool.

    Attributes:
        name: Unique tool name within a registry.
        description: Human-readable description shown to the peer.
        input_schema: JSON Schema for the tool's arguments.
    """

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass(frozen=True)
class ToolCallResult:
    """Outcome of a tools/call.

    is_error marks a tool-level failure: the call itself succeeded at the
    protocol level, but the requested operation's outcome is negative.
    """

    content: tuple[ContentItem, ...] = ()
    is_error: bool = False

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> ToolCallResult:
        """Create a result with a single text item."""
        return cls(content=(ContentItem.text_item(text),), is_error=is_error)

    def to_text(self) -> str:
        """Join the text items with newlines."""
        return "\n".join(
            item.text or "" for item in self.content if item.type == "text"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [item.to_dict() for item in self.content],
            "isError": self.is_error,
        }
