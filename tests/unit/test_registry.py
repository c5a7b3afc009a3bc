"""Unit tests for the tool system: BaseTool, ToolRegistry and registration."""

import logging
from unittest.mock import MagicMock

import pytest

from webpuppet_mcp.core.errors import InvalidParamsError, ToolNotFoundError
from webpuppet_mcp.core.types import ToolCallResult
from webpuppet_mcp.tool import BaseTool, Tool, ToolRegistry
from webpuppet_mcp.tool.builtin import create_default_registry

BUILTIN_TOOL_NAMES = [
    "webpuppet_prompt",
    "webpuppet_list_providers",
    "webpuppet_provider_capabilities",
    "webpuppet_detect_browsers",
    "webpuppet_screenshot",
    "webpuppet_check_permission",
    "webpuppet_intervention_status",
    "webpuppet_intervention_complete",
    "webpuppet_pause",
    "webpuppet_resume",
    "webpuppet_navigate",
    "webpuppet_browser_status",
]


class EchoTool(BaseTool):
    def __init__(self, description: str = "Echo back the input text") -> None:
        super().__init__(
            name="echo",
            description=description,
            input_schema={
                "type": "object",
                "properties": {
                    "text": {"type": "string"},
                    "mode": {"type": "string", "enum": ["plain", "loud"]},
                },
                "required": ["text"],
            },
        )
        self.seen_context = None
        self.seen_arguments = None

    async def run(self, arguments, context) -> ToolCallResult:
        self.seen_context = context
        self.seen_arguments = arguments
        text = arguments["text"]
        if arguments.get("mode") == "loud":
            text = text.upper()
        return ToolCallResult.text(text)


class NoArgsTool(BaseTool):
    def __init__(self, name: str = "noop") -> None:
        super().__init__(name=name, description="Does nothing")

    async def run(self, arguments, context) -> ToolCallResult:
        return ToolCallResult.text("ok")


class TestBaseTool:
    def test_satisfies_tool_protocol(self):
        assert isinstance(EchoTool(), Tool)

    def test_definition(self):
        definition = EchoTool().definition()
        assert definition.name == "echo"
        assert definition.to_dict()["inputSchema"]["required"] == ["text"]

    def test_default_schema_is_empty_object(self):
        assert NoArgsTool().input_schema == {"type": "object", "properties": {}, "required": []}

    def test_missing_required(self):
        with pytest.raises(InvalidParamsError) as exc_info:
            EchoTool().validate_arguments({})
        assert exc_info.value.message == "echo: 'text' is a required property"

    def test_wrong_type(self):
        with pytest.raises(InvalidParamsError, match="Parameter 'text' has wrong type"):
            EchoTool().validate_arguments({"text": 5})

    def test_enum_violation(self):
        with pytest.raises(InvalidParamsError, match="Parameter 'mode' must be one of"):
            EchoTool().validate_arguments({"text": "hi", "mode": "whisper"})

    def test_non_object_arguments(self):
        with pytest.raises(InvalidParamsError, match="arguments must be an object"):
            EchoTool().validate_arguments(["hi"])

    def test_none_arguments_become_empty(self):
        assert NoArgsTool().validate_arguments(None) == {}

    def test_unknown_arguments_dropped(self):
        validated = EchoTool().validate_arguments({"text": "hi", "extra": 1})
        assert validated == {"text": "hi"}

    @pytest.mark.asyncio
    async def test_execute_validates_then_runs(self, context):
        tool = EchoTool()
        result = await tool.execute({"text": "hi", "mode": "loud"}, context)
        assert result.to_text() == "HI"
        assert tool.seen_context is context


class TestToolRegistry:
    def test_register_and_get(self, context):
        registry = ToolRegistry(context)
        tool = EchoTool()
        registry.register(tool)

        assert registry.get("echo") is tool
        assert "echo" in registry
        assert len(registry) == 1

    def test_get_missing_returns_none(self, context):
        assert ToolRegistry(context).get("missing") is None

    def test_list_tools_in_registration_order(self, context):
        registry = ToolRegistry(context)
        registry.register(NoArgsTool("b"))
        registry.register(NoArgsTool("a"))
        registry.register(NoArgsTool("c"))

        assert [d.name for d in registry.list_tools()] == ["b", "a", "c"]
        assert registry.names == ["b", "a", "c"]

    def test_duplicate_replaces_in_place(self, context, caplog):
        registry = ToolRegistry(context)
        registry.register(EchoTool("first"))
        registry.register(NoArgsTool())
        with caplog.at_level(logging.WARNING, logger="webpuppet_mcp.tool.registry"):
            registry.register(EchoTool("second"))

        definitions = registry.list_tools()
        assert [d.name for d in definitions] == ["echo", "noop"]
        assert definitions[0].description == "second"
        assert "already registered" in caplog.text

    @pytest.mark.asyncio
    async def test_execute_passes_shared_context(self, context):
        registry = ToolRegistry(context)
        tool = EchoTool()
        registry.register(tool)

        result = await registry.execute("echo", {"text": "hello"})
        assert result.to_text() == "hello"
        assert not result.is_error
        assert tool.seen_context is context

    @pytest.mark.asyncio
    async def test_execute_unknown_tool(self, context):
        with pytest.raises(ToolNotFoundError) as exc_info:
            await ToolRegistry(context).execute("nope", {})
        assert exc_info.value.code == -32003

    @pytest.mark.asyncio
    async def test_execute_with_none_arguments(self, context):
        registry = ToolRegistry(context)
        registry.register(NoArgsTool())
        result = await registry.execute("noop", None)
        assert result.to_text() == "ok"

    @pytest.mark.asyncio
    async def test_registry_does_not_check_permissions(self, make_context):
        """The registry dispatches; authorization is left to each tool."""
        permissions = MagicMock()
        context = make_context()
        context.permissions = permissions
        registry = ToolRegistry(context)
        registry.register(NoArgsTool())

        await registry.execute("noop", {})
        assert not permissions.method_calls


class TestDefaultRegistry:
    def test_registers_all_builtin_tools(self, context):
        registry = create_default_registry(context)
        assert registry.names == BUILTIN_TOOL_NAMES

    def test_definitions_have_object_schemas(self, context):
        for definition in create_default_registry(context).list_tools():
            assert definition.description
            assert definition.input_schema["type"] == "object"

    def test_listing_is_stable(self, context):
        registry = create_default_registry(context)
        assert registry.list_tools() == registry.list_tools()
