"""Shared pytest fixtures and configuration for pytest."""

import logging
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

from webpuppet_mcp.automation.interfaces import PromptResponse, ScreeningResult
from webpuppet_mcp.automation.providers import DECLARED_CAPABILITIES
from webpuppet_mcp.core.presets import guard_for_policy
from webpuppet_mcp.mcp.bootstrap import ROOT_LOGGER_NAME
from webpuppet_mcp.mcp.server import MCPServer
from webpuppet_mcp.tool.builtin.registration import create_default_registry
from webpuppet_mcp.tool.context import ToolContext

# Smallest valid PNG header; tools never decode it
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for platform-specific tests."""
    config.addinivalue_line("markers", "unix_only: mark test to run only on Unix")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Auto-skip tests based on platform markers."""
    skip_unix = pytest.mark.skip(reason="Unix-only test")

    for item in items:
        if "unix_only" in item.keywords and sys.platform == "win32":
            item.add_marker(skip_unix)


@pytest.fixture
def fake_session():
    """A browser session that is always on example.com."""
    session = MagicMock()
    session.navigate = AsyncMock()
    session.current_url = AsyncMock(return_value="https://example.com/")
    session.get_title = AsyncMock(return_value="Example Domain")
    return session


@pytest.fixture
def fake_automation(fake_session):
    """An automation handle whose provider always answers with a clean reply."""
    automation = MagicMock()
    automation.authenticate = AsyncMock()
    automation.get_session = AsyncMock(return_value=fake_session)
    automation.prompt_screened = AsyncMock(
        return_value=(
            PromptResponse(text="Hello from the provider", provider="claude"),
            ScreeningResult(passed=True, risk_score=0.0),
        )
    )
    automation.screenshot = AsyncMock(return_value=PNG_BYTES)
    automation.provider_capabilities = MagicMock(side_effect=DECLARED_CAPABILITIES.get)
    automation.close = AsyncMock()
    return automation


@pytest.fixture
def automation_factory(fake_automation):
    return AsyncMock(return_value=fake_automation)


@pytest.fixture
def detector():
    detector = MagicMock()
    detector.detect_all = MagicMock(return_value=[])
    detector.detect_first = MagicMock(return_value=None)
    return detector


@pytest.fixture
def make_context(automation_factory, detector):
    """Build a ToolContext for a named policy with the fake collaborators."""

    def _make(policy: str = "secure", **kwargs) -> ToolContext:
        kwargs.setdefault("automation_factory", automation_factory)
        kwargs.setdefault("detector", detector)
        return ToolContext(guard_for_policy(policy), **kwargs)

    return _make


@pytest.fixture
def context(make_context) -> ToolContext:
    return make_context()


@pytest.fixture
def server(context) -> MCPServer:
    return MCPServer(create_default_registry(context))


@pytest.fixture
def restore_logging():
    """Undo configure_logging() so later tests still see records via caplog."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if handler not in saved[0]:
            handler.close()
    for handler in saved[0]:
        logger.addHandler(handler)
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
