"""Tests for the webpuppet-mcp command line entry point."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from webpuppet_mcp import __version__
from webpuppet_mcp.cli import serve as serve_module
from webpuppet_mcp.cli.arg_parser import parse_args
from webpuppet_mcp.cli.output import print_error
from webpuppet_mcp.cli.serve import main, serve
from webpuppet_mcp.config import CONFIG_ENV_VAR
from webpuppet_mcp.core.errors import TransportError


@pytest.fixture(autouse=True)
def no_env_config(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


class TestParseArgs:
    def test_defaults_leave_config_untouched(self):
        args = parse_args([])
        assert args.stdio is True
        assert args.policy is None
        assert args.visible is None
        assert args.verbose is None
        assert args.log_file is None
        assert args.config is None

    def test_all_flags(self):
        args = parse_args(
            ["--stdio", "--policy", "readonly", "--visible", "-v", "--log-file", "x.log"]
        )
        assert args.policy == "readonly"
        assert args.visible is True
        assert args.verbose is True
        assert args.log_file == "x.log"

    def test_invalid_policy(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--policy", "yolo"])
        assert exc_info.value.code == 2
        assert "invalid choice" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestPrintError:
    def test_goes_to_stderr_and_escapes_markup(self, capsys):
        print_error("bad [bold]value[/bold]")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error:" in captured.err
        assert "[bold]value[/bold]" in captured.err


class TestServe:
    @pytest.mark.asyncio
    async def test_clean_run_returns_zero(self):
        server = MagicMock()
        server.run_stdio = AsyncMock()
        server.close = AsyncMock()

        assert await serve(server) == 0
        server.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_transport_error_returns_one(self, capsys):
        server = MagicMock()
        server.run_stdio = AsyncMock(side_effect=TransportError("Failed to write output: EPIPE"))
        server.close = AsyncMock()

        assert await serve(server) == 1
        server.close.assert_awaited_once()
        assert "Failed to write output" in capsys.readouterr().err


class TestMain:
    def test_missing_config_file(self, tmp_path, capsys, restore_logging):
        code = main(["--config", str(tmp_path / "missing.json")])
        assert code == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path, capsys, restore_logging):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"policy": "yolo"}))
        assert main(["--config", str(path)]) == 1
        assert "Config validation failed" in capsys.readouterr().err

    def test_invalid_block_pattern(self, tmp_path, capsys, restore_logging):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"screening": {"block_patterns": ["[unclosed"]}}))
        assert main(["--config", str(path)]) == 1
        err = " ".join(capsys.readouterr().err.split())
        assert "Invalid block pattern" in err

    def test_runs_server(self, monkeypatch, restore_logging):
        fake_serve = AsyncMock(return_value=0)
        monkeypatch.setattr(serve_module, "serve", fake_serve)

        assert main(["--policy", "readonly"]) == 0

        server = fake_serve.await_args.args[0]
        assert server.registry.context.permissions.policy.name == "readonly"

    def test_keyboard_interrupt_is_clean_exit(self, monkeypatch, restore_logging):
        monkeypatch.setattr(serve_module, "serve", AsyncMock(side_effect=KeyboardInterrupt))
        assert main([]) == 0
