"""Tests for configuration schema and loading."""

import json

import pytest

from webpuppet_mcp.config import CONFIG_ENV_VAR, ServerConfig, load_config
from webpuppet_mcp.config.loader import load_json_file
from webpuppet_mcp.core.errors import ConfigError


def write_config(tmp_path, data, name="config.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return path


class TestServerConfig:
    def test_defaults(self):
        config = ServerConfig()
        assert config.policy == "secure"
        assert config.visible is False
        assert config.verbose is False
        assert config.log_file is None
        assert config.screening.enabled is True
        assert config.screening.risk_threshold == 0.7
        assert config.devtools.port == 9222
        assert config.devtools.binary is None

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("READONLY", "readonly"),
            ("read_only", "readonly"),
            ("read-only", "readonly"),
            (" Permissive ", "permissive"),
        ],
    )
    def test_policy_normalized(self, raw, expected):
        assert ServerConfig(policy=raw).policy == expected

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            ServerConfig(policy="yolo")

    def test_extra_fields_rejected(self):
        with pytest.raises(ValueError):
            ServerConfig.model_validate({"polcy": "secure"})

    def test_risk_threshold_bounds(self):
        with pytest.raises(ValueError):
            ServerConfig.model_validate({"screening": {"risk_threshold": 1.5}})

    def test_port_bounds(self):
        with pytest.raises(ValueError):
            ServerConfig.model_validate({"devtools": {"port": 0}})

    def test_invalid_block_pattern_rejected(self):
        with pytest.raises(ValueError, match="Invalid block pattern"):
            ServerConfig.model_validate({"screening": {"block_patterns": ["[unclosed"]}})

    def test_to_screening_config(self):
        config = ServerConfig.model_validate(
            {"screening": {"risk_threshold": 0.4, "block_patterns": ["wire transfer"]}}
        )
        screening = config.screening.to_screening_config()
        assert screening.risk_threshold == 0.4
        assert screening.block_patterns == ("wire transfer",)


class TestLoadJsonFile:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_json_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_json_file(write_config(tmp_path, "{oops"))

    def test_non_object(self, tmp_path):
        with pytest.raises(ConfigError, match="Expected object"):
            load_json_file(write_config(tmp_path, [1, 2]))

    def test_empty_file(self, tmp_path):
        assert load_json_file(write_config(tmp_path, "  \n")) == {}

    def test_utf8_bom(self, tmp_path):
        path = tmp_path / "bom.json"
        path.write_bytes(b"\xef\xbb\xbf" + b'{"visible": true}')
        assert load_json_file(path) == {"visible": True}


class TestLoadConfig:
    def test_defaults_without_sources(self):
        config = load_config(env={})
        assert config == ServerConfig()

    def test_from_file(self, tmp_path):
        path = write_config(tmp_path, {"policy": "readonly", "devtools": {"port": 9333}})
        config = load_config(path, env={})
        assert config.policy == "readonly"
        assert config.devtools.port == 9333

    def test_env_var_path(self, tmp_path):
        path = write_config(tmp_path, {"visible": True})
        config = load_config(env={CONFIG_ENV_VAR: str(path)})
        assert config.visible is True

    def test_explicit_path_beats_env(self, tmp_path):
        explicit = write_config(tmp_path, {"policy": "permissive"}, "a.json")
        from_env = write_config(tmp_path, {"policy": "readonly"}, "b.json")
        config = load_config(explicit, env={CONFIG_ENV_VAR: str(from_env)})
        assert config.policy == "permissive"

    def test_overrides_win(self, tmp_path):
        path = write_config(tmp_path, {"policy": "readonly", "verbose": False})
        config = load_config(path, overrides={"policy": "permissive", "verbose": True}, env={})
        assert config.policy == "permissive"
        assert config.verbose is True

    def test_none_overrides_skipped(self, tmp_path):
        path = write_config(tmp_path, {"policy": "readonly", "visible": True})
        config = load_config(path, overrides={"policy": None, "visible": None}, env={})
        assert config.policy == "readonly"
        assert config.visible is True

    def test_validation_error_is_config_error(self, tmp_path):
        path = write_config(tmp_path, {"policy": "yolo"})
        with pytest.raises(ConfigError, match="Config validation failed"):
            load_config(path, env={})

    def test_invalid_block_pattern_is_config_error(self, tmp_path):
        path = write_config(tmp_path, {"screening": {"block_patterns": ["wire", "[unclosed"]}})
        with pytest.raises(ConfigError, match="Invalid block pattern"):
            load_config(path, env={})

    def test_missing_env_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(env={CONFIG_ENV_VAR: str(tmp_path / "nope.json")})
