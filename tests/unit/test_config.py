"""Tests for configuration loading."""

import json
import tempfile
from pathlib import Path

import pytest

from cueschemas.core.config import PipelineConfig, get_config_value, load_config
from cueschemas.core.errors import ConfigError


class TestLoadConfig:
    """Tests for load_config() and get_config_value()."""

    def test_missing_file_returns_empty(self):
        assert load_config("/nonexistent/config.json") == {}

    def test_invalid_json_returns_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.json"
            path.write_text("{not json")

            assert load_config(str(path)) == {}

    def test_nested_lookup(self):
        config = {"tools": {"cue_version": "v0.10.0"}}

        assert get_config_value(["tools", "cue_version"], config=config) == "v0.10.0"

    def test_env_fallback(self, monkeypatch):
        """Test that TOOLS_TIMONI_VERSION is used when the key is absent."""
        monkeypatch.setenv("TOOLS_TIMONI_VERSION", "v0.21.0")

        assert get_config_value(["tools", "timoni_version"], config={}) == "v0.21.0"

    def test_default_when_missing(self, monkeypatch):
        monkeypatch.delenv("REGISTRY_HOST", raising=False)

        assert get_config_value(["registry", "host"], default="github.com", config={}) == "github.com"


class TestPipelineConfig:
    """Tests for PipelineConfig.load()."""

    def test_defaults(self, monkeypatch):
        for var in ("TOOLS_CUE_VERSION", "TOOLS_TIMONI_VERSION", "GITHUB_TOKEN", "REGISTRY_HOST"):
            monkeypatch.delenv(var, raising=False)

        config = PipelineConfig.load("/nonexistent/config.json")

        assert config.cue_version == "latest"
        assert config.timoni_version == "latest"
        assert config.registry_host == "github.com"
        assert config.github_token is None

    def test_file_values_and_overrides(self):
        """Test priority: override > config.json."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.json"
            path.write_text(json.dumps({
                "tools": {"cue_version": "v0.9.0", "timoni_version": "v0.20.0"},
                "registry": {"host": "example.com"},
                "github": {"timeout": 5},
            }))

            config = PipelineConfig.load(str(path), cue_version="v0.10.0", timoni_version=None)

        assert config.cue_version == "v0.10.0"
        assert config.timoni_version == "v0.20.0"
        assert config.registry_host == "example.com"
        assert config.http_timeout == 5.0

    def test_frozen(self):
        config = PipelineConfig()

        with pytest.raises(AttributeError):
            config.cue_version = "x"  # type: ignore

    def test_non_numeric_timeout_from_file(self, tmp_path):
        """Test that a non-numeric github.timeout raises ConfigError."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"github": {"timeout": "soon"}}))

        with pytest.raises(ConfigError) as exc_info:
            PipelineConfig.load(str(path))

        assert exc_info.value.key == "github.timeout"

    def test_non_numeric_timeout_from_env(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TIMEOUT", "thirty")

        with pytest.raises(ConfigError, match="github.timeout"):
            PipelineConfig.load("/nonexistent/config.json")
