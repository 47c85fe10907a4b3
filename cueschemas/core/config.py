"""Centralized configuration loading for cueschemas.

This module provides utilities for loading and accessing configuration from config.json
with support for environment variable fallbacks and default values.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from cueschemas.core.errors import ConfigError


def load_config(config_path: str = "config.json") -> Dict[str, Any]:
    """Load configuration from JSON file.

    Returns empty dict if file doesn't exist or is invalid.

    Args:
        config_path: Path to config.json file (default: "config.json")

    Returns:
        Configuration dictionary, or empty dict if file not found/invalid
    """
    path = Path(config_path)

    if not path.exists():
        return {}

    try:
        with open(path, "r") as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError):
        # Return empty dict on error, allowing code to use defaults
        return {}


def get_config_value(
    keys: List[str], default: Any = None, config: Optional[Dict[str, Any]] = None
) -> Any:
    """Get nested configuration value with fallback to environment variable.

    Supports dot-notation keys like ["tools", "cue_version"] or ["github", "token"].
    Also checks environment variables as fallback (e.g., GITHUB_TOKEN for github.token).

    Args:
        keys: List of keys to traverse (e.g., ["tools", "cue_version"])
        default: Default value if key not found
        config: Optional config dict (uses load_config() if not provided)

    Returns:
        Configuration value, or default if not found
    """
    if config is None:
        config = load_config()

    value = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
            if value is None:
                break
        else:
            value = None
            break

    if value is not None:
        return value

    env_key = "_".join(k.upper() for k in keys)
    env_value = os.environ.get(env_key)
    if env_value is not None:
        return env_value

    return default


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {key}: {value!r} is not a number", key=key) from e


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable tool and endpoint configuration for one pipeline instance.

    Every pipeline component receives the same PipelineConfig at construction,
    so two pipelines with different tool versions can coexist in one process.

    Attributes:
        cue_version: cue release to install and report (default: "latest")
        timoni_version: timoni release; also the version of the vendored
                        timoni.sh schemas (default: "latest")
        cue_bin: cue executable
        timoni_bin: timoni executable
        go_bin: go executable, only used by ``install-tools``
        registry_host: Host part of registry coordinates (default: "github.com")
        github_api_url: Base URL of the GitHub REST API
        github_token: Optional token for GitHub listing and downloads
        http_timeout: Timeout in seconds for GitHub requests
    """
    cue_version: str = "latest"
    timoni_version: str = "latest"
    cue_bin: str = "cue"
    timoni_bin: str = "timoni"
    go_bin: str = "go"
    registry_host: str = "github.com"
    github_api_url: str = "https://api.github.com"
    github_token: Optional[str] = None
    http_timeout: float = 30.0

    @classmethod
    def load(cls, config_path: str = "config.json", **overrides: Any) -> "PipelineConfig":
        """Build a PipelineConfig from config.json, the environment and overrides.

        Priority: explicit override (if not None) > config.json > environment > default.

        Args:
            config_path: Path to config.json file
            **overrides: Field values taking precedence over the file, e.g. from CLI flags

        Returns:
            Populated PipelineConfig

        Raises:
            ConfigError: If a numeric setting is not a number
        """
        config = load_config(config_path)
        defaults = cls()

        def pick(name: str, keys: List[str]) -> Any:
            if overrides.get(name) is not None:
                return overrides[name]
            return get_config_value(keys, default=getattr(defaults, name), config=config)

        return cls(
            cue_version=pick("cue_version", ["tools", "cue_version"]),
            timoni_version=pick("timoni_version", ["tools", "timoni_version"]),
            cue_bin=pick("cue_bin", ["tools", "cue_bin"]),
            timoni_bin=pick("timoni_bin", ["tools", "timoni_bin"]),
            go_bin=pick("go_bin", ["tools", "go_bin"]),
            registry_host=pick("registry_host", ["registry", "host"]),
            github_api_url=pick("github_api_url", ["github", "api_url"]),
            github_token=pick("github_token", ["github", "token"]),
            http_timeout=_as_float(pick("http_timeout", ["github", "timeout"]), "github.timeout"),
        )
