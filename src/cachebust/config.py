"""Configuration models for cachebust."""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cachebust.errors import ConfigError

# Config file looked up in the current directory when none is given
DEFAULT_CONFIG_FILE = "buildconfig.json"

DEFAULT_EXTENSIONS = [".js", ".mjs"]

# camelCase keys accepted from config files written for the node tool
_KEY_ALIASES = {
    "cleanOutput": "clean_output",
}


class BuildConfig(BaseSettings):
    """Build configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CACHEBUST_",
        extra="ignore",
    )

    sourcedir: Path = Field(
        description="Root directory of the source tree",
    )
    outputdir: Path | None = Field(
        default=None,
        description="Output directory (rewrite in place when unset)",
    )
    excludes: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files that are copied but never rewritten",
    )
    clean_output: bool = Field(
        default=False,
        description="Remove the output directory before building",
    )
    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="File extensions treated as ES modules",
    )

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]

    @classmethod
    def load(cls, config_path: Path | None = None, **overrides: Any) -> BuildConfig:
        """Load configuration from file, environment and explicit overrides.

        Resolution order (highest to lowest priority):
        1. Explicit overrides (CLI options), ignoring None values
        2. Provided config file path, or buildconfig.json in the current directory
        3. Environment variables (CACHEBUST_*)
        4. Built-in defaults

        Relative directories in a config file are resolved against the
        directory containing that file.

        Raises:
            ConfigError: If an explicit config file is missing, unreadable or invalid.
        """
        config_data: dict[str, Any] = {}

        if config_path is not None:
            if not config_path.exists():
                raise ConfigError(
                    f"Config file not found: {config_path}", config_path=str(config_path)
                )
            config_data = _read_config_file(config_path)
        else:
            default_path = Path.cwd() / DEFAULT_CONFIG_FILE
            if default_path.exists():
                config_path = default_path
                config_data = _read_config_file(default_path)

        if config_path is not None:
            base_dir = config_path.resolve().parent
            for key in ("sourcedir", "outputdir"):
                value = config_data.get(key)
                if value:
                    config_data[key] = base_dir / value

        config_data.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigError(
                f"Invalid configuration: {e}",
                config_path=str(config_path) if config_path else None,
            ) from e


def _read_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON or TOML config file into a plain dict."""
    try:
        if path.suffix.lower() == ".toml":
            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}", config_path=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain an object", config_path=str(path))

    return {_KEY_ALIASES.get(key, key): value for key, value in data.items()}


def get_default_config_json() -> str:
    """Generate default buildconfig.json content."""
    return (
        json.dumps(
            {
                "sourcedir": "./src",
                "outputdir": "./dist",
                "excludes": ["**/vendor/**"],
                "cleanOutput": False,
                "extensions": DEFAULT_EXTENSIONS,
            },
            indent=4,
        )
        + "\n"
    )
