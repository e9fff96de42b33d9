"""
audioscribe.config - YAML config loading and validation.

Handles loading audioscribe.yaml from the working directory (or an explicit
path), filling secrets from the environment, and validating all parameters.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from audioscribe.exceptions import ConfigError

CONFIG_FILENAME = "audioscribe.yaml"
API_KEY_ENV = "GEMINI_API_KEY"

TARGET_FORMATS = ("mp3", "m4a", "aac")


class AudioscribeConfig(BaseModel):
    """Resolved configuration for an audioscribe session."""

    llm_model: str = "gemini/gemini-3-flash-preview"
    api_key: str | None = None
    request_timeout: int = Field(default=600, gt=0)

    proxy_url: str | None = None
    server_host: str = "0.0.0.0"
    server_port: int = Field(default=3000, gt=0, lt=65536)

    default_format: str = "mp3"
    progress_interval: float = Field(default=1.0, gt=0.0)
    ffmpeg_path: str | None = None

    @field_validator("default_format")
    @classmethod
    def validate_default_format(cls, v: str) -> str:
        if v not in TARGET_FORMATS:
            raise ValueError(f"default_format must be one of: {set(TARGET_FORMATS)}")
        return v

    @field_validator("proxy_url")
    @classmethod
    def validate_proxy_url(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("proxy_url must be an http(s) URL")
        return v.rstrip("/")


def find_config_file(start: Path | None = None) -> Path | None:
    """Find audioscribe.yaml in the given directory or any parent."""
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def load_config(path: Path | None = None) -> AudioscribeConfig:
    """Load and validate configuration.

    Args:
        path: Explicit config file; when None, audioscribe.yaml is searched
            upward from the working directory and defaults apply if absent

    Returns:
        Validated AudioscribeConfig

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid
    """
    raw_config: dict[str, Any] = {}

    if path is not None and not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    config_file = path or find_config_file()
    if config_file is not None:
        try:
            with open(config_file, encoding="utf-8") as f:
                raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e
        if not isinstance(raw_config, dict):
            raise ConfigError(f"{config_file} must contain a mapping")

    if not raw_config.get("api_key"):
        raw_config["api_key"] = os.environ.get(API_KEY_ENV)

    try:
        return AudioscribeConfig(**raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def create_default_config() -> dict[str, Any]:
    """Create a default config dict for a new working directory.

    The API key is never written; it is read from GEMINI_API_KEY.
    """
    defaults = AudioscribeConfig().model_dump(exclude={"api_key"})
    return {key: value for key, value in defaults.items() if value is not None}


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
