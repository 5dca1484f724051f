"""Configuration management for streamchat."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

_logger = logging.getLogger(__name__)


class ProviderConfig(BaseModel):
    """Connection settings for one client; replaced, never mutated."""

    model_config = ConfigDict(frozen=True)

    url: str
    model: str
    api_key: str = ""
    caller_encoding: str = "utf-8"
    wire_encoding: str = "utf-8"


class ProviderEntry(BaseModel):
    """A provider declared in the config file."""

    url: str
    model: str
    variant: str = "chat"  # "chat" | "reasoner" | "fim"
    description: str = ""


class StreamChatConfig(BaseModel):
    provider: str = "deepseek-v3"
    api_keys: dict[str, str] = Field(default_factory=dict)
    api_key_env: dict[str, str] = Field(
        default_factory=lambda: {
            "deepseek-r1": "DEEPSEEK_API_KEY",
            "deepseek-v3": "DEEPSEEK_API_KEY",
            "deepseek-fim": "DEEPSEEK_API_KEY",
            "gruff": "DEEPSEEK_API_KEY",
            "zhipu": "ZHIPU_API_KEY",
            "qwen": "DASHSCOPE_API_KEY",
            "doubao": "ARK_API_KEY",
        }
    )
    providers: dict[str, ProviderEntry] = Field(default_factory=dict)
    system_prompt: str = ""
    temperature: float | None = None
    settings: dict[str, Any] = Field(default_factory=dict)  # extra request properties
    history_file: str | None = None
    caller_encoding: str = "utf-8"
    wire_encoding: str = "utf-8"
    timeout: float | None = None  # seconds; None waits forever

    def resolve_api_key(self, name: str) -> str:
        """Explicit key first, then the provider's environment variable."""
        if self.api_keys.get(name):
            return self.api_keys[name]
        env_var = self.api_key_env.get(name)
        if env_var:
            return os.environ.get(env_var, "")
        return ""


CONFIG_FILENAME = "streamchat.yaml"


def load_config(
    config_path: str | Path | None = None,
) -> tuple[StreamChatConfig, Path | None]:
    """Load configuration from a YAML file.

    Returns (config, resolved_path).  *resolved_path* is ``None`` when
    no file was found and built-in defaults are used.

    Search order (first match wins):
      1. Explicit ``--config`` path
      2. Current working directory: ``./streamchat.yaml``
      3. User config dir: ``~/.streamchat/streamchat.yaml``
    """
    if config_path is None:
        for d in (Path.cwd(), Path.home() / ".streamchat"):
            p = d / CONFIG_FILENAME
            if p.exists():
                config_path = p
                break

    if config_path is None:
        _logger.info("No config file found, using defaults")
        return StreamChatConfig(), None

    resolved = Path(config_path).expanduser()
    if not resolved.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    _logger.info("Loading config from %s", resolved)
    with open(resolved, encoding="utf-8") as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}
    return StreamChatConfig.model_validate(raw), resolved.resolve()
