"""Config loader — parse and validate mcpwebkit.yaml."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from contracts.config import ServerConfig

CONFIG_ENV_VAR = "MCPWEBKIT_CONFIG"


def load_config(path: str) -> ServerConfig:
    """Load a mcpwebkit.yaml file and return a validated ServerConfig."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    raw = p.read_text(encoding="utf-8")
    data = yaml.safe_load(raw)
    if data is None:
        return ServerConfig()
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a YAML mapping, got {type(data).__name__}")

    return ServerConfig(**data)


def resolve_config(path: str | None = None) -> ServerConfig:
    """Load *path*, else ``MCPWEBKIT_CONFIG``, else built-in defaults."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return ServerConfig()
    return load_config(path)
