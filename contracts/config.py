"""Server configuration (mcpwebkit.yaml) schema as Pydantic models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


# ── Sections ─────────────────────────────────────────────────────────


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ServerSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8765, ge=0, le=65535)
    max_port_retries: int = Field(default=10, ge=0)
    read_chunk_size: int = Field(default=65536, ge=1)
    max_request_bytes: int = Field(default=1_048_576, ge=1)


class LoggingSettings(BaseModel):
    level: LogLevel = LogLevel.INFO
    buffer_capacity: int = Field(default=10_000, ge=1)


# ── Root config ──────────────────────────────────────────────────────


class ServerConfig(BaseModel):
    server: ServerSettings = ServerSettings()
    logging: LoggingSettings = LoggingSettings()
