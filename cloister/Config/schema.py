"""
Configuration schema for Cloister.

Defines the static configuration surface: the gate policy shared by every
request and the server settings used to start the listener.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfigType(Enum):
    """Configuration value types."""
    STRING = "string"
    SECRET = "secret"      # Never logged
    INTEGER = "integer"
    LIST = "list"          # Comma-separated values
    ACTIONS = "actions"    # Comma-separated names of enabled actions


class ConfigSection(Enum):
    GATE = "gate"
    SERVER = "server"


@dataclass
class ConfigField:
    """Definition of a configuration field."""
    key: str
    env_var: str
    description: str
    config_type: ConfigType
    section: ConfigSection = ConfigSection.GATE

    @property
    def sensitive(self) -> bool:
        return self.config_type == ConfigType.SECRET


DEFAULT_ALLOWED_PATHS = ("/var/www/public", "/data/shared")
DEFAULT_ALLOWED_ACTIONS = {
    "list_files": True,
    "read_file": True,
    "write_file": True,
    "create_folder": True,
}
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_ALLOWED_FILE_TYPES = (".txt", ".json", ".csv", ".log")


class GateConfig(BaseModel):
    """
    Process-wide gate policy.

    Built once at startup and never mutated; every request handler receives
    the same instance.
    """

    model_config = ConfigDict(frozen=True)

    allowed_paths: Tuple[str, ...] = Field(default=DEFAULT_ALLOWED_PATHS)
    allowed_actions: Mapping[str, bool] = Field(
        default_factory=lambda: dict(DEFAULT_ALLOWED_ACTIONS), validate_default=True
    )
    max_file_size: int = Field(default=DEFAULT_MAX_FILE_SIZE, ge=0)
    allowed_file_types: Tuple[str, ...] = Field(default=DEFAULT_ALLOWED_FILE_TYPES)
    jwt_secret: str = Field(repr=False)
    jwt_algorithm: str = "HS256"
    file_mode: int = 0o644
    dir_mode: int = 0o755

    @field_validator("allowed_paths")
    @classmethod
    def _canonicalize_paths(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        canonical = []
        for path in value:
            if not os.path.isabs(path):
                raise ValueError(f"Allowed path must be absolute: {path}")
            canonical.append(os.path.realpath(path))
        return tuple(canonical)

    @field_validator("allowed_actions")
    @classmethod
    def _freeze_actions(cls, value: Mapping[str, bool]) -> Mapping[str, bool]:
        # Read-only view so the allowlist stays fixed after startup
        return MappingProxyType(dict(value))

    @field_validator("allowed_file_types")
    @classmethod
    def _normalize_extensions(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        normalized = []
        for ext in value:
            ext = ext.strip().lower()
            if not ext.startswith("."):
                raise ValueError(f"Extension must include the leading dot: {ext}")
            normalized.append(ext)
        return tuple(normalized)

    @field_validator("jwt_secret")
    @classmethod
    def _require_secret(cls, value: str) -> str:
        if not value:
            raise ValueError("Signing secret must not be empty")
        return value

    @field_validator("file_mode")
    @classmethod
    def _no_exec_bits(cls, value: int) -> int:
        if value & 0o111:
            raise ValueError("File mode must not include execute bits")
        return value

    def is_action_enabled(self, action: str) -> bool:
        return self.allowed_actions.get(action) is True


class ServerConfig(BaseModel):
    """Listener settings."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 8443
    ssl_certfile: Optional[str] = None
    ssl_keyfile: Optional[str] = None
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


# ==================== Schema Definition ====================

CONFIG_SCHEMA: List[ConfigField] = [
    ConfigField(
        key="jwt_secret",
        env_var="CLOISTER_JWT_SECRET",
        description="Shared secret used to verify bearer tokens",
        config_type=ConfigType.SECRET,
    ),
    ConfigField(
        key="jwt_algorithm",
        env_var="CLOISTER_JWT_ALGORITHM",
        description="The only signing algorithm accepted on tokens",
        config_type=ConfigType.STRING,
    ),
    ConfigField(
        key="allowed_paths",
        env_var="CLOISTER_ALLOWED_PATHS",
        description="Absolute directories operations may touch",
        config_type=ConfigType.LIST,
    ),
    ConfigField(
        key="allowed_actions",
        env_var="CLOISTER_ALLOWED_ACTIONS",
        description="Actions enabled for callers",
        config_type=ConfigType.ACTIONS,
    ),
    ConfigField(
        key="max_file_size",
        env_var="CLOISTER_MAX_FILE_SIZE",
        description="Largest write accepted, in bytes",
        config_type=ConfigType.INTEGER,
    ),
    ConfigField(
        key="allowed_file_types",
        env_var="CLOISTER_ALLOWED_FILE_TYPES",
        description="Extensions (with dot) that may be written",
        config_type=ConfigType.LIST,
    ),
    ConfigField(
        key="host",
        env_var="CLOISTER_HOST",
        description="Interface to listen on",
        config_type=ConfigType.STRING,
        section=ConfigSection.SERVER,
    ),
    ConfigField(
        key="port",
        env_var="CLOISTER_PORT",
        description="Port to listen on",
        config_type=ConfigType.INTEGER,
        section=ConfigSection.SERVER,
    ),
    ConfigField(
        key="ssl_certfile",
        env_var="CLOISTER_SSL_CERTFILE",
        description="TLS certificate chain (PEM)",
        config_type=ConfigType.STRING,
        section=ConfigSection.SERVER,
    ),
    ConfigField(
        key="ssl_keyfile",
        env_var="CLOISTER_SSL_KEYFILE",
        description="TLS private key (PEM)",
        config_type=ConfigType.STRING,
        section=ConfigSection.SERVER,
    ),
    ConfigField(
        key="log_level",
        env_var="CLOISTER_LOG_LEVEL",
        description="Level for every cloister.* logger",
        config_type=ConfigType.STRING,
        section=ConfigSection.SERVER,
    ),
]
