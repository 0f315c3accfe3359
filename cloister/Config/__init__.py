"""
Cloister Configuration.

Static configuration loaded once at startup:
- Environment variables (a .env file is read first)
- JSON config file
- Schema defaults

Nothing here is reloaded while the service runs.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv
from pydantic import ValidationError

from cloister.shared.errors import ConfigError
from cloister.shared.gate import ConfigLoader, GateLogger

from cloister.Config.schema import (
    CONFIG_SCHEMA,
    ConfigField,
    ConfigSection,
    ConfigType,
    GateConfig,
    ServerConfig,
)

_log = GateLogger.get("Config")

CONFIG_PATH_ENV = "CLOISTER_CONFIG"

_LIST_SPLIT = re.compile(r"[,%s]" % re.escape(os.pathsep))


def _convert_env(value: str, config_type: ConfigType) -> Any:
    """Convert a raw environment string to the field's type."""
    if config_type == ConfigType.INTEGER:
        return int(value)
    if config_type == ConfigType.LIST:
        return [v.strip() for v in _LIST_SPLIT.split(value) if v.strip()]
    if config_type == ConfigType.ACTIONS:
        # Listing an action enables it; anything unlisted stays denied
        return {v.strip(): True for v in value.split(",") if v.strip()}
    return value


def _collect(
    json_config: Dict[str, Any],
    environ: Dict[str, str],
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Merge sources per field. Priority: env var > json config > default."""
    gate_values: Dict[str, Any] = {}
    server_values: Dict[str, Any] = {}

    for field in CONFIG_SCHEMA:
        target = gate_values if field.section == ConfigSection.GATE else server_values
        raw = environ.get(field.env_var)

        if raw is not None and raw != "":
            try:
                target[field.key] = _convert_env(raw, field.config_type)
            except ValueError as e:
                raise ConfigError(f"{field.env_var}: {e}") from e
            _log.debug(f"{field.key} taken from {field.env_var}")
        elif field.key in json_config:
            target[field.key] = json_config[field.key]

    return gate_values, server_values


def _describe(field: ConfigField, value: Any) -> str:
    return "***" if field.sensitive else repr(value)


def load_config(
    config_path: Optional[str] = None,
    env_file: Optional[str] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Tuple[GateConfig, ServerConfig]:
    """
    Build the gate policy and server settings.

    Args:
        config_path: JSON config file (default: $CLOISTER_CONFIG, if set)
        env_file: .env file to load before reading the environment
        environ: Mapping to read instead of os.environ

    Returns:
        Tuple of (GateConfig, ServerConfig)

    Raises:
        ConfigError: if any source holds an invalid value
    """
    if environ is None:
        load_dotenv(env_file)
        environ = dict(os.environ)

    config_path = config_path or environ.get(CONFIG_PATH_ENV)
    json_config: Dict[str, Any] = {}
    if config_path:
        try:
            json_config = ConfigLoader.load_json(Path(config_path))
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    gate_values, server_values = _collect(json_config, environ)

    if "jwt_secret" not in gate_values:
        raise ConfigError("No signing secret configured (set CLOISTER_JWT_SECRET)")

    try:
        gate_config = GateConfig(**gate_values)
        server_config = ServerConfig(**server_values)
    except ValidationError as e:
        raise ConfigError(str(e)) from e

    GateLogger.set_level(server_config.log_level)

    for field in CONFIG_SCHEMA:
        if field.section == ConfigSection.GATE:
            _log.debug(f"{field.key} = {_describe(field, getattr(gate_config, field.key))}")

    _log.info(
        f"Loaded policy: {len(gate_config.allowed_paths)} allowed paths, "
        f"{sum(1 for v in gate_config.allowed_actions.values() if v)} enabled actions"
    )
    return gate_config, server_config


__all__ = [
    "GateConfig",
    "ServerConfig",
    "load_config",
    "CONFIG_PATH_ENV",
]
