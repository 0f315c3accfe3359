"""Shared utilities used across Cloister gates."""

from cloister.shared.errors import (
    GateError,
    Unauthenticated,
    BadRequest,
    MethodNotAllowed,
    Forbidden,
    PayloadTooLarge,
    Unsupported,
    Internal,
    ConfigError,
)
from cloister.shared.gate import GateLogger, ConfigLoader, build_health_status

__all__ = [
    "GateError",
    "Unauthenticated",
    "BadRequest",
    "MethodNotAllowed",
    "Forbidden",
    "PayloadTooLarge",
    "Unsupported",
    "Internal",
    "ConfigError",
    "GateLogger",
    "ConfigLoader",
    "build_health_status",
]
