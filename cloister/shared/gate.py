"""
Shared Gate utilities for Cloister.

Provides the patterns every Gate leans on:
- GateLogger: Namespaced logging with Python's logging module
- ConfigLoader: JSON config file loading
- build_health_status: Standardized health payload
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


# =============================================================================
# GateLogger - Unified logging for all Gates
# =============================================================================


class GateLogger:
    """
    Unified logging for all Gates.

    Each gate gets its own logger under the ``cloister`` namespace.
    """

    _loggers: Dict[str, logging.Logger] = {}
    _configured = False

    @classmethod
    def _ensure_configured(cls):
        """Ensure basic logging is configured."""
        if cls._configured:
            return

        root_logger = logging.getLogger("cloister")
        if not root_logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "[%(name)s] %(levelname)s: %(message)s"
            )
            handler.setFormatter(formatter)
            root_logger.addHandler(handler)
            root_logger.setLevel(logging.INFO)

        cls._configured = True

    @classmethod
    def get(cls, gate_name: str) -> logging.Logger:
        """
        Get a logger for a specific gate.

        Args:
            gate_name: Name of the gate (e.g., "TokenGate", "FileSystemGate")

        Returns:
            Logger instance for the gate
        """
        cls._ensure_configured()

        logger_name = f"cloister.{gate_name}"
        if logger_name not in cls._loggers:
            cls._loggers[logger_name] = logging.getLogger(logger_name)

        return cls._loggers[logger_name]

    @classmethod
    def set_level(cls, level: Union[int, str], gate_name: Optional[str] = None):
        """
        Set logging level.

        Args:
            level: Logging level (e.g., logging.DEBUG or "DEBUG")
            gate_name: Specific gate to set level for, or None for all
        """
        if gate_name:
            cls.get(gate_name).setLevel(level)
        else:
            logging.getLogger("cloister").setLevel(level)


# =============================================================================
# Health status
# =============================================================================


def build_health_status(
    gate_name: str,
    initialized: bool,
    dependencies: List[str],
    checks: Dict[str, bool],
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build a standardized health status dict.

    Args:
        gate_name: Name of the gate
        initialized: Whether the gate is initialized
        dependencies: List of dependency names
        checks: Dict of check name -> passed
        details: Additional details

    Returns:
        Standardized health status dict
    """
    all_checks_passed = all(checks.values()) if checks else True

    return {
        "gate": gate_name,
        "healthy": initialized and all_checks_passed,
        "initialized": initialized,
        "dependencies": dependencies,
        "checks": checks,
        "details": details or {},
    }


# =============================================================================
# ConfigLoader - JSON config loading
# =============================================================================


class ConfigLoader:
    """Consistent JSON config file handling across Gates."""

    @staticmethod
    def load_json(path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load a JSON config file into a dict.

        A missing file yields an empty dict. A file that exists but cannot be
        parsed raises, since serving with a half-read config is worse than
        refusing to start.

        Args:
            path: Path to the config file

        Returns:
            Parsed JSON object
        """
        path = Path(path)

        if not path.exists():
            return {}

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")

        return data
