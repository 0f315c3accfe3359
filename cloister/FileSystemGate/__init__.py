"""
FileSystemGate - Sandboxed file system access for Cloister.

Provides:
- Action allowlisting
- Path containment with traversal and symlink-escape prevention
- Extension and size policy on writes
- Dispatch of list/read/write/mkdir operations

Usage:
    from cloister.FileSystemGate import OperationDispatcher

    dispatcher = OperationDispatcher(config)
    dispatcher.authorize(operation)
    result = dispatcher.dispatch(operation)
"""

from typing import Any, Callable, Dict, Optional

from cloister.Config.schema import GateConfig
from cloister.shared.errors import BadRequest, Unsupported
from cloister.shared.gate import GateLogger, build_health_status

from .models import Action, Operation, OperationResponse, ResponseStatus
from .security import AuthorizationGate, is_path_allowed, normalize_path
from . import operations as ops

_log = GateLogger.get("FileSystemGate")


def _require(operation: Operation, name: str) -> str:
    value = operation.param(name)
    if value is None:
        raise BadRequest(f"Missing parameter: {name}")
    return value


class OperationDispatcher:
    """
    Routes an authorized operation to its filesystem handler.

    Each handler passes its target through the authorization gate before
    touching the disk, so the dispatcher is safe even when called directly.
    """

    def __init__(self, config: GateConfig, gate: Optional[AuthorizationGate] = None):
        self._config = config
        self._gate = gate or AuthorizationGate(config)
        self._handlers: Dict[str, Callable[[Operation], Any]] = {
            Action.LIST_FILES.value: self._list_files,
            Action.READ_FILE.value: self._read_file,
            Action.WRITE_FILE.value: self._write_file,
            Action.CREATE_FOLDER.value: self._create_folder,
        }

    @property
    def gate(self) -> AuthorizationGate:
        return self._gate

    def authorize(self, operation: Operation, client_id: Optional[str] = None) -> None:
        """Action allowlist check; runs before any parameter is inspected."""
        self._gate.check_action(operation.action, client_id)

    def dispatch(self, operation: Operation) -> Any:
        """
        Run an operation.

        Returns:
            List of paths for list_files, text for read_file, True for
            write_file and create_folder

        Raises:
            GateError subclass describing the first failing check
        """
        handler = self._handlers.get(operation.action)
        if handler is None:
            _log.error(f"Allowlisted action has no handler: {operation.action!r}")
            raise Unsupported()
        return handler(operation)

    # ==================== Handlers ====================

    def _list_files(self, operation: Operation) -> Any:
        # Older clients send the directory under "directory"
        raw = operation.param("path")
        if raw is None:
            raw = operation.param("directory")
        if raw is None:
            raise BadRequest("Missing parameter: path")

        target = self._gate.check_path(raw)
        files = ops.list_files(target, operation.param("filter"))
        _log.info(f"Listed {len(files)} entries in {target}")
        return files

    def _read_file(self, operation: Operation) -> Any:
        target = self._gate.check_path(_require(operation, "path"))
        content = ops.read_file(target)
        _log.info(f"Read {target}")
        return content

    def _write_file(self, operation: Operation) -> Any:
        raw = _require(operation, "path")
        content = _require(operation, "content")
        target = self._gate.check_write(raw, content)
        result = ops.write_file(target, content, self._config.file_mode)
        _log.info(f"Wrote {target}")
        return result

    def _create_folder(self, operation: Operation) -> Any:
        target = self._gate.check_path(_require(operation, "path"))
        result = ops.create_folder(target, self._config.dir_mode)
        _log.info(f"Created folder {target}")
        return result

    # ==================== Health ====================

    def get_health_status(self) -> Dict[str, Any]:
        """Report readiness without exposing the configured paths."""
        enabled = [name for name, on in self._config.allowed_actions.items() if on]
        unhandled = [name for name in enabled if name not in self._handlers]
        return build_health_status(
            gate_name="FileSystemGate",
            initialized=True,
            dependencies=[],
            checks={
                "has_allowed_paths": bool(self._config.allowed_paths),
                "actions_handled": not unhandled,
            },
            details={
                "allowed_path_count": len(self._config.allowed_paths),
                "enabled_actions": sorted(enabled),
            },
        )


__all__ = [
    "OperationDispatcher",
    "AuthorizationGate",
    "Action",
    "Operation",
    "OperationResponse",
    "ResponseStatus",
    "is_path_allowed",
    "normalize_path",
]
