"""
FileSystemGate security module.

Provides the authorization gate: action allowlisting, path containment,
extension checking and write size limits. None of these checks open, create
or modify anything on disk.
"""

import os
from typing import Optional

from cloister.Config.schema import GateConfig
from cloister.shared.errors import BadRequest, Forbidden, PayloadTooLarge
from cloister.shared.gate import GateLogger

_log = GateLogger.get("FileSystemGate")


def normalize_path(path: str) -> str:
    """
    Canonicalize a path to prevent traversal attacks.

    Resolves ``.`` and ``..`` segments, relative segments and symlinks. The
    target does not need to exist, so paths about to be created can still be
    checked.

    Args:
        path: Raw path string

    Returns:
        Canonical absolute path

    Raises:
        Forbidden: if the path is empty or cannot be represented
    """
    if not path or "\x00" in path:
        raise Forbidden("Access denied to path")
    return os.path.realpath(os.path.abspath(path))


def is_within(target: str, root: str) -> bool:
    """
    Check that a canonical target equals root or lies beneath it.

    The comparison is bounded at a separator, so ``/data/shared-evil`` is not
    inside ``/data/shared``.
    """
    if target == root:
        return True
    boundary = root.rstrip(os.sep) + os.sep
    return target.startswith(boundary)


def is_path_allowed(path: str, config: GateConfig) -> bool:
    """
    Check whether a path lies inside one of the allowed directories.

    Args:
        path: Raw path string
        config: Gate policy

    Returns:
        True if the canonical path is contained by an allowed directory
    """
    try:
        target = normalize_path(path)
    except Forbidden:
        return False
    return any(is_within(target, root) for root in config.allowed_paths)


def extension_of(path: str) -> str:
    """Lowercase extension including the dot, or '' if there is none."""
    _, ext = os.path.splitext(path)
    return ext.lower()


class AuthorizationGate:
    """
    Policy checks run between an authenticated request and the filesystem.

    The action check runs before any parameter is looked at; the path, type
    and size checks run per concrete target inside the dispatcher.
    """

    def __init__(self, config: GateConfig):
        self._config = config

    @property
    def config(self) -> GateConfig:
        return self._config

    def check_action(self, action: str, client_id: Optional[str] = None) -> None:
        """
        Reject actions that are not mapped to True in the allowlist.

        Raises:
            Forbidden: if the action is unknown or disabled
        """
        if not self._config.is_action_enabled(action):
            _log.warning(f"Denied action {action!r} (client={client_id or '-'})")
            raise Forbidden("Operation not allowed")

    def check_path(self, path: str) -> str:
        """
        Resolve a path and require it to be inside the sandbox.

        Args:
            path: Raw path from the request

        Returns:
            Canonical path to operate on

        Raises:
            Forbidden: if the path escapes every allowed directory
        """
        target = normalize_path(path)
        for root in self._config.allowed_paths:
            if is_within(target, root):
                return target

        _log.warning(f"Denied path outside sandbox: {path!r}")
        raise Forbidden("Access denied to path")

    def check_file_type(self, path: str) -> None:
        """
        Require the file's extension to be in the allowed set.

        Raises:
            Forbidden: if the extension is missing or not allowed
        """
        ext = extension_of(path)
        if ext not in self._config.allowed_file_types:
            _log.warning(f"Denied file type {ext or '(none)'!r}")
            raise Forbidden("File type not allowed")

    def check_content_size(self, content: str) -> int:
        """
        Require content to fit within the write limit.

        Args:
            content: Text about to be written

        Returns:
            Encoded size in bytes

        Raises:
            BadRequest: if the text cannot be encoded as UTF-8
            PayloadTooLarge: if the encoded size exceeds max_file_size
        """
        try:
            size = len(content.encode("utf-8"))
        except UnicodeEncodeError:
            raise BadRequest("Content is not valid UTF-8 text")

        if size > self._config.max_file_size:
            _log.warning(f"Denied write of {size} bytes (limit {self._config.max_file_size})")
            raise PayloadTooLarge(
                f"Content size ({size} bytes) exceeds limit ({self._config.max_file_size} bytes)"
            )
        return size

    def check_write(self, path: str, content: str) -> str:
        """
        Run the path, type and size checks for a write, in that order.

        Returns:
            Canonical path to write to
        """
        target = self.check_path(path)
        self.check_file_type(target)
        self.check_content_size(content)
        return target
