"""
FileSystemGate file operations.

Thin wrappers over listing, reading, writing and directory creation. Every
function expects a canonical path that has already passed the authorization
gate, and turns OS failures into Internal errors.
"""

import fnmatch
import os
from typing import List, Optional

from cloister.shared.errors import Internal
from cloister.shared.gate import GateLogger

_log = GateLogger.get("FileSystemGate")

# Refuse to follow a symlink swapped in after the path was checked
_NOFOLLOW = getattr(os, "O_NOFOLLOW", 0)


def _fail(operation: str, path: str, error: OSError) -> Internal:
    _log.error(f"{operation} failed for {path}: {error}")
    return Internal(error.strerror or str(error))


def list_files(path: str, pattern: Optional[str] = None) -> List[str]:
    """
    List the entries of a directory.

    Args:
        path: Canonical directory path
        pattern: Optional glob matched against entry names (e.g. "*.txt")

    Returns:
        Sorted absolute paths of matching entries
    """
    try:
        with os.scandir(path) as entries:
            names = [entry.name for entry in entries]
    except OSError as e:
        raise _fail("list", path, e)

    if pattern:
        names = [name for name in names if fnmatch.fnmatch(name, pattern)]

    return [os.path.join(path, name) for name in sorted(names)]


def read_file(path: str) -> str:
    """
    Read a file as text.

    Bytes that are not valid UTF-8 are replaced rather than failing the read.
    """
    try:
        with open(path, "rb") as f:
            content = f.read()
    except OSError as e:
        raise _fail("read", path, e)

    return content.decode("utf-8", errors="replace")


def write_file(path: str, content: str, mode: int = 0o644) -> bool:
    """
    Create or truncate a file and write text to it.

    Args:
        path: Canonical file path; the parent directory must exist
        content: Text to write, encoded as UTF-8
        mode: Permission bits applied to the file

    Returns:
        True once the content is written
    """
    data = content.encode("utf-8")
    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC | _NOFOLLOW

    try:
        fd = os.open(path, flags, mode)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            if hasattr(os, "fchmod"):
                # Existing files keep their old bits otherwise
                os.fchmod(f.fileno(), mode)
    except OSError as e:
        raise _fail("write", path, e)

    return True


def create_folder(path: str, mode: int = 0o755) -> bool:
    """
    Create a directory and any missing parents.

    Succeeds without change if the directory already exists.
    """
    try:
        os.makedirs(path, mode=mode, exist_ok=True)
    except OSError as e:
        raise _fail("mkdir", path, e)

    return True
