"""Build utilities for kbuild.

This module provides filesystem helpers shared by the build steps.
"""

import os
import shutil
import stat
from pathlib import Path
from typing import Any, Callable

from ..errors import BuildIOError


def remove_readonly(func: Callable[[str], None], path: str, excinfo: Any) -> None:
    """
    Error handler for shutil.rmtree on Windows.

    On Windows, read-only files cannot be deleted and will cause
    shutil.rmtree to fail. This handler removes the read-only attribute
    and retries the operation.

    Args:
        func: The function that raised the exception
        path: The path to the file/directory
        excinfo: Exception information (unused)
    """
    os.chmod(path, stat.S_IWRITE)
    func(path)


def safe_rmtree(path: Path) -> None:
    """
    Remove a directory tree if it exists.

    Read-only files are made writable before deletion. A missing directory
    is not an error.

    Args:
        path: Path to directory to remove

    Raises:
        BuildIOError: If the directory cannot be removed
    """
    path = Path(path)
    if not path.exists():
        return

    try:
        shutil.rmtree(path, onerror=remove_readonly)
    except OSError as e:
        raise BuildIOError(f"Failed to remove directory {path}: {e}", directory=path) from e


def ensure_directory(path: Path) -> Path:
    """
    Create a directory (and parents) if needed.

    Raises:
        BuildIOError: If the directory cannot be created
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise BuildIOError(f"Unable to create directory [{path}]: {e}", directory=path) from e
    return path
