"""Resource copying.

Resources (property files, templates, ...) are copied verbatim into the
classes directory so they end up on the runtime classpath and in the jar.
"""

import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from ..errors import BuildIOError


class ResourceCopier(ABC):
    """Interface for copying a resource tree into a build directory."""

    @abstractmethod
    def copy_tree(self, source_dir: Path, dest_dir: Path) -> None:
        """Copy every file under source_dir into dest_dir.

        Must be a no-op when source_dir does not exist.
        """
        pass


class DirectoryResourceCopier(ResourceCopier):
    """Copies resources with shutil, overwriting existing files."""

    def copy_tree(self, source_dir: Path, dest_dir: Path) -> None:
        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            return

        try:
            shutil.copytree(source_dir, dest_dir, dirs_exist_ok=True)
        except (OSError, shutil.Error) as e:
            raise BuildIOError(
                f"Unable to copy resources from [{source_dir}] to [{dest_dir}]: {e}",
                directory=source_dir,
            ) from e
