"""Compile classpath assembly.

Classpath order decides which class wins when the same name exists in more
than one entry, so entries are emitted strictly in this order:

    1. Artifacts of each dependency group, in selector order
    2. *.jar files directly inside each library directory (sorted per directory)
    3. Extra paths (e.g. build/classes/main), verbatim
"""

import logging
import os
from pathlib import Path
from typing import List, Sequence, Union

from ..config.settings import DependencyGroupSelector
from ..errors import BuildIOError
from ..packages.dependency_resolver import DependencyResolver

logger = logging.getLogger(__name__)


class ClasspathBuilder:
    """Builds the kotlinc classpath from dependency groups and directories.

    Example usage:
        builder = ClasspathBuilder(resolver, project_dir)
        classpath = builder.build_classpath(
            selectors=settings.main_selectors(),
            extra_library_dirs=settings.extra_library_dirs,
            extra_paths=[Path("build/classes/main")]
        )
    """

    ARCHIVE_EXTENSION = ".jar"

    def __init__(self, resolver: DependencyResolver, project_dir: Path):
        """Initialize classpath builder.

        Args:
            resolver: Collaborator that resolves dependency groups
            project_dir: Project root that relative library dirs resolve against
        """
        self.resolver = resolver
        self.project_dir = Path(project_dir)

    def build_entries(
        self,
        selectors: Sequence[DependencyGroupSelector],
        extra_library_dirs: Sequence[Union[str, Path]],
        extra_paths: Sequence[Path]
    ) -> List[Path]:
        """Build the ordered list of classpath entries.

        Dependency resolution errors propagate unchanged.

        Args:
            selectors: Dependency groups in precedence order
            extra_library_dirs: Directories to pick *.jar files from
            extra_paths: Paths appended as-is

        Returns:
            Classpath entries in order
        """
        entries: List[Path] = []

        for selector in selectors:
            resolved = self.resolver.resolve(selector)
            logger.debug(f"Dependency group [{selector.group}] resolved to {len(resolved)} artifacts")
            entries.extend(Path(p) for p in resolved)

        for library_dir in extra_library_dirs or []:
            entries.extend(self._library_jars(Path(library_dir)))

        entries.extend(Path(p) for p in extra_paths or [])
        return entries

    def build_classpath(
        self,
        selectors: Sequence[DependencyGroupSelector],
        extra_library_dirs: Sequence[Union[str, Path]],
        extra_paths: Sequence[Path]
    ) -> str:
        """Build the classpath string, joined with os.pathsep.

        Returns:
            Classpath string (empty if there are no entries)
        """
        entries = self.build_entries(selectors, extra_library_dirs, extra_paths)
        return os.pathsep.join(str(entry) for entry in entries)

    def _library_jars(self, library_dir: Path) -> List[Path]:
        directory = self.project_dir / library_dir
        if not directory.is_dir():
            logger.debug(f"Skipping missing library directory [{directory}]")
            return []

        try:
            jars = [
                child.absolute()
                for child in directory.iterdir()
                if child.name.endswith(self.ARCHIVE_EXTENSION) and child.is_file()
            ]
        except OSError as e:
            raise BuildIOError(
                f"Unable to list library directory [{directory}]: {e}", directory=directory
            ) from e

        return sorted(jars, key=lambda p: p.name)
