"""
Source file discovery and staleness checks.

This module handles:
- Finding Kotlin sources whose class files are missing or out of date
- Listing Java sources that kotlinc must see for mixed-language compilation

All results are paths relative to the scanned root, sorted by their POSIX
form so command lines are reproducible.
"""

import os
from pathlib import Path
from typing import List

from ..errors import BuildIOError


class SourceScannerError(BuildIOError):
    """Raised when a source tree cannot be scanned."""
    pass


class SourceScanner:
    """
    Scans source trees and decides which files need compiling.

    A source file needs compiling when:
    1. The output root does not exist yet (first build), or
    2. Its output file does not exist, or
    3. Its output file is strictly older than the source file
    """

    def find_sources_needing_compilation(
        self,
        source_root: Path,
        output_root: Path,
        source_extension: str = ".kt",
        output_extension: str = ".class"
    ) -> List[Path]:
        """
        Find source files that are stale relative to their outputs.

        Args:
            source_root: Directory containing the sources
            output_root: Directory containing previously compiled outputs
            source_extension: Source file suffix (e.g., '.kt')
            output_extension: Output file suffix (e.g., '.class')

        Returns:
            Sorted list of source paths relative to source_root

        Raises:
            SourceScannerError: If the tree cannot be read
        """
        source_root = Path(source_root)
        output_root = Path(output_root)

        sources = self._walk(source_root, source_extension)
        if not sources or not output_root.is_dir():
            return sources

        stale = []
        for relative in sources:
            output_file = output_root / self._map_extension(relative, source_extension, output_extension)
            if self.needs_rebuild(source_root / relative, output_file):
                stale.append(relative)

        return stale

    def list_interop_sources(self, interop_root: Path, extension: str = ".java") -> List[Path]:
        """
        List every interop source under a root, without staleness filtering.

        Args:
            interop_root: Directory containing e.g. Java sources
            extension: Source file suffix

        Returns:
            Sorted list of paths relative to interop_root
        """
        return self._walk(Path(interop_root), extension)

    def needs_rebuild(self, source: Path, output_file: Path) -> bool:
        """
        Check if a source file needs to be recompiled.

        Args:
            source: Source file path
            output_file: Compiled output path

        Returns:
            True if the output is missing or older than the source
        """
        try:
            if not output_file.exists():
                return True
            return output_file.stat().st_mtime_ns < source.stat().st_mtime_ns
        except OSError as e:
            raise SourceScannerError(
                f"Unable to check timestamps for [{source}] against [{output_file}]: {e}",
                directory=source.parent,
            ) from e

    @staticmethod
    def _map_extension(relative: Path, source_extension: str, output_extension: str) -> Path:
        name = relative.name[: len(relative.name) - len(source_extension)] + output_extension
        return relative.with_name(name)

    @staticmethod
    def _walk(root: Path, extension: str) -> List[Path]:
        if not root.is_dir():
            return []

        def on_error(error: OSError) -> None:
            raise SourceScannerError(
                f"Unable to search the source directory [{root}]: {error}",
                directory=root,
            ) from error

        found = []
        for dirpath, _dirnames, filenames in os.walk(root, onerror=on_error):
            for filename in filenames:
                if filename.endswith(extension):
                    found.append((Path(dirpath) / filename).relative_to(root))

        return sorted(found, key=lambda p: p.as_posix())
