"""Jar Creator.

This module handles packaging directories into jar files using the JDK's
jar tool.

Design:
    - Wraps `jar --create` execution
    - Skips input directories that don't exist
    - Writes the same manifest attributes into every jar
    - Provides clear error messages
"""

import logging
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..errors import BuildFailure

logger = logging.getLogger(__name__)


class ArchiveError(BuildFailure):
    """Raised when jar creation fails."""
    pass


class JarPackager(ABC):
    """Interface for writing a jar from a set of directories."""

    @abstractmethod
    def write_jar(
        self,
        output_path: Path,
        directories: Sequence[Path],
        manifest_entries: Dict[str, str]
    ) -> Path:
        """Create a jar containing the contents of each existing directory.

        Args:
            output_path: Jar file to create
            directories: Directories whose contents go into the jar root;
                missing directories are skipped
            manifest_entries: Manifest attributes

        Returns:
            Path to the created jar
        """
        pass


class JarToolPackager(JarPackager):
    """Creates jars by running the JDK jar tool.

    This class handles:
    - Writing a manifest file from the configured attributes
    - Running `jar --create` with one `-C <dir> .` per input directory
    - Validating that the jar was created
    """

    def __init__(self, jar_tool: Path, timeout: Optional[float] = 300):
        """Initialize jar packager.

        Args:
            jar_tool: Path to the jar executable (JAVA_HOME/bin/jar)
            timeout: Seconds to wait for the jar tool
        """
        self.jar_tool = Path(jar_tool)
        self.timeout = timeout

    def write_jar(
        self,
        output_path: Path,
        directories: Sequence[Path],
        manifest_entries: Dict[str, str]
    ) -> Path:
        if not self.jar_tool.exists():
            raise ArchiveError(
                f"Jar tool not found: {self.jar_tool}. Ensure the configured JDK is installed."
            )

        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveError(f"Unable to create jar directory [{output_path.parent}]: {e}") from e

        with tempfile.TemporaryDirectory(prefix="kbuild-jar-") as temp_dir:
            manifest = Path(temp_dir) / "MANIFEST.MF"
            manifest.write_text(self.format_manifest(manifest_entries), encoding="utf-8")

            cmd = self.build_command(output_path, directories, manifest)
            logger.debug(f"Executing [{' '.join(cmd)}]")

            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout
                )
            except subprocess.TimeoutExpired as e:
                raise ArchiveError(f"Jar creation timeout for {output_path.name}") from e
            except OSError as e:
                raise ArchiveError(f"Failed to run jar tool for {output_path.name}: {e}") from e

        if result.returncode != 0:
            error_msg = f"Jar creation failed for {output_path.name}\n"
            error_msg += f"stderr: {result.stderr}\n"
            error_msg += f"stdout: {result.stdout}"
            raise ArchiveError(error_msg)

        if not output_path.exists():
            raise ArchiveError(f"Jar was not created: {output_path}")

        return output_path

    def build_command(self, output_path: Path, directories: Sequence[Path], manifest: Path) -> List[str]:
        """Build the jar tool argument vector, skipping missing directories."""
        cmd = [str(self.jar_tool), "--create", "--file", str(output_path), "--manifest", str(manifest)]
        for directory in directories:
            directory = Path(directory)
            if not directory.is_dir():
                logger.debug(f"Skipping missing jar input directory [{directory}]")
                continue
            cmd.extend(["-C", str(directory), "."])
        return cmd

    @staticmethod
    def format_manifest(entries: Dict[str, str]) -> str:
        """Render manifest attributes.

        Manifest-Version always comes first; the jar tool adds Created-By.
        """
        lines = [f"Manifest-Version: {entries.get('Manifest-Version', '1.0')}"]
        for key, value in entries.items():
            if key == "Manifest-Version":
                continue
            lines.append(f"{key}: {value}")
        return "\n".join(lines) + "\n"
