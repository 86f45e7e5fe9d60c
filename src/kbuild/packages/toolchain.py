"""Toolchain resolution for kotlinc.

This module turns the configured Kotlin and Java versions into concrete
installation paths using the machine-wide version registries, and verifies
that the kotlinc launcher is usable.

The result is resolved lazily on first use and cached for the life of the
resolver, since it cannot change during a build.
"""

import os
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config.properties_parser import (
    JAVA_REGISTRY_FILE,
    KOTLIN_REGISTRY_FILE,
    VersionRegistry,
    default_registry_dir,
    java_registry_message,
    kotlin_registry_message,
)
from ..config.settings import CompileSettings
from ..errors import ConfigurationError


class ToolchainError(ConfigurationError):
    """Raised when the Kotlin toolchain cannot be resolved."""

    pass


@dataclass(frozen=True)
class ToolchainBinding:
    """Resolved installation paths for one build."""

    compiler_home: Path
    compiler_path: Path
    interop_runtime_home: Path

    @property
    def jar_tool(self) -> Path:
        """Path to the JDK jar tool."""
        exe_suffix = ".exe" if sys.platform == "win32" else ""
        return self.interop_runtime_home / "bin" / f"jar{exe_suffix}"


class ToolchainResolver:
    """Resolves and caches the ToolchainBinding for a CompileSettings."""

    def __init__(self, settings: CompileSettings, registry_dir: Optional[Path] = None):
        """Initialize toolchain resolver.

        Args:
            settings: Compile settings holding the requested versions
            registry_dir: Directory containing the registries (default: see default_registry_dir)
        """
        self.settings = settings
        self.registry_dir = Path(registry_dir) if registry_dir else default_registry_dir()
        self._binding: Optional[ToolchainBinding] = None
        self._lock = threading.Lock()

    @property
    def kotlin_registry_path(self) -> Path:
        return self.registry_dir / KOTLIN_REGISTRY_FILE

    @property
    def java_registry_path(self) -> Path:
        return self.registry_dir / JAVA_REGISTRY_FILE

    @staticmethod
    def compiler_executable(compiler_home: Path) -> Path:
        """Get the kotlinc launcher inside a Kotlin SDK."""
        name = "kotlinc.bat" if sys.platform == "win32" else "kotlinc"
        return compiler_home / "bin" / name

    def resolve(self) -> ToolchainBinding:
        """Resolve the toolchain, computing it at most once.

        Returns:
            The cached ToolchainBinding

        Raises:
            ToolchainError: If any version or path is missing or unusable
        """
        if self._binding is None:
            with self._lock:
                if self._binding is None:
                    self._binding = self._resolve_uncached()
        return self._binding

    def _resolve_uncached(self) -> ToolchainBinding:
        settings = self.settings

        if not settings.language_version:
            raise ToolchainError(
                "You must configure the Kotlin version to use with the settings object. "
                + "It will look something like this:\n\n"
                + '  settings.language_version = "1.3"'
            )

        kotlin_message = kotlin_registry_message(self.kotlin_registry_path)
        kotlin_registry = VersionRegistry(self.kotlin_registry_path, kotlin_message)
        kotlin_home = kotlin_registry.lookup(settings.language_version)
        if not kotlin_home:
            raise ToolchainError(
                f"No SDK is configured for version [{settings.language_version}]."
                + _registered_versions(kotlin_registry)
                + f"\n\n{kotlin_message}"
            )

        compiler_home = Path(kotlin_home)
        compiler_path = self.compiler_executable(compiler_home)
        if not compiler_path.is_file():
            raise ToolchainError(f"The kotlinc compiler [{compiler_path.absolute()}] does not exist.")
        if not os.access(compiler_path, os.X_OK):
            raise ToolchainError(f"The kotlinc compiler [{compiler_path.absolute()}] is not executable.")

        if not settings.target_runtime_version:
            raise ToolchainError(
                "You must configure the Java version to use with the settings object. "
                + "It will look something like this:\n\n"
                + '  settings.target_runtime_version = "1.8"'
            )

        java_message = java_registry_message(self.java_registry_path)
        java_registry = VersionRegistry(self.java_registry_path, java_message)
        java_home = java_registry.lookup(settings.target_runtime_version)
        if not java_home:
            raise ToolchainError(
                f"No JDK is configured for version [{settings.target_runtime_version}]."
                + _registered_versions(java_registry)
                + f"\n\n{java_message}"
            )

        return ToolchainBinding(
            compiler_home=compiler_home,
            compiler_path=compiler_path,
            interop_runtime_home=Path(java_home),
        )


def _registered_versions(registry: VersionRegistry) -> str:
    versions = registry.versions()
    if not versions:
        return f" [{registry.path}] does not register any versions."
    return f" Registered versions: {', '.join(versions)}."
