"""Toolchain and dependency management for kbuild.

This module resolves the Kotlin/Java installations a build uses and defines
the contract for resolving dependency groups to artifact files.
"""

from .dependency_resolver import (
    DependencyResolutionError,
    DependencyResolver,
    StaticDependencyResolver,
)
from .toolchain import ToolchainBinding, ToolchainError, ToolchainResolver

__all__ = [
    "ToolchainBinding",
    "ToolchainResolver",
    "ToolchainError",
    "DependencyResolver",
    "StaticDependencyResolver",
    "DependencyResolutionError",
]
