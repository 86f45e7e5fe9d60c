"""kbuild - Kotlin compilation plugin for build hosts.

kbuild compiles Kotlin sources with kotlinc, copies resources and packages
jars, recompiling only the sources whose class files are out of date.
"""

from .build import KotlinOrchestrator, ProjectInfo
from .config import CompileSettings, DependencyGroupSelector
from .errors import BuildFailure, BuildIOError, CompilationError, ConfigurationError
from .layout import PathLayout, RoleLayout
from .logging_utils import setup_logging
from .packages import StaticDependencyResolver, ToolchainBinding

__version__ = "0.1.0"

__all__ = [
    "KotlinOrchestrator",
    "ProjectInfo",
    "CompileSettings",
    "DependencyGroupSelector",
    "PathLayout",
    "RoleLayout",
    "StaticDependencyResolver",
    "ToolchainBinding",
    "BuildFailure",
    "BuildIOError",
    "CompilationError",
    "ConfigurationError",
    "setup_logging",
]
