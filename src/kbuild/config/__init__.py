"""Configuration modules for kbuild."""

from .properties_parser import (
    JAVA_REGISTRY_FILE,
    KOTLIN_REGISTRY_FILE,
    VersionRegistry,
    default_registry_dir,
)
from .settings import CompileSettings, DependencyGroupSelector, normalize_selectors

__all__ = [
    "CompileSettings",
    "DependencyGroupSelector",
    "normalize_selectors",
    "VersionRegistry",
    "default_registry_dir",
    "KOTLIN_REGISTRY_FILE",
    "JAVA_REGISTRY_FILE",
]
