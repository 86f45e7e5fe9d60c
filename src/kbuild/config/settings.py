"""Compile settings for the Kotlin plugin.

The host sets these once before the first build step and treats them as
read-only afterwards. Dependency lists accept either DependencyGroupSelector
instances or the free-form mappings build files usually contain, e.g.:

    settings.main_dependencies = [
        {"group": "compile", "transitive": False, "fetchSource": False},
        {"group": "provided", "transitive": False, "fetchSource": False},
    ]
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ..errors import ConfigurationError


@dataclass(frozen=True)
class DependencyGroupSelector:
    """Selects one dependency group to put on the compile classpath."""

    group: str
    transitive: bool = False
    fetch_source: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DependencyGroupSelector":
        """Build a selector from a build-file style mapping.

        Accepts both ``fetchSource`` and ``fetch_source`` spellings.

        Raises:
            ConfigurationError: If the mapping has no group name
        """
        group = data.get("group")
        if not group:
            raise ConfigurationError(
                f"Dependency selector {dict(data)} is missing a group name. It should look like this:\n\n"
                + '  {"group": "compile", "transitive": False, "fetchSource": False}'
            )
        fetch_source = data.get("fetchSource", data.get("fetch_source", False))
        return cls(
            group=str(group),
            transitive=bool(data.get("transitive", False)),
            fetch_source=bool(fetch_source),
        )


SelectorLike = Union[DependencyGroupSelector, Mapping[str, Any]]


def _default_main_dependencies() -> List[SelectorLike]:
    return [
        DependencyGroupSelector("compile"),
        DependencyGroupSelector("provided"),
    ]


def _default_test_dependencies() -> List[SelectorLike]:
    return [
        DependencyGroupSelector("compile"),
        DependencyGroupSelector("test-compile"),
        DependencyGroupSelector("provided"),
    ]


@dataclass
class CompileSettings:
    """Settings that control how kotlinc is invoked.

    Attributes:
        language_version: Kotlin SDK version, looked up in the Kotlin registry
        target_runtime_version: JDK version, looked up in the Java registry
        extra_compiler_args: Extra kotlinc arguments, split on whitespace
        jvm_target: Value for -jvm-target (defaults to target_runtime_version)
        extra_library_dirs: Directories whose *.jar files join the classpath
        main_dependencies: Dependency groups for compiling main sources
        test_dependencies: Dependency groups for compiling test sources
        jar_manifest_entries: Manifest attributes written into every jar
    """

    language_version: Optional[str] = None
    target_runtime_version: Optional[str] = None
    extra_compiler_args: str = ""
    jvm_target: Optional[str] = None
    extra_library_dirs: List[Union[str, Path]] = field(default_factory=list)
    main_dependencies: List[SelectorLike] = field(default_factory=_default_main_dependencies)
    test_dependencies: List[SelectorLike] = field(default_factory=_default_test_dependencies)
    jar_manifest_entries: Dict[str, str] = field(default_factory=dict)

    def main_selectors(self) -> List[DependencyGroupSelector]:
        """Get the main dependency groups as selectors, in declared order."""
        return normalize_selectors(self.main_dependencies)

    def test_selectors(self) -> List[DependencyGroupSelector]:
        """Get the test dependency groups as selectors, in declared order."""
        return normalize_selectors(self.test_dependencies)

    def compiler_arg_list(self) -> List[str]:
        """Split extra_compiler_args into individual arguments.

        Splitting is on whitespace only; quoting is not supported.

        Example:
            >>> CompileSettings(extra_compiler_args="-Werror  -nowarn").compiler_arg_list()
            ['-Werror', '-nowarn']
        """
        if not self.extra_compiler_args:
            return []
        return self.extra_compiler_args.split()

    def effective_jvm_target(self) -> Optional[str]:
        """Get the bytecode target, falling back to the runtime version."""
        return self.jvm_target or self.target_runtime_version


def normalize_selectors(entries: List[SelectorLike]) -> List[DependencyGroupSelector]:
    """Convert a mixed list of selectors and mappings to selectors.

    Raises:
        ConfigurationError: If an entry is neither a selector nor a mapping
    """
    selectors = []
    for entry in entries or []:
        if isinstance(entry, DependencyGroupSelector):
            selectors.append(entry)
        elif isinstance(entry, Mapping):
            selectors.append(DependencyGroupSelector.from_mapping(entry))
        else:
            raise ConfigurationError(
                f"Invalid dependency selector [{entry!r}]. Use a DependencyGroupSelector or a mapping "
                + "with 'group', 'transitive' and 'fetchSource' keys."
            )
    return selectors
