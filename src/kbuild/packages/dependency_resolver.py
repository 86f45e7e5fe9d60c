"""Dependency resolution interface.

Fetching artifacts from remote repositories is the host's job. The compile
steps only need a way to turn a dependency group into an ordered list of
artifact files; this module defines that contract plus a static implementation
for hosts that have already resolved their dependency graph.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Union

from ..config.settings import DependencyGroupSelector
from ..errors import BuildFailure


class DependencyResolutionError(BuildFailure):
    """Raised when a dependency group cannot be resolved."""

    def __init__(self, group: str, reason: str):
        super().__init__(f"Unable to resolve dependency group [{group}]: {reason}")
        self.group = group
        self.reason = reason


class DependencyResolver(ABC):
    """Interface for resolving a dependency group to artifact files."""

    @abstractmethod
    def resolve(self, selector: DependencyGroupSelector) -> List[Path]:
        """Resolve a dependency group.

        Args:
            selector: Group to resolve, with its transitive/fetch_source flags

        Returns:
            Absolute artifact paths, in classpath order

        Raises:
            DependencyResolutionError: If the group cannot be resolved
        """
        pass


class StaticDependencyResolver(DependencyResolver):
    """Resolves groups from a pre-computed mapping of group name to artifacts.

    Example:
        resolver = StaticDependencyResolver({
            "compile": [Path("/repo/guava-31.jar")],
            "test-compile": [Path("/repo/testng-6.8.7.jar")],
        })
    """

    def __init__(self, groups: Mapping[str, Iterable[Union[str, Path]]]):
        self.groups: Dict[str, List[Path]] = {
            name: [Path(p) for p in paths] for name, paths in groups.items()
        }

    def resolve(self, selector: DependencyGroupSelector) -> List[Path]:
        if selector.group not in self.groups:
            known = ", ".join(sorted(self.groups)) or "none"
            raise DependencyResolutionError(
                selector.group, f"group is not defined (known groups: {known})"
            )

        artifacts = []
        for artifact in self.groups[selector.group]:
            artifacts.append(artifact)
            if selector.fetch_source:
                source_jar = artifact.with_name(f"{artifact.stem}-src{artifact.suffix}")
                if source_jar.is_file():
                    artifacts.append(source_jar)
        return artifacts
