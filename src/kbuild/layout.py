"""Directory layout for Kotlin projects.

All paths are relative to the project root that the host supplies when a
build step runs. The layout never resolves anything against the filesystem.

Default structure:
    project/
    ├── src/
    │   ├── main/
    │   │   ├── kotlin/         # Main Kotlin sources
    │   │   ├── java/           # Java sources visible to kotlinc
    │   │   └── resources/      # Copied into build/classes/main
    │   └── test/
    │       ├── kotlin/
    │       ├── java/
    │       └── resources/
    └── build/
        ├── classes/
        │   ├── main/           # Compiled main classes
        │   └── test/           # Compiled test classes
        ├── doc/
        └── jars/               # Packaged artifacts
"""

from dataclasses import dataclass, field, fields
from pathlib import Path

from .errors import ConfigurationError


@dataclass(frozen=True)
class RoleLayout:
    """Source, resource and output directories for one role (main or test)."""

    source_dir: Path
    interop_source_dir: Path
    resource_dir: Path
    classes_dir: Path

    def __post_init__(self):
        for f in fields(self):
            _require_relative(f.name, getattr(self, f.name))

    @classmethod
    def standard(cls, role: str, build_dir: Path = Path("build")) -> "RoleLayout":
        """Create the conventional layout for a role.

        Args:
            role: Role name, "main" or "test"
            build_dir: Build root the classes directory lives under

        Returns:
            RoleLayout using src/<role>/{kotlin,java,resources}
        """
        return cls(
            source_dir=Path("src") / role / "kotlin",
            interop_source_dir=Path("src") / role / "java",
            resource_dir=Path("src") / role / "resources",
            classes_dir=Path(build_dir) / "classes" / role,
        )


@dataclass(frozen=True)
class PathLayout:
    """Canonical relative locations used by the Kotlin build steps."""

    build_dir: Path = Path("build")
    doc_dir: Path = Path("build") / "doc"
    jar_output_dir: Path = Path("build") / "jars"
    main: RoleLayout = field(default_factory=lambda: RoleLayout.standard("main"))
    test: RoleLayout = field(default_factory=lambda: RoleLayout.standard("test"))

    def __post_init__(self):
        for name in ("build_dir", "doc_dir", "jar_output_dir"):
            _require_relative(name, getattr(self, name))


def _require_relative(name: str, value: Path) -> None:
    if Path(value).is_absolute():
        raise ConfigurationError(
            f"Layout path '{name}' must be relative to the project directory, got [{value}]"
        )
