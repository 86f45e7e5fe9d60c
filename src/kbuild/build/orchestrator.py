"""
Build orchestration for Kotlin projects.

This module sequences the public build steps a host calls on the plugin:

- clean:        delete the build directory
- compile_main: compile src/main/kotlin into build/classes/main
- compile_test: compile src/test/kotlin into build/classes/test
- compile:      compile_main followed by compile_test
- jar:          package classes and sources into four jars

Each compile step resolves the toolchain (once per orchestrator), finds the
stale sources, and only when there are any builds the classpath and runs
kotlinc. Resources are copied afterwards unless compilation failed.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..config.settings import CompileSettings, DependencyGroupSelector
from ..layout import PathLayout, RoleLayout
from ..packages.dependency_resolver import DependencyResolver
from ..packages.toolchain import ToolchainBinding, ToolchainResolver
from .archive_creator import JarPackager, JarToolPackager
from .build_utils import ensure_directory, safe_rmtree
from .classpath_builder import ClasspathBuilder
from .compilation_executor import CompilationExecutor
from .resource_copier import DirectoryResourceCopier, ResourceCopier
from .source_scanner import SourceScanner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectInfo:
    """Identity of the project being built, used to name artifacts."""

    directory: Path
    name: str
    version: str

    @property
    def artifact_file(self) -> str:
        return f"{self.name}-{self.version}.jar"

    @property
    def artifact_source_file(self) -> str:
        return f"{self.name}-{self.version}-src.jar"

    @property
    def artifact_test_file(self) -> str:
        return f"{self.name}-test-{self.version}.jar"

    @property
    def artifact_test_source_file(self) -> str:
        return f"{self.name}-test-{self.version}-src.jar"


class CompileOutcome(Enum):
    """Result of one compile step."""

    SKIPPED = "skipped"
    COMPILED = "compiled"


@dataclass
class CompileUnit:
    """Inputs for a single compile step; paths are project-relative."""

    source_root: Path
    interop_source_root: Path
    output_root: Path
    selectors: List[DependencyGroupSelector]
    extra_classpath: List[Path] = field(default_factory=list)


class KotlinOrchestrator:
    """
    Orchestrates Kotlin compilation and packaging for one project.

    Example usage:
        settings = CompileSettings(language_version="1.3", target_runtime_version="1.8")
        kotlin = KotlinOrchestrator(
            ProjectInfo(Path("."), "my-project", "1.0.0"),
            dependency_resolver=resolver,
            settings=settings,
        )
        kotlin.clean()
        kotlin.compile()
        kotlin.jar()
    """

    def __init__(
        self,
        project: ProjectInfo,
        dependency_resolver: DependencyResolver,
        layout: Optional[PathLayout] = None,
        settings: Optional[CompileSettings] = None,
        resource_copier: Optional[ResourceCopier] = None,
        jar_packager: Optional[JarPackager] = None,
        executor: Optional[CompilationExecutor] = None,
        toolchain_resolver: Optional[ToolchainResolver] = None,
        registry_dir: Optional[Path] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            project: Project directory, name and version
            dependency_resolver: Resolves dependency groups to artifacts
            layout: Directory layout (defaults to the standard layout)
            settings: Compile settings (defaults to empty settings)
            resource_copier: Copies resources (defaults to DirectoryResourceCopier)
            jar_packager: Writes jars (defaults to the JDK jar tool of the resolved toolchain)
            executor: Runs kotlinc (defaults to CompilationExecutor)
            toolchain_resolver: Resolves SDK paths (defaults to one built from settings)
            registry_dir: Directory holding the version registries
        """
        self.project = project
        self.project_dir = Path(project.directory)
        self.dependency_resolver = dependency_resolver
        self.layout = layout or PathLayout()
        self.settings = settings or CompileSettings()
        self.resource_copier = resource_copier or DirectoryResourceCopier()
        self.jar_packager = jar_packager
        self.executor = executor or CompilationExecutor(self.project_dir)
        self.toolchain_resolver = toolchain_resolver
        self.registry_dir = registry_dir
        self.scanner = SourceScanner()

    def resolve_toolchain(self) -> ToolchainBinding:
        """Resolve the toolchain, memoized for the life of this orchestrator.

        Raises:
            ToolchainError: If the toolchain is misconfigured
        """
        if self.toolchain_resolver is None:
            self.toolchain_resolver = ToolchainResolver(self.settings, self.registry_dir)
        return self.toolchain_resolver.resolve()

    def clean(self) -> None:
        """Delete the build directory. Missing directories are fine."""
        build_dir = self.project_dir / self.layout.build_dir
        logger.info(f"Cleaning [{build_dir}]")
        safe_rmtree(build_dir)

    def compile(self) -> None:
        """Compile main sources, then test sources."""
        self.compile_main()
        self.compile_test()

    def compile_main(self) -> CompileOutcome:
        """Compile the main Kotlin sources and copy main resources."""
        toolchain = self.resolve_toolchain()
        main = self.layout.main
        return self._compile_role(
            main,
            self.settings.main_selectors(),
            [main.classes_dir],
            toolchain
        )

    def compile_test(self) -> CompileOutcome:
        """Compile the test Kotlin sources against the main classes and copy test resources."""
        toolchain = self.resolve_toolchain()
        test = self.layout.test
        return self._compile_role(
            test,
            self.settings.test_selectors(),
            [self.layout.main.classes_dir, test.classes_dir],
            toolchain
        )

    def copy_resources(self, source_dir: Path, build_dir: Path) -> None:
        """
        Copy a resource tree into a build directory.

        Relative paths are resolved against the project directory. Nothing
        happens when the source directory doesn't exist.
        """
        source = self.project_dir / source_dir
        if not source.is_dir():
            return
        self.resource_copier.copy_tree(source, self.project_dir / build_dir)

    def jar(self) -> None:
        """
        Create the project's four jars: main, main sources, test and test sources.

        Directories that don't exist are left out of the corresponding jar.
        """
        toolchain = self.resolve_toolchain()
        packager = self.jar_packager or JarToolPackager(toolchain.jar_tool)
        main = self.layout.main
        test = self.layout.test

        self._jar(packager, self.project.artifact_file, main.classes_dir)
        self._jar(
            packager,
            self.project.artifact_source_file,
            main.source_dir, main.resource_dir, main.interop_source_dir
        )
        self._jar(packager, self.project.artifact_test_file, test.classes_dir)
        self._jar(
            packager,
            self.project.artifact_test_source_file,
            test.source_dir, test.resource_dir, test.interop_source_dir
        )

    def _compile_role(
        self,
        role: RoleLayout,
        selectors: List[DependencyGroupSelector],
        extra_classpath: List[Path],
        toolchain: ToolchainBinding
    ) -> CompileOutcome:
        unit = CompileUnit(
            source_root=role.source_dir,
            interop_source_root=role.interop_source_dir,
            output_root=role.classes_dir,
            selectors=selectors,
            extra_classpath=extra_classpath,
        )
        outcome = self.compile_unit(unit, toolchain)
        self.copy_resources(role.resource_dir, role.classes_dir)
        return outcome

    def compile_unit(self, unit: CompileUnit, toolchain: ToolchainBinding) -> CompileOutcome:
        """
        Compile one source directory into one output directory.

        Args:
            unit: Source, output and classpath inputs
            toolchain: Resolved toolchain

        Returns:
            CompileOutcome.SKIPPED if nothing was stale, otherwise COMPILED

        Raises:
            CompilationError: If kotlinc fails
            BuildIOError: If a directory can't be read or created
        """
        source_root = self.project_dir / unit.source_root
        output_root = self.project_dir / unit.output_root

        logger.debug(
            f"Looking for modified files to compile in [{source_root}] compared with [{output_root}]"
        )
        stale = self.scanner.find_sources_needing_compilation(source_root, output_root)

        if not stale:
            logger.info(
                f"Skipping compile for source directory [{unit.source_root}]. No files need compiling"
            )
            return CompileOutcome.SKIPPED

        ensure_directory(output_root)

        interop_root = self.project_dir / unit.interop_source_root
        logger.debug(f"Looking for java files that kotlin might need in [{interop_root}]")
        interop_sources = self.scanner.list_interop_sources(interop_root)

        classpath = ClasspathBuilder(self.dependency_resolver, self.project_dir).build_classpath(
            unit.selectors,
            self.settings.extra_library_dirs,
            unit.extra_classpath
        )

        logger.info(
            f"Compiling [{len(stale)}] Kotlin classes from [{unit.source_root}] to [{unit.output_root}]"
        )
        self.executor.invoke(
            source_files=[unit.source_root / path for path in stale],
            interop_source_files=[unit.interop_source_root / path for path in interop_sources],
            classpath=classpath,
            output_dir=unit.output_root,
            toolchain=toolchain,
            extra_flags=self.settings.compiler_arg_list(),
            jvm_target=self.settings.effective_jvm_target(),
        )
        return CompileOutcome.COMPILED

    def _jar(self, packager: JarPackager, jar_file: str, *directories: Path) -> Path:
        output_path = self.project_dir / self.layout.jar_output_dir / jar_file
        logger.info(f"Creating JAR [{output_path}]")
        return packager.write_jar(
            output_path,
            [self.project_dir / directory for directory in directories],
            dict(self.settings.jar_manifest_entries)
        )
