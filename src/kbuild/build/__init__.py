"""
Build system components for kbuild.

This module provides the build system implementation including:
- Source discovery and staleness checks
- Classpath assembly
- Compilation (kotlinc)
- Resource copying and jar packaging
- Build orchestration
"""

from .archive_creator import ArchiveError, JarPackager, JarToolPackager
from .classpath_builder import ClasspathBuilder
from .compilation_executor import CompilationExecutor
from .flag_builder import FlagBuilder
from .orchestrator import CompileOutcome, CompileUnit, KotlinOrchestrator, ProjectInfo
from .resource_copier import DirectoryResourceCopier, ResourceCopier
from .source_scanner import SourceScanner, SourceScannerError

__all__ = [
    'SourceScanner',
    'SourceScannerError',
    'ClasspathBuilder',
    'FlagBuilder',
    'CompilationExecutor',
    'ResourceCopier',
    'DirectoryResourceCopier',
    'JarPackager',
    'JarToolPackager',
    'ArchiveError',
    'KotlinOrchestrator',
    'ProjectInfo',
    'CompileOutcome',
    'CompileUnit',
]
