"""Compiler Command Builder.

This module builds the kotlinc argument vector. Every flag and path is a
separate list element; nothing is passed through a shell.

Command layout:
    kotlinc [extra flags] -classpath <cp> -jdk-home <jdk> -jvm-target <target>
            -d <output dir> <kotlin sources...> <java sources...>
"""

from pathlib import Path
from typing import List, Optional, Sequence


class FlagBuilder:
    """Builds kotlinc command lines.

    Flags come first, then classpath and JDK options, then the source lists.
    """

    def __init__(self, extra_flags: Optional[List[str]] = None, jvm_target: Optional[str] = None):
        """Initialize flag builder.

        Args:
            extra_flags: Extra kotlinc flags, already split
            jvm_target: Bytecode target passed to -jvm-target
        """
        self.extra_flags = list(extra_flags or [])
        self.jvm_target = jvm_target

    def build_command(
        self,
        compiler_path: Path,
        classpath: str,
        interop_runtime_home: Path,
        output_dir: Path,
        source_files: Sequence[Path],
        interop_source_files: Sequence[Path]
    ) -> List[str]:
        """Build the full kotlinc argument vector.

        Args:
            compiler_path: Path to kotlinc
            classpath: Joined classpath string (flag omitted when empty)
            interop_runtime_home: JDK home passed to -jdk-home
            output_dir: Class output directory passed to -d
            source_files: Kotlin sources to compile
            interop_source_files: Java sources kotlinc should see

        Returns:
            Argument list suitable for subprocess
        """
        cmd = [str(compiler_path)]
        cmd.extend(self.extra_flags)
        if classpath:
            cmd.extend(["-classpath", classpath])
        cmd.extend(["-jdk-home", str(interop_runtime_home)])
        if self.jvm_target:
            cmd.extend(["-jvm-target", self.jvm_target])
        cmd.extend(["-d", str(output_dir)])
        cmd.extend(str(source) for source in source_files)
        cmd.extend(str(source) for source in interop_source_files)
        return cmd
