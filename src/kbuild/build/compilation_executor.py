"""Compilation Executor.

This module runs kotlinc as a subprocess and reports its outcome.

Design:
    - Builds the argument vector with FlagBuilder (no shell involved)
    - Runs with the project directory as working directory
    - Exports KOTLIN_HOME and JAVA_HOME so kotlinc finds its runtime
    - Streams compiler stdout/stderr live, draining both pipes concurrently
      so a chatty compiler can never block on a full pipe
    - Any non-zero exit code is fatal
"""

import logging
import os
import subprocess
import sys
import threading
from pathlib import Path
from typing import Dict, IO, List, Optional, Sequence

import psutil

from ..errors import CompilationError
from ..packages.toolchain import ToolchainBinding
from .flag_builder import FlagBuilder

logger = logging.getLogger(__name__)


class CompilationExecutor:
    """Runs the Kotlin compiler for one batch of sources.

    Example usage:
        executor = CompilationExecutor(project_dir)
        executor.invoke(
            source_files=[Path("src/main/kotlin/Thing.kt")],
            interop_source_files=[],
            classpath="build/classes/main",
            output_dir=Path("build/classes/main"),
            toolchain=binding,
        )
    """

    def __init__(
        self,
        project_dir: Path,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None
    ):
        """Initialize compilation executor.

        Args:
            project_dir: Working directory for the compiler process
            stdout: Stream for compiler stdout (default: sys.stdout at run time)
            stderr: Stream for compiler stderr (default: sys.stderr at run time)
        """
        self.project_dir = Path(project_dir)
        self.stdout = stdout
        self.stderr = stderr

    def invoke(
        self,
        source_files: Sequence[Path],
        interop_source_files: Sequence[Path],
        classpath: str,
        output_dir: Path,
        toolchain: ToolchainBinding,
        extra_flags: Optional[List[str]] = None,
        jvm_target: Optional[str] = None
    ) -> None:
        """Compile a batch of sources.

        Args:
            source_files: Kotlin sources, relative to the project directory
            interop_source_files: Java sources kotlinc should see
            classpath: Joined classpath string
            output_dir: Class output directory
            toolchain: Resolved toolchain paths
            extra_flags: Extra kotlinc flags
            jvm_target: Value for -jvm-target

        Raises:
            CompilationError: If kotlinc cannot be started or exits non-zero
        """
        cmd = FlagBuilder(extra_flags, jvm_target).build_command(
            compiler_path=toolchain.compiler_path,
            classpath=classpath,
            interop_runtime_home=toolchain.interop_runtime_home,
            output_dir=output_dir,
            source_files=source_files,
            interop_source_files=interop_source_files,
        )
        logger.debug(f"Executing [{' '.join(cmd)}]")

        returncode = self.run(cmd, self.build_environment(toolchain))
        if returncode != 0:
            raise CompilationError(
                f"Compilation failed (kotlinc exited with code {returncode})", returncode=returncode
            )

    @staticmethod
    def build_environment(toolchain: ToolchainBinding) -> Dict[str, str]:
        """Get the compiler environment: the current one plus SDK homes."""
        env = dict(os.environ)
        env["KOTLIN_HOME"] = str(toolchain.compiler_home)
        env["JAVA_HOME"] = str(toolchain.interop_runtime_home)
        return env

    def run(self, cmd: List[str], env: Dict[str, str]) -> int:
        """Run a command, streaming its output, and wait for it to exit.

        Args:
            cmd: Argument vector
            env: Process environment

        Returns:
            Process exit code

        Raises:
            CompilationError: If the process cannot be started or its output
                cannot be written
        """
        try:
            process = subprocess.Popen(
                cmd,
                cwd=str(self.project_dir),
                env=env,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise CompilationError(f"Failed to start compiler [{cmd[0]}]: {e}") from e

        write_errors: List[Exception] = []
        pumps = [
            _start_pump(process.stdout, self.stdout or sys.stdout, "stdout", write_errors),
            _start_pump(process.stderr, self.stderr or sys.stderr, "stderr", write_errors),
        ]

        try:
            returncode = process.wait()
        except KeyboardInterrupt:
            terminate_process_tree(process.pid)
            raise
        finally:
            for pump in pumps:
                pump.join()

        if write_errors:
            raise CompilationError(
                f"Unable to write compiler output: {write_errors[0]}", returncode=returncode
            ) from write_errors[0]

        return returncode


def _start_pump(
    stream: IO[str],
    sink: IO[str],
    name: str,
    write_errors: List[Exception]
) -> threading.Thread:
    """Copy lines from a child pipe to a sink on a background thread.

    The pipe is always drained to EOF. Characters the sink can't encode are
    replaced; any other write failure is appended to write_errors and later
    lines are discarded.
    """

    def pump() -> None:
        with stream:
            for line in iter(stream.readline, ""):
                if write_errors:
                    continue
                try:
                    _write_line(sink, line)
                except (OSError, ValueError, LookupError) as e:
                    write_errors.append(e)

    thread = threading.Thread(target=pump, name=f"kotlinc-{name}", daemon=True)
    thread.start()
    return thread


def _write_line(sink: IO[str], line: str) -> None:
    try:
        sink.write(line)
    except UnicodeEncodeError:
        encoding = getattr(sink, "encoding", None) or "ascii"
        sink.write(line.encode(encoding, "replace").decode(encoding))
    sink.flush()


def terminate_process_tree(pid: int, timeout: float = 3) -> int:
    """Terminate a process and all of its children.

    kotlinc is a launcher script that starts a JVM, so killing only the
    launcher would leave the compiler running.

    Args:
        pid: Root process ID
        timeout: Seconds to wait for graceful termination before killing

    Returns:
        Number of processes signalled
    """
    try:
        root = psutil.Process(pid)
        processes = root.children(recursive=True) + [root]
    except psutil.NoSuchProcess:
        return 0

    signalled = []
    for proc in processes:
        try:
            proc.terminate()
            signalled.append(proc)
        except psutil.NoSuchProcess:
            pass  # Already gone

    _gone, alive = psutil.wait_procs(signalled, timeout=timeout)
    for proc in alive:
        try:
            proc.kill()
            logger.warning(f"Force killed stubborn compiler process {proc.pid}")
        except psutil.NoSuchProcess:
            pass

    return len(signalled)
