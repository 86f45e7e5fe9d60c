"""Tests for running kotlinc as a subprocess."""

import io
import os
import sys
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from kbuild.build.compilation_executor import CompilationExecutor, terminate_process_tree
from kbuild.errors import CompilationError
from kbuild.packages.toolchain import ToolchainBinding

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/sh fake compilers")


def make_compiler(tmp_path: Path, body: str) -> ToolchainBinding:
    """Create a fake kotlinc shell script and a binding pointing at it."""
    kotlin_home = tmp_path / "kotlin"
    kotlinc = kotlin_home / "bin" / "kotlinc"
    kotlinc.parent.mkdir(parents=True, exist_ok=True)
    kotlinc.write_text("#!/bin/sh\n" + body)
    kotlinc.chmod(0o755)
    return ToolchainBinding(
        compiler_home=kotlin_home,
        compiler_path=kotlinc,
        interop_runtime_home=tmp_path / "jdk",
    )


class AsciiSink(io.StringIO):
    """Text sink that rejects non-ASCII, like a console with an ASCII codepage."""

    encoding = "ascii"

    def write(self, s):
        s.encode("ascii")
        return super().write(s)


class BrokenSink(io.StringIO):
    """Text sink whose writes always fail."""

    def write(self, s):
        raise OSError(5, "Input/output error")


@pytest.fixture
def project_dir(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def streams():
    return io.StringIO(), io.StringIO()


@posix_only
class TestCompilationExecutor:
    """Test compiler invocation with fake compilers."""

    def test_success_streams_output(self, tmp_path, project_dir, streams):
        toolchain = make_compiler(
            tmp_path,
            'echo "args: $@"\n'
            'echo "warning: deprecated" >&2\n'
            "exit 0\n"
        )
        out, err = streams
        executor = CompilationExecutor(project_dir, stdout=out, stderr=err)

        executor.invoke(
            source_files=[Path("src/main/kotlin/A.kt")],
            interop_source_files=[Path("src/main/java/J.java")],
            classpath="build/classes/main",
            output_dir=Path("build/classes/main"),
            toolchain=toolchain,
            extra_flags=["-Werror"],
            jvm_target="1.8",
        )

        assert out.getvalue() == (
            "args: -Werror -classpath build/classes/main -jdk-home "
            + f"{toolchain.interop_runtime_home} -jvm-target 1.8 -d build/classes/main "
            + "src/main/kotlin/A.kt src/main/java/J.java\n"
        )
        assert err.getvalue() == "warning: deprecated\n"

    def test_environment_and_working_directory(self, tmp_path, project_dir, streams):
        toolchain = make_compiler(
            tmp_path,
            'echo "KOTLIN_HOME=$KOTLIN_HOME"\n'
            'echo "JAVA_HOME=$JAVA_HOME"\n'
            'echo "PWD=$(pwd)"\n'
        )
        out, err = streams

        CompilationExecutor(project_dir, stdout=out, stderr=err).invoke(
            [Path("A.kt")], [], "", Path("out"), toolchain
        )

        lines = out.getvalue().splitlines()
        assert lines[0] == f"KOTLIN_HOME={toolchain.compiler_home}"
        assert lines[1] == f"JAVA_HOME={toolchain.interop_runtime_home}"
        assert Path(lines[2].split("=", 1)[1]).resolve() == project_dir.resolve()

    def test_nonzero_exit_raises(self, tmp_path, project_dir, streams):
        toolchain = make_compiler(tmp_path, 'echo "error: unresolved reference" >&2\nexit 3\n')
        out, err = streams

        with pytest.raises(CompilationError, match="Compilation failed") as exc_info:
            CompilationExecutor(project_dir, stdout=out, stderr=err).invoke(
                [Path("A.kt")], [], "", Path("out"), toolchain
            )

        assert exc_info.value.returncode == 3
        assert "unresolved reference" in err.getvalue()

    def test_large_output_does_not_deadlock(self, tmp_path, project_dir, streams):
        """Test that both pipes are drained while the compiler runs."""
        toolchain = make_compiler(
            tmp_path,
            "i=0\n"
            'while [ $i -lt 4000 ]; do\n'
            '  echo "out line $i ........................................................"\n'
            '  echo "err line $i ........................................................" >&2\n'
            "  i=$((i+1))\n"
            "done\n"
        )
        out, err = streams

        CompilationExecutor(project_dir, stdout=out, stderr=err).invoke(
            [Path("A.kt")], [], "", Path("out"), toolchain
        )

        assert len(out.getvalue().splitlines()) == 4000
        assert len(err.getvalue().splitlines()) == 4000

    def test_unencodable_output_is_replaced(self, tmp_path, project_dir):
        """Test that a sink that can't encode a line still gets every line."""
        toolchain = make_compiler(
            tmp_path,
            'printf "warning: caf\\303\\251\\n"\n'
            "i=0\n"
            'while [ $i -lt 3000 ]; do\n'
            '  echo "out line $i ........................................................"\n'
            "  i=$((i+1))\n"
            "done\n"
        )
        out = AsciiSink()

        CompilationExecutor(project_dir, stdout=out, stderr=io.StringIO()).invoke(
            [Path("A.kt")], [], "", Path("out"), toolchain
        )

        lines = out.getvalue().splitlines()
        assert lines[0].startswith("warning: caf?")
        assert len(lines) == 3001

    def test_write_failure_raises_after_draining(self, tmp_path, project_dir):
        """Test that a broken sink fails the build without blocking the compiler."""
        toolchain = make_compiler(
            tmp_path,
            "i=0\n"
            'while [ $i -lt 3000 ]; do\n'
            '  echo "out line $i ........................................................"\n'
            "  i=$((i+1))\n"
            "done\n"
        )

        with pytest.raises(CompilationError, match="Unable to write compiler output") as exc_info:
            CompilationExecutor(project_dir, stdout=BrokenSink(), stderr=io.StringIO()).invoke(
                [Path("A.kt")], [], "", Path("out"), toolchain
            )

        assert exc_info.value.returncode == 0
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_defaults_to_process_streams(self, tmp_path, project_dir, capsys):
        toolchain = make_compiler(tmp_path, 'echo "to stdout"\necho "to stderr" >&2\n')

        CompilationExecutor(project_dir).invoke([Path("A.kt")], [], "", Path("out"), toolchain)

        captured = capsys.readouterr()
        assert "to stdout" in captured.out
        assert "to stderr" in captured.err


class TestCompilationExecutorErrors:
    """Test failure handling that doesn't need a real process."""

    def test_missing_compiler_raises(self, tmp_path, project_dir):
        toolchain = ToolchainBinding(
            compiler_home=tmp_path,
            compiler_path=tmp_path / "bin" / "kotlinc",
            interop_runtime_home=tmp_path / "jdk",
        )

        with pytest.raises(CompilationError, match="Failed to start compiler"):
            CompilationExecutor(project_dir).invoke([Path("A.kt")], [], "", Path("out"), toolchain)

    def test_build_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("KBUILD_TEST_MARKER", "kept")
        toolchain = ToolchainBinding(tmp_path / "kotlin", tmp_path / "kotlin" / "bin" / "kotlinc", tmp_path / "jdk")

        env = CompilationExecutor.build_environment(toolchain)

        assert env["KOTLIN_HOME"] == str(tmp_path / "kotlin")
        assert env["JAVA_HOME"] == str(tmp_path / "jdk")
        assert env["KBUILD_TEST_MARKER"] == "kept"
        assert os.environ.get("KOTLIN_HOME") != str(tmp_path / "kotlin")

    def test_keyboard_interrupt_terminates_tree(self, project_dir):
        process = Mock()
        process.pid = 4242
        process.stdout = io.StringIO("")
        process.stderr = io.StringIO("")
        process.wait.side_effect = KeyboardInterrupt

        with patch("kbuild.build.compilation_executor.subprocess.Popen", return_value=process), \
                patch("kbuild.build.compilation_executor.terminate_process_tree") as terminate:
            with pytest.raises(KeyboardInterrupt):
                CompilationExecutor(project_dir).run(["kotlinc"], {})

        terminate.assert_called_once_with(4242)


class TestTerminateProcessTree:
    """Test process tree termination."""

    def test_terminates_children_and_root(self):
        child = Mock()
        root = Mock()
        root.children.return_value = [child]

        with patch("kbuild.build.compilation_executor.psutil.Process", return_value=root), \
                patch("kbuild.build.compilation_executor.psutil.wait_procs", return_value=([child, root], [])):
            count = terminate_process_tree(123)

        assert count == 2
        child.terminate.assert_called_once()
        root.terminate.assert_called_once()
        root.kill.assert_not_called()

    def test_kills_stragglers(self):
        root = Mock()
        root.children.return_value = []

        with patch("kbuild.build.compilation_executor.psutil.Process", return_value=root), \
                patch("kbuild.build.compilation_executor.psutil.wait_procs", return_value=([], [root])):
            terminate_process_tree(123)

        root.kill.assert_called_once()

    def test_missing_process(self):
        import psutil

        with patch("kbuild.build.compilation_executor.psutil.Process", side_effect=psutil.NoSuchProcess(123)):
            assert terminate_process_tree(123) == 0
