"""Unit tests for the version registry parser."""

from pathlib import Path

import pytest

from kbuild.config.properties_parser import (
    JAVA_REGISTRY_FILE,
    KOTLIN_REGISTRY_FILE,
    VersionRegistry,
    default_registry_dir,
    fold_lines,
    java_registry_message,
    kotlin_registry_message,
)
from kbuild.errors import ConfigurationError


@pytest.fixture
def registry_file(tmp_path):
    path = tmp_path / KOTLIN_REGISTRY_FILE
    path.write_text(
        "# Kotlin SDKs\n"
        "! legacy comment style\n"
        "1.3=/opt/kotlin/1.3.10\n"
        "\n"
        "1.9 = /opt/kotlin/1.9.0  \n"
        "RC=/opt/kotlin/rc\n"
        "empty=\n"
    )
    return path


class TestVersionRegistry:
    """Test cases for VersionRegistry."""

    def test_lookup(self, registry_file):
        registry = VersionRegistry(registry_file, "hint")

        assert registry.lookup("1.3") == "/opt/kotlin/1.3.10"
        assert registry.lookup("1.9") == "/opt/kotlin/1.9.0"

    def test_unknown_version(self, registry_file):
        assert VersionRegistry(registry_file, "hint").lookup("9.9") is None

    def test_empty_value_is_unregistered(self, registry_file):
        assert VersionRegistry(registry_file, "hint").lookup("empty") is None

    def test_keys_case_sensitive(self, registry_file):
        registry = VersionRegistry(registry_file, "hint")

        assert registry.lookup("RC") == "/opt/kotlin/rc"
        assert registry.lookup("rc") is None

    def test_versions_in_file_order(self, registry_file):
        assert VersionRegistry(registry_file, "hint").versions() == ["1.3", "1.9", "RC", "empty"]

    def test_missing_file_uses_message(self, tmp_path):
        with pytest.raises(ConfigurationError, match="create the registry"):
            VersionRegistry(tmp_path / "missing.properties", "create the registry")


    def test_escaped_windows_paths(self, tmp_path):
        path = tmp_path / JAVA_REGISTRY_FILE
        path.write_text("1.8=C:\\\\Java\\\\jdk1.8\n11=C:\\Java\\jdk-11\n")

        registry = VersionRegistry(path, "hint")

        assert registry.lookup("1.8") == "C:\\Java\\jdk1.8"
        assert registry.lookup("11") == "C:Javajdk-11"

    def test_unicode_escape(self, tmp_path):
        path = tmp_path / KOTLIN_REGISTRY_FILE
        path.write_text("1.3=/opt/k\\u00f6tlin\n")

        assert VersionRegistry(path, "hint").lookup("1.3") == "/opt/k\u00f6tlin"

    def test_duplicate_key_keeps_last_value(self, tmp_path):
        path = tmp_path / JAVA_REGISTRY_FILE
        path.write_text("1.8=/a\n1.8=/b\n")

        assert VersionRegistry(path, "hint").lookup("1.8") == "/b"

    def test_colon_separator(self, tmp_path):
        path = tmp_path / JAVA_REGISTRY_FILE
        path.write_text("1.8: /opt/jdk8\n11=/opt/jdk11:extra\n")

        registry = VersionRegistry(path, "hint")

        assert registry.lookup("1.8") == "/opt/jdk8"
        assert registry.lookup("11") == "/opt/jdk11:extra"

    def test_indented_lines_are_entries(self, tmp_path):
        path = tmp_path / KOTLIN_REGISTRY_FILE
        path.write_text("1.3=/opt/kotlin/1.3\n    1.9=/opt/kotlin/1.9\n\t# indented comment\n")

        registry = VersionRegistry(path, "hint")

        assert registry.lookup("1.3") == "/opt/kotlin/1.3"
        assert registry.lookup("1.9") == "/opt/kotlin/1.9"
        assert registry.versions() == ["1.3", "1.9"]

    def test_backslash_continuation(self, tmp_path):
        path = tmp_path / KOTLIN_REGISTRY_FILE
        path.write_text("1.3=/opt/\\\n    kotlin/1.3\n1.9=/opt/kotlin/1.9\n")

        registry = VersionRegistry(path, "hint")

        assert registry.lookup("1.3") == "/opt/kotlin/1.3"
        assert registry.lookup("1.9") == "/opt/kotlin/1.9"

    def test_undecodable_file_is_parse_error(self, tmp_path):
        path = tmp_path / JAVA_REGISTRY_FILE
        path.write_bytes(b"1.8=/opt/\xff\n")

        with pytest.raises(ConfigurationError, match="Failed to parse"):
            VersionRegistry(path, "hint")


class TestFoldLines:
    def test_even_backslashes_do_not_continue(self):
        assert fold_lines("a=C:\\\\\nb=2\n") == "a=C:\\\\\nb=2\n"

    def test_comment_inside_continuation_is_value(self):
        assert fold_lines("a=1\\\n#2\n") == "a=1#2\n"


class TestRegistryLocation:
    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("KBUILD_CONFIG_DIR", str(tmp_path))

        assert default_registry_dir() == tmp_path

    def test_default(self, monkeypatch):
        monkeypatch.delenv("KBUILD_CONFIG_DIR", raising=False)

        assert default_registry_dir() == Path.home() / ".savant" / "plugins"

    def test_messages_name_file(self, tmp_path):
        path = tmp_path / KOTLIN_REGISTRY_FILE

        assert str(path) in kotlin_registry_message(path)
        assert "1.3=" in kotlin_registry_message(path)
        assert "1.8=" in java_registry_message(path)
