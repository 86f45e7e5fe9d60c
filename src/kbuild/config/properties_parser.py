"""Version registry parser.

The Kotlin and Java SDK installations are registered per machine in two
.properties files, keyed by version string:

    ~/.savant/plugins/org.savantbuild.plugin.kotlin.properties
        1.3=/Library/Kotlin/1.3.10

    ~/.savant/plugins/org.savantbuild.plugin.java.properties
        1.8=/Library/Java/JavaVirtualMachines/jdk1.8.0.jdk/Contents/Home

The directory can be moved with the KBUILD_CONFIG_DIR environment variable.

The files are read with configparser after folding them into logical lines
the way java.util.Properties does:
    - Leading whitespace is ignored; indented lines are not continuations
    - A line ending in an odd number of backslashes continues on the next line
    - ``=`` or ``:`` separates key and value
    - A repeated key keeps its last value
    - Values are unescaped (``\\\\``, ``\\t``, ``\\uXXXX``, ...), so Windows
      paths need doubled backslashes: ``1.8=C:\\\\Java\\\\jdk1.8``

Not supported: whitespace as the only key/value separator, escaped
separators inside keys, and lines starting with ``[`` (read as sections).
"""

import configparser
import os
import re
from pathlib import Path
from typing import List, Optional

from ..errors import ConfigurationError

KOTLIN_REGISTRY_FILE = "org.savantbuild.plugin.kotlin.properties"
JAVA_REGISTRY_FILE = "org.savantbuild.plugin.java.properties"

_SECTION = "versions"
_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def default_registry_dir() -> Path:
    """Get the directory holding the version registries.

    Returns:
        KBUILD_CONFIG_DIR if set, otherwise ~/.savant/plugins
    """
    config_env = os.environ.get("KBUILD_CONFIG_DIR")
    if config_env:
        return Path(config_env).expanduser()
    return Path.home() / ".savant" / "plugins"


def kotlin_registry_message(path: Path) -> str:
    """Remediation text for a missing or incomplete Kotlin registry."""
    return (
        f"You must create the file [{path}] that contains the system configuration for the Kotlin plugin. "
        + "This file should include the location of the Kotlin SDK (kotlin and kotlinc) by version. "
        + "These properties look like this:\n\n"
        + "  1.3=/Library/Kotlin/1.3.10\n"
    )


def java_registry_message(path: Path) -> str:
    """Remediation text for a missing or incomplete Java registry."""
    return (
        f"You must create the file [{path}] that contains the system configuration for the Java system. "
        + "This file should include the location of the JDK (java and javac) by version. "
        + "These properties look like this:\n\n"
        + "  1.8=/Library/Java/JavaVirtualMachines/jdk1.8.0.jdk/Contents/Home\n"
        + "  11=/Library/Java/JavaVirtualMachines/jdk-11.jdk/Contents/Home\n"
    )


def fold_lines(content: str) -> str:
    """Join continuation lines and drop leading whitespace.

    Blank and comment lines are kept so configparser line numbers stay useful
    in error messages.
    """
    lines = []
    pending = ""
    for raw in content.splitlines():
        line = raw.lstrip()
        if not pending and (not line or line[0] in "#!"):
            lines.append(line)
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue
        lines.append(pending + line)
        pending = ""
    if pending:
        lines.append(pending)
    return "\n".join(lines) + "\n"


def unescape(value: str) -> str:
    """Decode .properties escapes; an unknown escape yields the character itself."""

    def replace(match: "re.Match[str]") -> str:
        token = match.group(1)
        if len(token) == 5:
            return chr(int(token[1:], 16))
        return _ESCAPES.get(token, token)

    return _ESCAPE_RE.sub(replace, value)


class VersionRegistry:
    """
    Maps version strings to installation directories.

    The file uses Java .properties syntax (see the module docstring for the
    subset that is understood). Keys are case sensitive.

    Usage:
        registry = VersionRegistry(path, kotlin_registry_message(path))
        home = registry.lookup("1.3")
    """

    def __init__(self, path: Path, error_message: str):
        """
        Load the registry file.

        Args:
            path: Path to the .properties file
            error_message: Remediation text used when the file or a key is missing

        Raises:
            ConfigurationError: If the file doesn't exist or cannot be parsed
        """
        self.path = Path(path)
        self.error_message = error_message

        if not self.path.is_file():
            raise ConfigurationError(error_message)

        self.config = configparser.ConfigParser(
            delimiters=("=", ":"),
            comment_prefixes=("#", "!"),
            interpolation=None,
            strict=False,
            allow_no_value=True,
        )
        self.config.optionxform = str  # type: ignore[assignment]

        try:
            content = self.path.read_text(encoding="utf-8")
            self.config.read_string(f"[{_SECTION}]\n{fold_lines(content)}", source=str(self.path))
        except (OSError, UnicodeDecodeError, configparser.Error) as e:
            raise ConfigurationError(f"Failed to parse [{self.path}]: {e}\n\n{error_message}") from e

    def lookup(self, version: str) -> Optional[str]:
        """
        Get the installation directory registered for a version.

        Args:
            version: Version string (e.g., '1.3')

        Returns:
            Installation path, or None if the version isn't registered
        """
        value = self.config[_SECTION].get(version)
        if value is None:
            return None
        value = unescape(value.strip())
        return value or None

    def versions(self) -> List[str]:
        """Get all registered versions in file order."""
        return list(self.config[_SECTION].keys())
