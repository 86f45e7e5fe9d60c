"""Exception hierarchy for kbuild.

Every error that should stop a build derives from BuildFailure so that the
host can catch a single type. Nothing raised from here is retried.
"""

from pathlib import Path
from typing import Optional


class BuildFailure(Exception):
    """Base exception for all build-stopping failures."""
    pass


class ConfigurationError(BuildFailure):
    """Raised for missing or invalid configuration.

    Covers unset versions, unregistered SDK versions and missing or
    non-executable compilers. Messages always carry a remediation hint.
    """
    pass


class CompilationError(BuildFailure):
    """Raised when the external compiler fails."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class BuildIOError(BuildFailure):
    """Raised when an I/O operation on a build directory fails."""

    def __init__(self, message: str, directory: Optional[Path] = None):
        super().__init__(message)
        self.directory = directory
