"""
Pytest configuration for kbuild test suite.

This configuration enables the --full flag to run integration tests, which
need a real kotlinc and JDK registered in the version registries.
"""

import pytest


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--full",
        action="store_true",
        default=False,
        help="Run full test suite including integration tests (slow)",
    )


def pytest_configure(config):
    """Register the integration marker."""
    config.addinivalue_line(
        "markers", "integration: needs a real Kotlin SDK and JDK (run with --full)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --full was given."""
    if config.getoption("--full"):
        return
    skip_integration = pytest.mark.skip(reason="integration test, run with --full")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)
