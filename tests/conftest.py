"""
Shared test fixtures for swiprep tests.

This module provides common fixtures used across the unit tests:
- A temporary source checkout with a VERSION marker
- Resolved tool paths that never touch PATH
- A recording subprocess runner
"""

from pathlib import Path

import pytest

from swiprep.modules.interaction_handler import MockInteractionHandler
from swiprep.modules.prerequisites import ToolPaths
from tests.mocks.subprocess_mock import SubprocessCallCapture

SOURCE_VERSION = "9.1.2"


# ============================================================================
# CHECKOUT FIXTURES
# ============================================================================


@pytest.fixture
def checkout(tmp_path) -> Path:
    """Temporary source checkout.

    Contains only the VERSION marker; tests add submodules, documentation
    and autoconf files as needed.
    """
    root = tmp_path / "swipl-devel"
    root.mkdir()
    (root / "VERSION").write_text(f"{SOURCE_VERSION}\n")
    return root


@pytest.fixture
def tool_paths() -> ToolPaths:
    """Fixed tool paths so tests do not depend on what is installed."""
    return ToolPaths(
        git="/usr/bin/git",
        tar="/usr/bin/tar",
        transfer="/usr/bin/curl",
        autoconf="/usr/bin/autoconf",
        autoheader="/usr/bin/autoheader",
    )


# ============================================================================
# INTERACTION / SUBPROCESS FIXTURES
# ============================================================================


@pytest.fixture
def runner() -> SubprocessCallCapture:
    """Recording runner; every command succeeds unless configured otherwise."""
    return SubprocessCallCapture()


@pytest.fixture
def quiet_handler() -> MockInteractionHandler:
    """Handler that only records info/warning output."""
    return MockInteractionHandler()
