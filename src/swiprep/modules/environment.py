"""
Environment Checks Module

Eager checks run before the checkout is touched:
- refuse to run with elevated privilege
- require the VERSION marker at the top of the tree
"""

import logging
import os
from pathlib import Path

from swiprep.errors import EnvironmentCheckError

logger = logging.getLogger(__name__)

VERSION_FILE = "VERSION"


def check_not_root() -> None:
    """Refuse to run as the superuser.

    Raises:
        EnvironmentCheckError: If the effective uid is 0
    """
    geteuid = getattr(os, "geteuid", None)
    if geteuid is not None and geteuid() == 0:
        raise EnvironmentCheckError(
            "Do not run swiprep as root: files in the checkout would become root-owned"
        )


def read_version(root: Path) -> str:
    """Read the version string from the VERSION marker.

    Leading and trailing whitespace is not significant.

    Raises:
        EnvironmentCheckError: If the marker is missing or empty
    """
    version_path = root / VERSION_FILE
    if not version_path.is_file():
        raise EnvironmentCheckError(
            f"No {VERSION_FILE} file in {root}. "
            "Run swiprep from the top directory of the source checkout."
        )

    version = version_path.read_text(encoding="utf-8").strip()
    if not version:
        raise EnvironmentCheckError(f"{version_path} is empty")

    logger.debug(f"Source version: {version}")
    return version


def check_environment(root: Path) -> str:
    """Run all environment checks and return the source version."""
    check_not_root()
    return read_version(root)


__all__ = ["VERSION_FILE", "check_environment", "check_not_root", "read_version"]
