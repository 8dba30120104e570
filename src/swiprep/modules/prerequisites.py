"""
Prerequisites Checker Module

Locates all external tools swiprep orchestrates before any operation runs.

Requirements:
- Read-only system checks (shutil.which, no subprocess)
- Every missing tool reported at once, not one per run
- Fail before the checkout is touched
"""

import logging
import platform
import shutil
from dataclasses import dataclass, field
from typing import ClassVar

from swiprep.errors import PrepareError

logger = logging.getLogger(__name__)


class PrerequisiteError(PrepareError):
    """Raised when prerequisites are missing."""

    pass


@dataclass(frozen=True)
class ToolPaths:
    """Resolved absolute paths of the external tools."""

    git: str
    tar: str
    transfer: str
    autoconf: str
    autoheader: str

    @property
    def transfer_name(self) -> str:
        """Basename of the transfer tool (``curl`` or ``wget``)."""
        name = self.transfer.replace("\\", "/").rsplit("/", 1)[-1]
        return name.removesuffix(".exe")


@dataclass
class PrerequisiteResult:
    """Result of prerequisite checks."""

    all_available: bool
    missing: list[str]
    found: dict[str, str] = field(default_factory=dict)
    platform_name: str = "unknown"


class PrerequisiteChecker:
    """
    Check required external tools are installed.

    Required tools:
    - git (submodule status/sync/update)
    - tar (unpacking the documentation bundle)
    - curl or wget (downloading the documentation bundle)
    - autoconf and autoheader (regenerating configure scripts)
    """

    # Each role is satisfied by the first alternative found in PATH
    REQUIRED_TOOLS: ClassVar[dict[str, tuple[str, ...]]] = {
        "git": ("git",),
        "tar": ("tar",),
        "transfer": ("curl", "wget"),
        "autoconf": ("autoconf",),
        "autoheader": ("autoheader",),
    }

    @classmethod
    def find_tool(cls, tool_name: str) -> str | None:
        """
        Find a single tool in PATH.

        Args:
            tool_name: Name of the executable

        Returns:
            Absolute path, or None when the tool is not installed
        """
        result = shutil.which(tool_name)
        if result:
            logger.debug(f"Found {tool_name} at {result}")
        else:
            logger.debug(f"Tool not found: {tool_name}")
        return result

    @classmethod
    def check_all(cls) -> PrerequisiteResult:
        """
        Check all prerequisites and return comprehensive result.

        Example:
            >>> result = PrerequisiteChecker.check_all()
            >>> if not result.all_available:
            ...     print(f"Missing: {result.missing}")
        """
        missing: list[str] = []
        found: dict[str, str] = {}

        for role, alternatives in cls.REQUIRED_TOOLS.items():
            for tool in alternatives:
                path = cls.find_tool(tool)
                if path:
                    found[role] = path
                    break
            else:
                missing.append(" or ".join(alternatives))

        result = PrerequisiteResult(
            all_available=not missing,
            missing=missing,
            found=found,
            platform_name=cls.detect_platform(),
        )

        if result.all_available:
            logger.debug(f"All prerequisites available ({result.platform_name})")
        else:
            logger.error(f"Missing prerequisites: {', '.join(missing)}")

        return result

    @classmethod
    def locate(cls) -> ToolPaths:
        """
        Resolve every required tool or fail.

        Raises:
            PrerequisiteError: If any tool is absent, listing all of them
        """
        result = cls.check_all()
        if not result.all_available:
            raise PrerequisiteError(cls.format_missing_message(result.missing, result.platform_name))
        return ToolPaths(**result.found)

    @classmethod
    def detect_platform(cls) -> str:
        """Detect the operating system platform (macos, linux, windows, unknown)."""
        system = platform.system().lower()

        if system == "darwin":
            return "macos"
        if system in ("linux", "windows"):
            return system
        return "unknown"

    @classmethod
    def format_missing_message(cls, missing: list[str], platform_name: str) -> str:
        """
        Format installation instructions for missing tools.

        Example:
            >>> msg = PrerequisiteChecker.format_missing_message(["autoconf"], "linux")
            >>> "sudo apt-get install autoconf" in msg
            True
        """
        if not missing:
            return "All prerequisites are installed."

        lines: list[str] = ["Missing required tools:", ""]
        lines.extend(f"  - {tool}" for tool in missing)
        lines.append("")

        packages = sorted({cls._package_for(tool) for tool in missing})
        if platform_name == "macos":
            lines.append(f"Install with:  brew install {' '.join(packages)}")
        elif platform_name == "linux":
            lines.append(f"Install with:  sudo apt-get install {' '.join(packages)}")
        else:
            lines.append(f"Please install: {', '.join(packages)}")

        lines.append("")
        lines.append("After installing, run 'swiprep' again.")
        return "\n".join(lines)

    @staticmethod
    def _package_for(tool: str) -> str:
        # autoheader ships with autoconf; "curl or wget" installs curl
        if tool == "autoheader":
            return "autoconf"
        return tool.split(" or ")[0]


# Convenience function for CLI use
def locate_tools() -> ToolPaths:
    """Resolve all required tools (convenience function)."""
    return PrerequisiteChecker.locate()
