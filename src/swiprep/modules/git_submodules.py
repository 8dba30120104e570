"""Git submodule client.

Thin wrapper over the git CLI covering exactly the operations the
reconciler needs: query status, compare recorded URLs, sync, and the two
batch operations (init and update). Every batch is a single git call over
the whole path list.

Mutating calls stream git's output to the terminal; queries capture it.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from swiprep.errors import PrepareError
from swiprep.modules.subprocess_helper import SubprocessResult, ToolRunner, safe_run

logger = logging.getLogger(__name__)


class SubmoduleError(PrepareError):
    """Raised when a git submodule operation fails."""

    pass


class ModuleState(Enum):
    """Reconciliation state of a submodule, from ``git submodule status``."""

    UNINITIALIZED = "uninitialized"
    STALE = "stale"
    CURRENT = "current"
    CONFLICT = "conflict"

    @classmethod
    def from_status_flag(cls, flag: str) -> "ModuleState":
        if flag == "-":
            return cls.UNINITIALIZED
        if flag == "+":
            return cls.STALE
        if flag == "U":
            return cls.CONFLICT
        if flag == " ":
            return cls.CURRENT
        raise ValueError(f"Unknown submodule status flag: {flag!r}")


@dataclass(frozen=True)
class SubmoduleStatus:
    """One line of ``git submodule status``."""

    path: str
    commit: str
    state: ModuleState


# " 1a2b3c... packages/clib (V9.1.2-3-g1a2b3c)" or "-1a2b3c... packages/xpce"
_STATUS_RE = re.compile(r"^(?P<flag>[ +\-U])(?P<commit>[0-9a-f]+) (?P<path>.+?)(?: \(.*\))?$")
_URL_KEY_RE = re.compile(r"^submodule\.(?P<name>.+)\.url$")


def parse_status(output: str) -> dict[str, SubmoduleStatus]:
    """Parse ``git submodule status`` output into a path -> status map."""
    statuses: dict[str, SubmoduleStatus] = {}
    for line in output.splitlines():
        if not line.strip():
            continue
        match = _STATUS_RE.match(line)
        if not match:
            logger.warning(f"Unrecognized submodule status line: {line!r}")
            continue
        path = match.group("path")
        statuses[path] = SubmoduleStatus(
            path=path,
            commit=match.group("commit"),
            state=ModuleState.from_status_flag(match.group("flag")),
        )
    return statuses


def parse_url_config(output: str) -> dict[str, str]:
    """Parse ``git config --get-regexp`` output into a name -> URL map."""
    urls: dict[str, str] = {}
    for line in output.splitlines():
        key, _, value = line.strip().partition(" ")
        match = _URL_KEY_RE.match(key)
        if match:
            urls[match.group("name")] = value.strip()
    return urls


class GitSubmoduleClient:
    """Run git submodule operations in a checkout.

    Args:
        root: Top directory of the checkout
        git: Path of the git executable
        runner: Injected subprocess runner (defaults to safe_run)
    """

    def __init__(self, root: Path, git: str = "git", runner: ToolRunner | None = None):
        self.root = root
        self.git = git
        self._runner = runner or safe_run

    def _run(self, args: Sequence[str], capture: bool = True) -> SubprocessResult:
        return self._runner([self.git, *args], cwd=self.root, capture=capture)

    def status(self) -> dict[str, SubmoduleStatus]:
        """Live state of every submodule in the checkout."""
        result = self._run(["submodule", "status"])
        if not result.success:
            raise SubmoduleError(f"git submodule status failed: {result.stderr.strip()}")
        return parse_status(result.stdout)

    def _url_config(self, args: Sequence[str]) -> dict[str, str]:
        result = self._run(["config", *args, "--get-regexp", r"^submodule\..*\.url$"])
        # git config exits 1 when nothing matches
        if result.returncode not in (0, 1):
            raise SubmoduleError(f"git config failed: {result.stderr.strip()}")
        return parse_url_config(result.stdout)

    def recorded_urls(self) -> dict[str, str]:
        """URLs as declared in ``.gitmodules``."""
        if not (self.root / ".gitmodules").exists():
            return {}
        return self._url_config(["--file", ".gitmodules"])

    def configured_urls(self) -> dict[str, str]:
        """URLs as copied into ``.git/config`` by a previous init or sync."""
        return self._url_config([])

    def drifted_urls(self) -> list[str]:
        """Initialized submodules whose configured URL differs from ``.gitmodules``."""
        recorded = self.recorded_urls()
        configured = self.configured_urls()
        return sorted(
            name
            for name, url in configured.items()
            if name in recorded and recorded[name] != url
        )

    def sync(self) -> None:
        """Copy the ``.gitmodules`` URLs into the local configuration."""
        self._mutate(["submodule", "sync", "--quiet"], "sync")

    def init(self, paths: Sequence[str]) -> None:
        """Fetch and check out never-initialized submodules in one batch."""
        self._mutate(["submodule", "update", "--init", "--", *paths], "init")

    def update(self, paths: Sequence[str]) -> None:
        """Move stale submodules to their recorded commits in one batch."""
        self._mutate(["submodule", "update", "--", *paths], "update")

    def _mutate(self, args: list[str], operation: str) -> None:
        logger.debug(f"git {' '.join(args)}")
        result = self._run(args, capture=False)
        if not result.success:
            detail = f": {result.stderr.strip()}" if result.stderr.strip() else ""
            raise SubmoduleError(
                f"git submodule {operation} failed with exit code {result.returncode}{detail}"
            )
