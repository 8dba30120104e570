"""Regeneration of autoconf ``configure`` scripts.

Every directory holding a ``configure.ac`` (or legacy ``configure.in``)
gets a ``configure`` script generated from it. A script is current when
it exists and neither its description file nor any of its generator
inputs is newer. Stale scripts are rebuilt by running ``autoheader``
(only when the description declares a config header) and then
``autoconf`` in that directory.

File access goes through the FileSystem protocol so staleness decisions
can be tested with synthetic timestamps.
"""

import logging
import os
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from swiprep.errors import PrepareError
from swiprep.modules.interaction_handler import InteractionHandler
from swiprep.modules.subprocess_helper import ToolRunner, safe_run

logger = logging.getLogger(__name__)

DESCRIPTION_FILES = ("configure.ac", "configure.in")
ARTIFACT_FILE = "configure"
DEFAULT_GENERATOR_INPUTS = ("aclocal.m4",)
DEFAULT_MACRO_DIR = "ac"

_HEADER_DIRECTIVE_RE = re.compile(r"^\s*AC_CONFIG_HEADERS?\s*\(", re.MULTILINE)


class RegenerationError(PrepareError):
    """Raised when autoheader or autoconf fails."""

    pass


class FileSystem(Protocol):
    """The file queries the regenerator needs."""

    def exists(self, path: Path) -> bool: ...

    def mtime(self, path: Path) -> float: ...

    def list_files(self, directory: Path) -> list[Path]: ...

    def read_text(self, path: Path) -> str: ...

    def walk_dirs(self, root: Path) -> Iterator[Path]: ...


class LocalFileSystem:
    """FileSystem backed by the real disk."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def mtime(self, path: Path) -> float:
        return path.stat().st_mtime

    def list_files(self, directory: Path) -> list[Path]:
        if not directory.is_dir():
            return []
        return sorted(entry for entry in directory.iterdir() if entry.is_file())

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8", errors="replace")

    def walk_dirs(self, root: Path) -> Iterator[Path]:
        """Yield ``root`` and every directory below it, skipping hidden ones."""
        for dirpath, dirnames, _ in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            yield Path(dirpath)


@dataclass(frozen=True)
class ConfigTarget:
    """A description file and the configure script generated from it."""

    description: Path
    artifact: Path

    @property
    def directory(self) -> Path:
        return self.description.parent


@dataclass
class RegenerationResult:
    """Per-run outcome of the regenerator."""

    regenerated: list[Path] = field(default_factory=list)
    current: list[Path] = field(default_factory=list)


class AutoconfRunner:
    """Run the two generation stages in a module directory."""

    def __init__(
        self,
        autoconf: str = "autoconf",
        autoheader: str = "autoheader",
        runner: ToolRunner | None = None,
    ):
        self.autoconf = autoconf
        self.autoheader = autoheader
        self._runner = runner or safe_run

    def _stage(self, tool: str, directory: Path) -> None:
        result = self._runner([tool], cwd=directory, capture=False)
        if not result.success:
            raise RegenerationError(
                f"{Path(tool).name} failed in {directory} with exit code {result.returncode}"
            )

    def headers(self, directory: Path) -> None:
        self._stage(self.autoheader, directory)

    def configure(self, directory: Path) -> None:
        self._stage(self.autoconf, directory)


class ConfigRegenerator:
    """Find configure scripts older than their inputs and rebuild them.

    Args:
        root: Top directory of the checkout
        generator: Runs autoheader/autoconf
        handler: Used to report progress
        fs: File queries (real disk by default)
        generator_inputs: Fixed input files, relative to each module directory
        macro_dir: Auxiliary macro directory whose files are all inputs
    """

    def __init__(
        self,
        root: Path,
        generator: AutoconfRunner,
        handler: InteractionHandler,
        fs: FileSystem | None = None,
        generator_inputs: Sequence[str] = DEFAULT_GENERATOR_INPUTS,
        macro_dir: str = DEFAULT_MACRO_DIR,
    ):
        self.root = root
        self.generator = generator
        self.handler = handler
        self.fs = fs or LocalFileSystem()
        self.generator_inputs = tuple(generator_inputs)
        self.macro_dir = macro_dir

    def find_targets(self) -> list[ConfigTarget]:
        """Every description file in the tree, the top-level one included."""
        targets = []
        for directory in self.fs.walk_dirs(self.root):
            for name in DESCRIPTION_FILES:
                description = directory / name
                if self.fs.exists(description):
                    targets.append(ConfigTarget(description, directory / ARTIFACT_FILE))
                    break
        return targets

    def dependencies(self, target: ConfigTarget) -> list[Path]:
        """Generator inputs of a target, fixed files first, then the macro directory."""
        deps = [target.directory / name for name in self.generator_inputs]
        deps = [dep for dep in deps if self.fs.exists(dep)]
        deps.extend(self.fs.list_files(target.directory / self.macro_dir))
        return deps

    def stale_reason(self, target: ConfigTarget) -> str | None:
        """Why ``target`` needs regeneration, or None when it is current.

        The first newer input found decides; the rest are not examined.
        """
        if not self.fs.exists(target.artifact):
            return f"{ARTIFACT_FILE} does not exist"

        artifact_time = self.fs.mtime(target.artifact)
        for dep in self.dependencies(target):
            if self.fs.mtime(dep) > artifact_time:
                return f"{dep.name} is newer than {ARTIFACT_FILE}"

        if self.fs.mtime(target.description) > artifact_time:
            return f"{target.description.name} is newer than {ARTIFACT_FILE}"

        return None

    def needs_headers(self, target: ConfigTarget) -> bool:
        return bool(_HEADER_DIRECTIVE_RE.search(self.fs.read_text(target.description)))

    def regenerate(self, target: ConfigTarget) -> None:
        """Run the header stage when declared, then the main stage.

        Raises:
            RegenerationError: If either stage fails
        """
        if self.needs_headers(target):
            self.generator.headers(target.directory)
        self.generator.configure(target.directory)

    def run(self) -> RegenerationResult:
        """Regenerate every stale configure script, stopping at the first failure."""
        result = RegenerationResult()

        for target in self.find_targets():
            relative = self._relative(target.directory)
            reason = self.stale_reason(target)
            if reason is None:
                logger.debug(f"{relative}: {ARTIFACT_FILE} is up to date")
                result.current.append(target.directory)
                continue

            logger.info(f"{relative}: {reason}")
            self.regenerate(target)
            self.handler.show_info(f"Generated {relative}/{ARTIFACT_FILE}")
            result.regenerated.append(target.directory)

        return result

    def _relative(self, directory: Path) -> str:
        try:
            return str(directory.relative_to(self.root)) if directory != self.root else "."
        except ValueError:
            return str(directory)
