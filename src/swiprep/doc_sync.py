"""Generated documentation bundle synchronization.

The HTML manual is not kept in git. It is published as
``swipl-doc-<version>.tar.gz`` on a list of mirrors and unpacked over the
checkout. This module decides whether the unpacked bundle is missing or
belongs to another version, and drives the fetch-and-unpack cycle over
the mirrors according to the persisted DocPolicy.

Documentation is best effort: download and unpack problems never abort
the run. They end up as warnings in the DocSyncResult, reported once the
whole run is over.
"""

import logging
import shutil
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from swiprep.modules.doc_policy import DocPolicy, DocPolicyStore
from swiprep.modules.interaction_handler import InteractionHandler
from swiprep.modules.subprocess_helper import ToolRunner, safe_run

logger = logging.getLogger(__name__)

ARCHIVE_TEMPLATE = "swipl-doc-{version}.tar.gz"
DOC_README = "README.doc"


class DocFetchError(Exception):
    """Raised when downloading or unpacking the bundle fails (never fatal)."""

    pass


class DocState(Enum):
    """State of the unpacked documentation bundle."""

    ABSENT = "absent"
    OUT_OF_DATE = "out-of-date"
    OK = "ok"


@dataclass(frozen=True)
class DocLayout:
    """Where the bundle lives inside the checkout.

    Attributes:
        doc_dirs: Directories created by unpacking, removed before a new unpack
        index_file: File whose presence means the bundle is installed
        version_file: Marker holding the version of the installed bundle
    """

    doc_dirs: tuple[str, ...] = ("man/Manual",)
    index_file: str = "man/Manual/index.html"
    version_file: str = "man/.doc-version"


@dataclass(frozen=True)
class PolicyChoice:
    """An answer to the policy question: what to remember, what to do now."""

    key: str
    description: str
    remember: DocPolicy
    apply: DocPolicy


# Choices offered when no policy is stored, in prompt order
POLICY_CHOICES: list[PolicyChoice] = [
    PolicyChoice(
        "d",
        "Download now and whenever the documentation is outdated",
        remember=DocPolicy.DOWNLOAD,
        apply=DocPolicy.DOWNLOAD,
    ),
    PolicyChoice(
        "a",
        "Download now and ask next time",
        remember=DocPolicy.ASK,
        apply=DocPolicy.DOWNLOAD,
    ),
    PolicyChoice("w", "Never download, only warn", remember=DocPolicy.WARN, apply=DocPolicy.WARN),
]
DEFAULT_POLICY_CHOICE = 1


@dataclass
class DocSyncResult:
    """Outcome of a documentation sync run."""

    state: DocState
    expected_version: str
    installed_version: str | None = None
    policy: DocPolicy | None = None
    attempts: int = 0
    warnings: list[str] = field(default_factory=list)


class BundleTransfer:
    """Download and unpack bundles with the external transfer and archive tools.

    Args:
        transfer: Path of curl or wget
        tar: Path of tar
        runner: Injected subprocess runner (defaults to safe_run)
        transfer_name: ``curl`` or ``wget``, selects the command line
            (defaults to the basename of ``transfer``)
    """

    def __init__(
        self,
        transfer: str = "curl",
        tar: str = "tar",
        runner: ToolRunner | None = None,
        transfer_name: str | None = None,
    ):
        self.transfer = transfer
        self.tar = tar
        self.transfer_name = transfer_name or Path(transfer).stem
        self._runner = runner or safe_run

    def _download_command(self, url: str, destination: Path) -> list[str]:
        if self.transfer_name == "wget":
            return [self.transfer, "--quiet", "--output-document", str(destination), url]
        return [
            self.transfer,
            "--fail",
            "--location",
            "--silent",
            "--show-error",
            "--output",
            str(destination),
            url,
        ]

    def download(self, url: str, destination: Path) -> None:
        """Fetch ``url`` into ``destination``.

        Raises:
            DocFetchError: If the transfer tool reports failure
        """
        result = self._runner(self._download_command(url, destination), cwd=destination.parent)
        if not result.success:
            raise DocFetchError(
                f"Failed to download {url} (exit code {result.returncode}): "
                f"{result.stderr.strip()}"
            )

    def unpack(self, archive: Path, target: Path) -> None:
        """Unpack a gzipped tarball into ``target``.

        Raises:
            DocFetchError: If tar reports failure
        """
        result = self._runner([self.tar, "-xzf", str(archive), "-C", str(target)], cwd=target)
        if not result.success:
            raise DocFetchError(f"Failed to unpack {archive.name}: {result.stderr.strip()}")


class DocSyncEngine:
    """Keep the documentation bundle in line with the source version.

    Args:
        root: Top directory of the checkout
        version: Expected version, from the VERSION marker
        mirrors: Ordered base URLs offering the bundle
        store: Persisted documentation policy
        handler: Confirmation capability
        transfer: Download/unpack collaborator
        force_download: Download this run regardless of the stored policy,
            without reading or writing it
        layout: Bundle locations inside the checkout
        unattended: Running under ``--yes``; an undetermined policy becomes
            ASK without prompting
    """

    def __init__(
        self,
        root: Path,
        version: str,
        mirrors: Sequence[str],
        store: DocPolicyStore,
        handler: InteractionHandler,
        transfer: BundleTransfer | None = None,
        force_download: bool = False,
        layout: DocLayout | None = None,
        unattended: bool = False,
    ):
        self.root = root
        self.version = version
        self.mirrors = tuple(mirrors)
        self.store = store
        self.handler = handler
        self.transfer = transfer or BundleTransfer()
        self.force_download = force_download
        self.layout = layout or DocLayout()
        self.unattended = unattended

    @property
    def archive_name(self) -> str:
        return ARCHIVE_TEMPLATE.format(version=self.version)

    def installed_version(self) -> str | None:
        marker = self.root / self.layout.version_file
        if not marker.exists():
            return None
        return marker.read_text(encoding="utf-8").strip() or None

    def inspect(self) -> DocState:
        """Derive the bundle state from the files on disk."""
        if not (self.root / self.layout.index_file).exists():
            return DocState.ABSENT
        if self.installed_version() != self.version:
            return DocState.OUT_OF_DATE
        return DocState.OK

    def sync(self) -> DocSyncResult:
        """Try the mirrors in order until the bundle is current or none are left.

        Raises:
            ConfirmationLimitError: If a confirmation bound is exceeded
        """
        state = self.inspect()
        result = DocSyncResult(state=state, expected_version=self.version)
        failures: list[str] = []
        policy: DocPolicy | None = None

        for mirror in self.mirrors:
            if state is DocState.OK:
                break

            if policy is None:
                policy = self._resolve_policy(state)
                result.policy = policy

            if policy is DocPolicy.WARN:
                logger.info(f"Documentation is {state.value}; policy is warn, not downloading")
                continue
            if policy is DocPolicy.ASK and not self.handler.confirm(
                f"Download documentation for {self.version} from {mirror}?"
            ):
                continue

            result.attempts += 1
            try:
                self._fetch_and_unpack(mirror)
            except DocFetchError as e:
                logger.warning(str(e))
                failures.append(str(e))

            state = self.inspect()

        result.state = state
        result.installed_version = self.installed_version()

        if state is DocState.ABSENT:
            result.warnings.extend(failures)
            result.warnings.append(
                f"The HTML documentation is not installed. See {DOC_README} for how to get it."
            )
        elif state is DocState.OUT_OF_DATE:
            result.warnings.extend(failures)
            result.warnings.append(
                f"Documentation version {result.installed_version or 'unknown'} "
                f"does not match source version {self.version}"
            )

        return result

    def _resolve_policy(self, state: DocState) -> DocPolicy:
        if self.force_download:
            return DocPolicy.DOWNLOAD

        stored = self.store.load()
        if stored is not None:
            return stored

        if self.unattended:
            # Never download unattended without a counted confirmation
            remember = apply = DocPolicy.ASK
        else:
            index = self.handler.prompt_choice(
                f"The HTML documentation is {state.value}. What should swiprep do?",
                [(choice.key, choice.description) for choice in POLICY_CHOICES],
                default=DEFAULT_POLICY_CHOICE,
            )
            remember, apply = POLICY_CHOICES[index].remember, POLICY_CHOICES[index].apply

        self.store.save(remember)
        self.handler.show_info(
            f"Remembered documentation policy '{remember.value}' in {self.store.path.name}; "
            "delete that file to choose again"
        )
        return apply

    def _fetch_and_unpack(self, mirror: str) -> None:
        archive = self.root / self.archive_name
        url = f"{mirror.rstrip('/')}/{self.archive_name}"

        self.handler.show_info(f"Downloading {url}")
        try:
            self.transfer.download(url, archive)
        except DocFetchError:
            archive.unlink(missing_ok=True)
            raise

        try:
            self._remove_bundle()
            self.transfer.unpack(archive, self.root)
            (self.root / self.layout.version_file).parent.mkdir(parents=True, exist_ok=True)
            (self.root / self.layout.version_file).write_text(f"{self.version}\n", encoding="utf-8")
            logger.info(f"Installed documentation {self.version}")
        except OSError as e:
            raise DocFetchError(f"Failed to install {self.archive_name}: {e}") from e
        finally:
            archive.unlink(missing_ok=True)

    def _remove_bundle(self) -> None:
        for doc_dir in self.layout.doc_dirs:
            path = self.root / doc_dir
            if path.is_dir():
                logger.debug(f"Removing {path}")
                shutil.rmtree(path)
        (self.root / self.layout.version_file).unlink(missing_ok=True)
