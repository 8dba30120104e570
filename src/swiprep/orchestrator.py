"""Run the preparation phases in order.

Environment and tool checks happen first, before anything in the
checkout changes. Then, strictly in sequence:

    submodules -> documentation -> configure scripts

Fatal errors (PrepareError) propagate out of ``run`` immediately and
leave the tree as the failing tool left it. Documentation warnings are
collected in the report and shown at the very end.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from swiprep.config_manager import PrepareConfig
from swiprep.config_regenerator import AutoconfRunner, ConfigRegenerator, RegenerationResult
from swiprep.doc_sync import BundleTransfer, DocLayout, DocSyncEngine, DocSyncResult
from swiprep.modules.doc_policy import DocPolicyStore
from swiprep.modules.environment import check_environment
from swiprep.modules.git_submodules import GitSubmoduleClient
from swiprep.modules.interaction_handler import (
    AutoConfirmHandler,
    CLIInteractionHandler,
    InteractionHandler,
)
from swiprep.modules.module_registry import ModuleRegistry
from swiprep.modules.prerequisites import ToolPaths, locate_tools
from swiprep.modules.subprocess_helper import ToolRunner, safe_run
from swiprep.submodule_reconciler import ReconcileResult, SubmoduleReconciler

logger = logging.getLogger(__name__)


@dataclass
class PrepareReport:
    """Outcome of every phase that ran."""

    version: str
    submodules: ReconcileResult | None = None
    docs: DocSyncResult | None = None
    configure: RegenerationResult | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass
class Phases:
    """Which phases to run."""

    submodules: bool = True
    docs: bool = True
    configure: bool = True


def make_handler(config: PrepareConfig) -> InteractionHandler:
    """Terminal handler, bounded auto-confirming under ``--yes``."""
    if config.auto_confirm:
        return AutoConfirmHandler(
            max_auto_confirms=config.max_auto_confirms,
            max_invalid_answers=config.max_invalid_answers,
        )
    return CLIInteractionHandler(max_invalid_answers=config.max_invalid_answers)


class PrepareOrchestrator:
    """Wire the engines together for one checkout.

    Args:
        root: Top directory of the checkout
        config: Resolved configuration, command line flags applied
        handler: Interaction capability (derived from config by default)
        runner: Subprocess runner shared by every tool wrapper
        tool_locator: Resolves the external tools
    """

    def __init__(
        self,
        root: Path,
        config: PrepareConfig,
        handler: InteractionHandler | None = None,
        runner: ToolRunner | None = None,
        tool_locator: Callable[[], ToolPaths] = locate_tools,
    ):
        self.root = root
        self.config = config
        self.handler = handler or make_handler(config)
        self.runner = runner or safe_run
        self.tool_locator = tool_locator

    def run(self, phases: Phases | None = None) -> PrepareReport:
        """Check the environment, then run the enabled phases.

        Raises:
            PrepareError: On any fatal condition
        """
        phases = phases or Phases()

        version = check_environment(self.root)
        tools = self.tool_locator()
        report = PrepareReport(version=version)

        if phases.submodules:
            report.submodules = self.reconcile_submodules(tools)
        if phases.docs:
            report.docs = self.sync_docs(tools, version)
            report.warnings.extend(report.docs.warnings)
        if phases.configure:
            report.configure = self.regenerate_configure(tools)

        return report

    def reconcile_submodules(self, tools: ToolPaths) -> ReconcileResult:
        registry = ModuleRegistry(
            prefix=self.config.module_prefix,
            modules=tuple(self.config.all_modules),
            core_modules=tuple(self.config.core_modules),
        )
        client = GitSubmoduleClient(self.root, git=tools.git, runner=self.runner)
        reconciler = SubmoduleReconciler(client, self.handler)
        return reconciler.reconcile(registry.select(include_all=self.config.include_all))

    def sync_docs(self, tools: ToolPaths, version: str) -> DocSyncResult:
        engine = DocSyncEngine(
            root=self.root,
            version=version,
            mirrors=self.config.mirrors,
            store=DocPolicyStore(self.root / self.config.doc_policy_file),
            handler=self.handler,
            transfer=BundleTransfer(
                transfer=tools.transfer,
                tar=tools.tar,
                runner=self.runner,
                transfer_name=tools.transfer_name,
            ),
            force_download=self.config.force_docs,
            layout=DocLayout(doc_dirs=tuple(self.config.doc_dirs)),
            unattended=self.config.auto_confirm,
        )
        return engine.sync()

    def regenerate_configure(self, tools: ToolPaths) -> RegenerationResult:
        regenerator = ConfigRegenerator(
            root=self.root,
            generator=AutoconfRunner(
                autoconf=tools.autoconf,
                autoheader=tools.autoheader,
                runner=self.runner,
            ),
            handler=self.handler,
        )
        return regenerator.run()
