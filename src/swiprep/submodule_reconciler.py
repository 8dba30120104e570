"""Submodule reconciliation.

Brings the submodules of a checkout in line with what the superproject
records:

1. Re-sync submodule URLs when ``.gitmodules`` changed (metadata only).
2. Initialize the target modules that were never fetched.
3. Update every stale module, target or not.

Steps 2 and 3 are each a single batch confirmed once. Running the
reconciler twice without outside changes performs no mutation the second
time: both batches come out empty and the run reports "up to date".
"""

import logging
from dataclasses import dataclass, field

from swiprep.modules.git_submodules import GitSubmoduleClient, ModuleState
from swiprep.modules.interaction_handler import InteractionHandler
from swiprep.modules.module_registry import Module

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """What a reconciliation run did."""

    synced: bool = False
    initialized: list[str] = field(default_factory=list)
    declined_init: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    declined_update: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def mutated(self) -> bool:
        return self.synced or bool(self.initialized) or bool(self.updated)


class SubmoduleReconciler:
    """Reconcile the target modules against the live submodule state.

    Args:
        client: Git submodule client for the checkout
        handler: Confirmation capability
    """

    def __init__(self, client: GitSubmoduleClient, handler: InteractionHandler):
        self.client = client
        self.handler = handler

    def reconcile(self, targets: list[Module]) -> ReconcileResult:
        """Run the sync, init and update steps in order.

        Raises:
            SubmoduleError: If any git operation fails
            ConfirmationLimitError: If a confirmation bound is exceeded
        """
        result = ReconcileResult()

        drifted = self.client.drifted_urls()
        if drifted:
            logger.info(f"Submodule URLs changed for: {', '.join(drifted)}; syncing")
            self.client.sync()
            result.synced = True

        status = self.client.status()

        uninitialized: list[str] = []
        for module in targets:
            entry = status.get(module.path)
            if entry is None:
                logger.debug(f"{module.path} is not a submodule of this checkout")
                result.missing.append(module.path)
            elif entry.state is ModuleState.UNINITIALIZED:
                uninitialized.append(module.path)

        if uninitialized:
            self._list("The following submodules are not initialized:", uninitialized)
            if self.handler.confirm(f"Initialize {len(uninitialized)} submodule(s)?"):
                self.client.init(uninitialized)
                result.initialized = uninitialized
            else:
                logger.info("Skipping submodule initialization")
                result.declined_init = uninitialized

        # Stale is computed over every submodule, after initialization
        if result.initialized:
            status = self.client.status()

        stale: list[str] = []
        for path, entry in status.items():
            if entry.state is ModuleState.STALE:
                stale.append(path)
            elif entry.state is ModuleState.CONFLICT:
                self.handler.show_warning(f"{path} has merge conflicts; not touching it")

        if not stale:
            self.handler.show_info("Submodules are up to date")
            return result

        self._list("The following submodules are not up to date:", stale)
        if self.handler.confirm(f"Update {len(stale)} submodule(s)?"):
            self.client.update(stale)
            result.updated = stale
        else:
            logger.info("Skipping submodule update")
            result.declined_update = stale

        return result

    def _list(self, title: str, paths: list[str]) -> None:
        self.handler.show_info(title)
        for path in paths:
            self.handler.show_info(f"  {path}")
