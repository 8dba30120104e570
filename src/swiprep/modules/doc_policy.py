"""Persisted documentation policy.

The policy decides what happens when the generated documentation is
missing or out of date. It is stored as a single token in a marker file
at the top of the checkout; deleting the file makes swiprep ask again.
"""

import logging
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_POLICY_FILE = ".doc-policy"


class DocPolicy(Enum):
    """How to handle a missing or outdated documentation bundle."""

    DOWNLOAD = "download"
    ASK = "ask"
    WARN = "warn"


class DocPolicyStore:
    """Load and save the policy marker.

    ``load`` returns None when no policy was chosen yet. A marker with an
    unknown token is treated the same way, with a warning, so the user is
    asked again and the file is rewritten.
    """

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> DocPolicy | None:
        if not self.path.exists():
            return None

        token = self.path.read_text(encoding="utf-8").strip()
        try:
            policy = DocPolicy(token)
        except ValueError:
            logger.warning(f"Ignoring unknown documentation policy {token!r} in {self.path}")
            return None

        logger.debug(f"Documentation policy from {self.path}: {policy.value}")
        return policy

    def save(self, policy: DocPolicy) -> None:
        self.path.write_text(f"{policy.value}\n", encoding="utf-8")
        logger.debug(f"Saved documentation policy {policy.value} to {self.path}")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
