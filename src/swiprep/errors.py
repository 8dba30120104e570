"""Fatal error hierarchy.

Every condition that must stop the run derives from PrepareError. The CLI
catches it, prints the message to stderr and exits nonzero. Documentation
problems are not part of this hierarchy: they are downgraded to warnings
by the doc sync engine.
"""


class PrepareError(Exception):
    """Base exception for fatal swiprep errors."""

    pass


class EnvironmentCheckError(PrepareError):
    """Raised when the run environment is unusable (privilege, directory)."""

    pass


class ConfirmationLimitError(PrepareError):
    """Raised when a confirmation bound (retries or auto-confirms) is exceeded."""

    pass


__all__ = ["ConfirmationLimitError", "EnvironmentCheckError", "PrepareError"]
