"""User interaction abstraction for the CLI, unattended runs and testing.

The engines never talk to the terminal directly. They receive an
InteractionHandler and ask it yes/no questions or let it pick among a
few choices, so they can run under a real terminal (CLIInteractionHandler),
unattended with ``--yes`` (AutoConfirmHandler) or in tests
(MockInteractionHandler).

Both terminal-facing handlers are bounded: repeated invalid answers and
runaway auto-confirmation raise ConfirmationLimitError, which aborts the
whole run rather than just the current question.

Example:
    >>> handler = CLIInteractionHandler()
    >>> if handler.confirm("Initialize 3 submodules?"):
    ...     handler.show_info("Initializing...")

    Testing example:
    >>> test_handler = MockInteractionHandler(confirm_responses=[True])
    >>> test_handler.confirm("Continue?")
    True
"""

from typing import Protocol, runtime_checkable

import click

from swiprep.errors import ConfirmationLimitError

DEFAULT_MAX_INVALID_ANSWERS = 5
DEFAULT_MAX_AUTO_CONFIRMS = 20

_YES = ("y", "yes")
_NO = ("n", "no")


@runtime_checkable
class InteractionHandler(Protocol):
    """Protocol for user interaction."""

    def prompt_choice(
        self,
        message: str,
        choices: list[tuple[str, str]],
        default: int = 0,
    ) -> int:
        """Prompt user to select from multiple choices.

        Args:
            message: Prompt message to display
            choices: List of (key, description) tuples
            default: Index returned when the user just presses Enter

        Returns:
            Zero-based index of selected choice

        Raises:
            ValueError: If choices is empty
            ConfirmationLimitError: If too many invalid answers were given
        """
        ...

    def confirm(self, message: str, default: bool = True) -> bool:
        """Prompt for yes/no confirmation.

        Raises:
            ConfirmationLimitError: If a confirmation bound is exceeded
        """
        ...

    def show_warning(self, message: str) -> None:
        """Display a warning message."""
        ...

    def show_info(self, message: str) -> None:
        """Display an informational message."""
        ...


class CLIInteractionHandler:
    """Click-based terminal interaction handler.

    Reads one line per question. Accepts y/yes/n/no (case-insensitive) and
    an empty line for the default; anything else is re-asked up to
    ``max_invalid_answers`` times before the run is aborted.
    """

    def __init__(self, max_invalid_answers: int = DEFAULT_MAX_INVALID_ANSWERS):
        self.max_invalid_answers = max_invalid_answers

    def _read_answer(self, prompt: str, default: str) -> str:
        return click.prompt(prompt, default=default, show_default=False, type=str)

    def prompt_choice(
        self,
        message: str,
        choices: list[tuple[str, str]],
        default: int = 0,
    ) -> int:
        """Prompt user to select a choice by its key.

        Example:
            >>> handler = CLIInteractionHandler()
            >>> idx = handler.prompt_choice(
            ...     "Download documentation?", [("y", "Yes"), ("n", "No")]
            ... )
        """
        if not choices:
            raise ValueError("choices cannot be empty")

        click.echo()
        click.secho(message, fg="green", bold=True)
        for key, description in choices:
            click.echo(f"  {click.style(key, fg='cyan')}) {description}")
        click.echo()

        keys = [key.lower() for key, _ in choices]
        default_key = choices[default][0]
        prompt = f"Your choice [{'/'.join(k for k, _ in choices)}]"

        for _ in range(self.max_invalid_answers):
            answer = self._read_answer(prompt, default_key).strip().lower()
            if answer in keys:
                return keys.index(answer)
            click.secho(f"Please answer one of: {', '.join(keys)}", fg="red")

        raise ConfirmationLimitError(
            f"No valid answer after {self.max_invalid_answers} attempts: {message}"
        )

    def confirm(self, message: str, default: bool = True) -> bool:
        """Prompt for yes/no confirmation with colored output."""
        prompt = click.style(f"{message} [{'Y/n' if default else 'y/N'}]", fg="yellow")
        default_answer = "y" if default else "n"

        for _ in range(self.max_invalid_answers):
            answer = self._read_answer(prompt, default_answer).strip().lower()
            if answer in _YES:
                return True
            if answer in _NO:
                return False
            click.secho("Please answer yes or no", fg="red")

        raise ConfirmationLimitError(
            f"No valid answer after {self.max_invalid_answers} attempts: {message}"
        )

    def show_warning(self, message: str) -> None:
        """Display a warning message in yellow on stderr."""
        click.secho(f"Warning: {message}", fg="yellow", err=True)

    def show_info(self, message: str) -> None:
        """Display an informational message."""
        click.secho(message, fg="green")


class AutoConfirmHandler(CLIInteractionHandler):
    """Unattended handler used with ``--yes``.

    Every confirmation is answered yes and echoed so the log shows what
    was decided. Confirmations are counted; once ``max_auto_confirms`` is
    exceeded the run aborts, a safety valve against loops that would keep
    mutating the checkout unattended. Choices silently take their default.
    """

    def __init__(
        self,
        max_auto_confirms: int = DEFAULT_MAX_AUTO_CONFIRMS,
        max_invalid_answers: int = DEFAULT_MAX_INVALID_ANSWERS,
    ):
        super().__init__(max_invalid_answers=max_invalid_answers)
        self.max_auto_confirms = max_auto_confirms
        self.confirm_count = 0

    def prompt_choice(
        self,
        message: str,
        choices: list[tuple[str, str]],
        default: int = 0,
    ) -> int:
        if not choices:
            raise ValueError("choices cannot be empty")
        return default

    def confirm(self, message: str, default: bool = True) -> bool:
        self.confirm_count += 1
        if self.confirm_count > self.max_auto_confirms:
            raise ConfirmationLimitError(
                f"Auto-confirmed more than {self.max_auto_confirms} questions; "
                "aborting to avoid an unattended loop"
            )
        click.echo(f"{message} [auto: yes]")
        return True


class MockInteractionHandler:
    """Mock interaction handler for testing with pre-programmed responses.

    Tracks all interactions for verification in tests.

    Example:
        >>> handler = MockInteractionHandler(
        ...     choice_responses=[0],
        ...     confirm_responses=[True, False]
        ... )
        >>> handler.prompt_choice("Select:", [("a", "opt a"), ("b", "opt b")])
        0
        >>> handler.confirm("Continue?")
        True
        >>> len(handler.interactions)
        2
    """

    def __init__(
        self,
        choice_responses: list[int] | None = None,
        confirm_responses: list[bool] | None = None,
    ):
        self.choice_responses = choice_responses or []
        self.confirm_responses = confirm_responses or []
        self.interactions: list[dict] = []
        self._choice_index = 0
        self._confirm_index = 0

    def prompt_choice(
        self,
        message: str,
        choices: list[tuple[str, str]],
        default: int = 0,
    ) -> int:
        """Return next pre-programmed choice response.

        Raises:
            ValueError: If choices is empty or the response is out of range
            IndexError: If no more choice responses available
        """
        if not choices:
            raise ValueError("choices cannot be empty")

        if self._choice_index >= len(self.choice_responses):
            raise IndexError(
                f"No more choice responses available. "
                f"Provided {len(self.choice_responses)}, "
                f"needed {self._choice_index + 1}"
            )

        response = self.choice_responses[self._choice_index]
        self._choice_index += 1

        if not 0 <= response < len(choices):
            raise ValueError(
                f"Invalid pre-programmed response {response} for {len(choices)} choices"
            )

        self.interactions.append(
            {
                "type": "choice",
                "message": message,
                "choices": choices,
                "default": default,
                "response": response,
            }
        )
        return response

    def confirm(self, message: str, default: bool = True) -> bool:
        """Return next pre-programmed confirmation response.

        Raises:
            IndexError: If no more confirm responses available
        """
        if self._confirm_index >= len(self.confirm_responses):
            raise IndexError(
                f"No more confirm responses available. "
                f"Provided {len(self.confirm_responses)}, "
                f"needed {self._confirm_index + 1}"
            )

        response = self.confirm_responses[self._confirm_index]
        self._confirm_index += 1

        self.interactions.append(
            {
                "type": "confirm",
                "message": message,
                "default": default,
                "response": response,
            }
        )
        return response

    def show_warning(self, message: str) -> None:
        """Record warning message without displaying."""
        self.interactions.append({"type": "warning", "message": message})

    def show_info(self, message: str) -> None:
        """Record info message without displaying."""
        self.interactions.append({"type": "info", "message": message})

    def get_interactions_by_type(self, interaction_type: str) -> list[dict]:
        """Get all interactions of a specific type.

        Example:
            >>> handler = MockInteractionHandler()
            >>> handler.show_info("Info 1")
            >>> handler.show_warning("Warn 1")
            >>> len(handler.get_interactions_by_type("info"))
            1
        """
        return [
            interaction
            for interaction in self.interactions
            if interaction["type"] == interaction_type
        ]
