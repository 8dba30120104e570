"""Unit tests for interaction_handler module.

Tests CLI, auto-confirm and mock handlers for user interaction.
"""

from unittest.mock import patch

import pytest

from swiprep.errors import ConfirmationLimitError
from swiprep.modules.interaction_handler import (
    AutoConfirmHandler,
    CLIInteractionHandler,
    InteractionHandler,
    MockInteractionHandler,
)

CHOICES = [("d", "Download"), ("a", "Ask"), ("w", "Warn")]


class TestCLIInteractionHandler:
    """Test the terminal handler."""

    def test_satisfies_protocol(self):
        assert isinstance(CLIInteractionHandler(), InteractionHandler)

    @pytest.mark.parametrize("answer", ["y", "Y", "yes", "YES", " yes "])
    @patch("swiprep.modules.interaction_handler.click.prompt")
    def test_confirm_yes_answers(self, mock_prompt, answer):
        mock_prompt.return_value = answer
        assert CLIInteractionHandler().confirm("Continue?") is True

    @pytest.mark.parametrize("answer", ["n", "N", "no", "No"])
    @patch("swiprep.modules.interaction_handler.click.prompt")
    def test_confirm_no_answers(self, mock_prompt, answer):
        mock_prompt.return_value = answer
        assert CLIInteractionHandler().confirm("Continue?") is False

    @patch("swiprep.modules.interaction_handler.click.prompt")
    def test_confirm_passes_default_answer(self, mock_prompt):
        """Empty input is turned into the default by click.prompt."""
        mock_prompt.return_value = "n"
        CLIInteractionHandler().confirm("Continue?", default=False)
        assert mock_prompt.call_args.kwargs["default"] == "n"

    @patch("swiprep.modules.interaction_handler.click.secho")
    @patch("swiprep.modules.interaction_handler.click.prompt")
    def test_confirm_reasks_on_invalid_input(self, mock_prompt, mock_secho):
        mock_prompt.side_effect = ["maybe", "sure", "y"]
        assert CLIInteractionHandler(max_invalid_answers=5).confirm("Continue?") is True
        assert mock_prompt.call_count == 3

    @patch("swiprep.modules.interaction_handler.click.secho")
    @patch("swiprep.modules.interaction_handler.click.prompt")
    def test_confirm_invalid_input_bound_aborts(self, mock_prompt, mock_secho):
        mock_prompt.return_value = "perhaps"
        handler = CLIInteractionHandler(max_invalid_answers=3)

        with pytest.raises(ConfirmationLimitError, match="3 attempts"):
            handler.confirm("Continue?")
        assert mock_prompt.call_count == 3

    @patch("swiprep.modules.interaction_handler.click.echo")
    @patch("swiprep.modules.interaction_handler.click.secho")
    @patch("swiprep.modules.interaction_handler.click.prompt")
    def test_prompt_choice_by_key(self, mock_prompt, mock_secho, mock_echo):
        mock_prompt.return_value = "W"
        assert CLIInteractionHandler().prompt_choice("Pick:", CHOICES) == 2

    @patch("swiprep.modules.interaction_handler.click.echo")
    @patch("swiprep.modules.interaction_handler.click.secho")
    @patch("swiprep.modules.interaction_handler.click.prompt")
    def test_prompt_choice_default_key_offered(self, mock_prompt, mock_secho, mock_echo):
        mock_prompt.return_value = "a"
        CLIInteractionHandler().prompt_choice("Pick:", CHOICES, default=1)
        assert mock_prompt.call_args.kwargs["default"] == "a"

    @patch("swiprep.modules.interaction_handler.click.echo")
    @patch("swiprep.modules.interaction_handler.click.secho")
    @patch("swiprep.modules.interaction_handler.click.prompt")
    def test_prompt_choice_invalid_bound_aborts(self, mock_prompt, mock_secho, mock_echo):
        mock_prompt.return_value = "x"
        with pytest.raises(ConfirmationLimitError):
            CLIInteractionHandler(max_invalid_answers=2).prompt_choice("Pick:", CHOICES)
        assert mock_prompt.call_count == 2

    def test_prompt_choice_empty_choices_raises_error(self):
        with pytest.raises(ValueError, match="choices cannot be empty"):
            CLIInteractionHandler().prompt_choice("Pick:", [])

    @patch("swiprep.modules.interaction_handler.click.secho")
    def test_show_warning_goes_to_stderr(self, mock_secho):
        CLIInteractionHandler().show_warning("careful")
        args, kwargs = mock_secho.call_args
        assert "careful" in args[0]
        assert kwargs["err"] is True


class TestAutoConfirmHandler:
    """Test the unattended --yes handler."""

    @patch("swiprep.modules.interaction_handler.click.echo")
    def test_confirms_without_prompting(self, mock_echo):
        handler = AutoConfirmHandler(max_auto_confirms=3)
        with patch("swiprep.modules.interaction_handler.click.prompt") as mock_prompt:
            assert handler.confirm("Update?") is True
            mock_prompt.assert_not_called()
        assert handler.confirm_count == 1

    @patch("swiprep.modules.interaction_handler.click.echo")
    def test_budget_exceeded_aborts(self, mock_echo):
        handler = AutoConfirmHandler(max_auto_confirms=2)
        handler.confirm("one")
        handler.confirm("two")

        with pytest.raises(ConfirmationLimitError, match="more than 2"):
            handler.confirm("three")

    def test_choice_takes_default_silently(self):
        handler = AutoConfirmHandler()
        with patch("swiprep.modules.interaction_handler.click.prompt") as mock_prompt:
            assert handler.prompt_choice("Pick:", CHOICES, default=1) == 1
            mock_prompt.assert_not_called()
        assert handler.confirm_count == 0


class TestMockInteractionHandler:
    """Test the mock handler used throughout the test suite."""

    def test_returns_responses_in_order(self):
        handler = MockInteractionHandler(choice_responses=[2], confirm_responses=[True, False])

        assert handler.confirm("a") is True
        assert handler.prompt_choice("b", CHOICES) == 2
        assert handler.confirm("c") is False
        assert [i["type"] for i in handler.interactions] == ["confirm", "choice", "confirm"]

    def test_running_out_of_responses_raises(self):
        handler = MockInteractionHandler(confirm_responses=[True])
        handler.confirm("a")

        with pytest.raises(IndexError, match="No more confirm responses"):
            handler.confirm("b")

    def test_out_of_range_choice_raises(self):
        handler = MockInteractionHandler(choice_responses=[5])
        with pytest.raises(ValueError, match="Invalid pre-programmed response"):
            handler.prompt_choice("Pick:", CHOICES)

    def test_get_interactions_by_type(self):
        handler = MockInteractionHandler()
        handler.show_info("i1")
        handler.show_warning("w1")
        handler.show_info("i2")

        assert [i["message"] for i in handler.get_interactions_by_type("info")] == ["i1", "i2"]
