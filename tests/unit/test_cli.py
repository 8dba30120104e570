"""Tests for the swiprep command line."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from swiprep.cli import main
from swiprep.doc_sync import DocState, DocSyncResult
from swiprep.errors import ConfirmationLimitError
from swiprep.orchestrator import PrepareReport
from swiprep.submodule_reconciler import ReconcileResult


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def mock_orchestrator():
    with patch("swiprep.cli.PrepareOrchestrator") as mock:
        mock.return_value.run.return_value = PrepareReport(version="9.1.2")
        yield mock


class TestUsage:
    def test_unknown_flag_prints_usage(self, cli_runner, mock_orchestrator):
        result = cli_runner.invoke(main, ["--frobnicate"])

        assert result.exit_code == 2
        assert "No such option" in result.output
        assert "Usage:" in result.output
        mock_orchestrator.assert_not_called()

    def test_help(self, cli_runner):
        result = cli_runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "--server" in result.output


class TestFlags:
    def test_flags_reach_configuration(self, cli_runner, mock_orchestrator, tmp_path):
        result = cli_runner.invoke(
            main,
            ["--yes", "--all", "--man", "--server=https://mirror/doc", "--root", str(tmp_path)],
        )

        assert result.exit_code == 0, result.output
        root, config = mock_orchestrator.call_args.args
        assert root == tmp_path.resolve()
        assert config.auto_confirm is True
        assert config.include_all is True
        assert config.force_docs is True
        assert config.mirrors == ["https://mirror/doc"]

    def test_skip_flags_select_phases(self, cli_runner, mock_orchestrator, tmp_path):
        cli_runner.invoke(main, ["--root", str(tmp_path), "--skip-docs", "--skip-configure"])

        phases = mock_orchestrator.return_value.run.call_args.args[0]
        assert (phases.submodules, phases.docs, phases.configure) == (True, False, False)


class TestOutcome:
    def test_report_and_deferred_warnings(self, cli_runner, mock_orchestrator, tmp_path):
        mock_orchestrator.return_value.run.return_value = PrepareReport(
            version="9.1.2",
            submodules=ReconcileResult(initialized=["packages/clib"]),
            docs=DocSyncResult(state=DocState.ABSENT, expected_version="9.1.2"),
            warnings=["The HTML documentation is not installed. See README.doc"],
        )

        result = cli_runner.invoke(main, ["--root", str(tmp_path)])

        assert result.exit_code == 0
        assert "Source version 9.1.2" in result.output
        assert "submodules: 1 initialized, 0 updated" in result.output
        assert "documentation: absent" in result.output
        assert "README.doc" in result.output

    def test_report_untouched_submodules(self, cli_runner, mock_orchestrator, tmp_path):
        mock_orchestrator.return_value.run.return_value = PrepareReport(
            version="9.1.2",
            submodules=ReconcileResult(declined_init=["packages/xpce"]),
        )

        result = cli_runner.invoke(main, ["--root", str(tmp_path)])

        assert result.exit_code == 0
        assert "submodules: unchanged" in result.output
        assert "skipped on request: packages/xpce" in result.output

    def test_fatal_error_exits_nonzero(self, cli_runner, mock_orchestrator, tmp_path):
        mock_orchestrator.return_value.run.side_effect = ConfirmationLimitError("too many")

        result = cli_runner.invoke(main, ["--root", str(tmp_path), "--yes"])

        assert result.exit_code == 1
        assert "Error: too many" in result.output

    @patch("swiprep.modules.environment.os.geteuid", create=True, return_value=1000)
    def test_wrong_directory(self, mock_geteuid, cli_runner, tmp_path):
        result = cli_runner.invoke(main, ["--root", str(tmp_path)])

        assert result.exit_code == 1
        assert "VERSION" in result.output

    def test_bad_config_file(self, cli_runner, tmp_path):
        (tmp_path / ".swiprep.toml").write_text("unknown_key = 1\n")

        result = cli_runner.invoke(main, ["--root", str(tmp_path)])

        assert result.exit_code == 1
        assert "Unknown configuration keys" in result.output
