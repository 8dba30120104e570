"""Tests for the subprocess helper."""

from unittest.mock import Mock, patch

from swiprep.modules.subprocess_helper import SubprocessResult, safe_run


def _process(returncode=0, stdout=b"", stderr=b""):
    process = Mock()
    process.wait.return_value = returncode
    process.returncode = returncode
    process.stdout = Mock()
    process.stderr = Mock()
    process.stdout.read.return_value = stdout
    process.stderr.read.return_value = stderr
    return process


class TestCapture:
    def test_successful_command(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.return_value = _process(0, b"git version 2.43.0\n")

            result = safe_run(["git", "--version"])

            assert result.success is True
            assert result.stdout == "git version 2.43.0\n"

    def test_failure_keeps_stderr(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.return_value = _process(128, b"", b"fatal: not a git repository")

            result = safe_run(["git", "submodule", "status"])

            assert result.success is False
            assert result.returncode == 128
            assert "not a git repository" in result.stderr

    def test_cwd_is_passed(self, tmp_path):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.return_value = _process()
            safe_run(["autoconf"], cwd=tmp_path)
            assert mock_popen.call_args.kwargs["cwd"] == tmp_path


class TestInheritTerminal:
    def test_no_pipes_without_capture(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_popen.return_value = _process(0)

            result = safe_run(["git", "submodule", "update"], capture=False)

            kwargs = mock_popen.call_args.kwargs
            assert kwargs["stdout"] is None
            assert kwargs["stderr"] is None
            assert result == SubprocessResult(returncode=0, stdout="", stderr="")


class TestStartFailures:
    def test_command_not_found(self):
        with patch("subprocess.Popen", side_effect=FileNotFoundError):
            result = safe_run(["no-such-tool"])

        assert result.returncode == 127
        assert "no-such-tool" in result.stderr

    def test_permission_denied(self):
        with patch("subprocess.Popen", side_effect=PermissionError("denied")):
            result = safe_run(["./script"])

        assert result.returncode == 126
        assert result.success is False
