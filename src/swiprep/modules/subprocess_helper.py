"""Subprocess execution for the external tool chain.

Philosophy:
- Single responsibility: run one external tool and report how it went
- Standard library only (no external dependencies)
- No shell=True, commands are always argument lists

Public API (the "studs"):
    SubprocessResult: Result dataclass
    safe_run: Main execution function
    ToolRunner: Callable type accepted by the engines for injection
"""

import logging
import subprocess
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class SubprocessResult:
    """Result of subprocess execution."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


ToolRunner = Callable[..., SubprocessResult]


def safe_run(
    cmd: Sequence[str],
    cwd: Path | None = None,
    capture: bool = True,
) -> SubprocessResult:
    """
    Execute an external tool and wait for it to finish.

    With ``capture`` the output is collected by background threads that
    drain stdout/stderr, preventing the pipe buffers from filling up while
    git or tar produce large listings. Without ``capture`` the tool
    inherits the terminal so its progress output reaches the user.

    No timeout is imposed: fetches and generation run as long as the tool
    needs, and interruption is left to the tool's own signal handling.

    Args:
        cmd: Command and arguments
        cwd: Working directory
        capture: Collect stdout/stderr instead of inheriting the terminal

    Returns:
        SubprocessResult with output and exit code

    Example:
        >>> result = safe_run(["git", "--version"])
        >>> assert result.returncode == 0
    """
    cmd = list(cmd)
    logger.debug(f"Running: {' '.join(cmd)} (cwd={cwd or '.'})")

    try:
        process = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE if capture else None,
            stderr=subprocess.PIPE if capture else None,
            cwd=cwd,
        )
    except FileNotFoundError:
        # Command not found - standard exit code 127
        return SubprocessResult(
            returncode=127,
            stdout="",
            stderr=f"Command not found: {cmd[0] if cmd else 'unknown'}",
        )
    except OSError as e:
        return SubprocessResult(
            returncode=126,
            stdout="",
            stderr=f"Error executing command: {e!s}",
        )

    if not capture:
        returncode = process.wait()
        return SubprocessResult(returncode=returncode, stdout="", stderr="")

    stdout_data: list[bytes] = []
    stderr_data: list[bytes] = []

    def drain_pipe(pipe, storage):
        """Read from pipe until EOF, store in list."""
        try:
            data = pipe.read()
            if data:
                storage.append(data)
        except OSError:
            # Pipe closed - normal during process termination
            pass

    stdout_thread = threading.Thread(target=drain_pipe, args=(process.stdout, stdout_data))
    stderr_thread = threading.Thread(target=drain_pipe, args=(process.stderr, stderr_data))
    stdout_thread.daemon = True
    stderr_thread.daemon = True
    stdout_thread.start()
    stderr_thread.start()

    returncode = process.wait()

    stdout_thread.join()
    stderr_thread.join()

    stdout = stdout_data[0].decode("utf-8", errors="replace") if stdout_data else ""
    stderr = stderr_data[0].decode("utf-8", errors="replace") if stderr_data else ""

    if returncode != 0:
        logger.debug(f"{cmd[0]} exited with {returncode}: {stderr.strip()[:200]}")

    return SubprocessResult(returncode=returncode, stdout=stdout, stderr=stderr)


__all__ = ["SubprocessResult", "ToolRunner", "safe_run"]
