"""
Stateful fake of the git submodule commands.

Keeps a map of submodule path -> status flag and mutates it the way git
would on ``submodule update --init``, ``submodule update`` and
``submodule sync``, so reconciliation can be run repeatedly against it.
"""

from pathlib import Path

from swiprep.modules.subprocess_helper import SubprocessResult

MUTATING = ("sync", "update")


class FakeGit:
    """Runner-compatible fake git.

    Args:
        modules: path -> status flag (" ", "-", "+", "U")
        recorded_urls: name -> URL in .gitmodules
        configured_urls: name -> URL in .git/config (initialized modules)
        fail: operations ("sync", "init", "update") that exit nonzero
    """

    def __init__(
        self,
        modules: dict[str, str],
        recorded_urls: dict[str, str] | None = None,
        configured_urls: dict[str, str] | None = None,
        fail: set[str] | None = None,
    ):
        self.modules = dict(modules)
        self.recorded_urls = dict(recorded_urls or {})
        self.configured_urls = dict(configured_urls or {})
        self.fail = set(fail or ())
        self.calls: list[list[str]] = []

    @property
    def mutating_calls(self) -> list[list[str]]:
        return [cmd for cmd in self.calls if cmd[1] == "submodule" and cmd[2] in MUTATING]

    def __call__(self, cmd: list[str], cwd: Path | None = None, **kwargs) -> SubprocessResult:
        self.calls.append(list(cmd))
        args = cmd[1:]

        if args[:2] == ["submodule", "status"]:
            return self._ok(self._status())
        if args[0] == "config":
            urls = self.recorded_urls if "--file" in args else self.configured_urls
            return self._config(urls)
        if args[:2] == ["submodule", "sync"]:
            if "sync" in self.fail:
                return self._failed()
            for name in self.configured_urls:
                if name in self.recorded_urls:
                    self.configured_urls[name] = self.recorded_urls[name]
            return self._ok("")
        if args[:2] == ["submodule", "update"]:
            init = "--init" in args
            operation = "init" if init else "update"
            if operation in self.fail:
                return self._failed()
            paths = args[args.index("--") + 1 :]
            for path in paths:
                if init and path in self.recorded_urls:
                    self.configured_urls[path] = self.recorded_urls[path]
                self.modules[path] = " "
            return self._ok("")

        raise AssertionError(f"Unexpected git command: {cmd}")

    def _status(self) -> str:
        lines = []
        for i, (path, flag) in enumerate(sorted(self.modules.items())):
            commit = f"{i:040x}"
            describe = "" if flag == "-" else " (heads/master)"
            lines.append(f"{flag}{commit} {path}{describe}")
        return "\n".join(lines) + "\n"

    def _config(self, urls: dict[str, str]) -> SubprocessResult:
        if not urls:
            return SubprocessResult(returncode=1, stdout="", stderr="")
        out = "".join(f"submodule.{name}.url {url}\n" for name, url in sorted(urls.items()))
        return self._ok(out)

    @staticmethod
    def _ok(stdout: str) -> SubprocessResult:
        return SubprocessResult(returncode=0, stdout=stdout, stderr="")

    @staticmethod
    def _failed() -> SubprocessResult:
        return SubprocessResult(returncode=1, stdout="", stderr="fatal: unable to access remote")
