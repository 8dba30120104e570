"""Static catalog of the submodules a checkout is made of.

Modules live under a common namespace prefix (``packages/`` by default)
and are identified by their namespaced path, which is also the path git
uses for the submodule. A subset of them forms the core system that is
always prepared; ``--all`` selects the full catalog.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "packages/"


@dataclass(frozen=True)
class Module:
    """A sub-component of the source tree."""

    name: str
    prefix: str = DEFAULT_PREFIX
    core: bool = False

    @property
    def path(self) -> str:
        """Namespaced path, e.g. ``packages/clib``."""
        return f"{self.prefix}{self.name}"


class ModuleRegistry:
    """Known modules plus the core-vs-all selection policy."""

    ALL_MODULES: ClassVar[tuple[str, ...]] = (
        "archive",
        "bdb",
        "chr",
        "clib",
        "clpqr",
        "cpp",
        "http",
        "inclpr",
        "jpl",
        "json",
        "libedit",
        "mqi",
        "nlp",
        "odbc",
        "paxos",
        "pcre",
        "pengines",
        "pldoc",
        "plunit",
        "protobufs",
        "readline",
        "redis",
        "RDF",
        "semweb",
        "sgml",
        "ssh",
        "ssl",
        "stomp",
        "sweep",
        "table",
        "tipc",
        "utf8proc",
        "xpce",
        "yaml",
        "zlib",
    )

    CORE_MODULES: ClassVar[tuple[str, ...]] = (
        "chr",
        "clib",
        "http",
        "json",
        "libedit",
        "nlp",
        "pcre",
        "pldoc",
        "plunit",
        "readline",
        "sgml",
        "ssl",
        "table",
        "utf8proc",
        "zlib",
    )

    def __init__(
        self,
        prefix: str = DEFAULT_PREFIX,
        modules: tuple[str, ...] | None = None,
        core_modules: tuple[str, ...] | None = None,
    ):
        if prefix and not prefix.endswith("/"):
            prefix = f"{prefix}/"
        names = modules if modules is not None else self.ALL_MODULES
        core = set(core_modules if core_modules is not None else self.CORE_MODULES)

        unknown = core.difference(names)
        if unknown:
            logger.warning(f"Core modules not in catalog, ignored: {', '.join(sorted(unknown))}")

        self.prefix = prefix
        self._modules = tuple(Module(name, prefix, name in core) for name in names)

    @property
    def modules(self) -> tuple[Module, ...]:
        return self._modules

    def select(self, include_all: bool = False) -> list[Module]:
        """Modules to process: the core subset, or everything with ``include_all``."""
        if include_all:
            return list(self._modules)
        return [module for module in self._modules if module.core]
