"""Configuration management module.

Loads swiprep settings from TOML. Settings are looked up in, first match
wins:

1. the file passed with ``--config``
2. ``.swiprep.toml`` at the top of the checkout
3. ``~/.swiprep/config.toml``

Without any file the built-in defaults apply. Command line flags are
applied on top by the CLI.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

try:
    import tomli  # type: ignore[import]
except ImportError:
    # Fallback for Python 3.11+, where tomli became tomllib
    try:
        import tomllib as tomli  # type: ignore[import]
    except ImportError as e:
        raise ImportError("toml library not available. Install with: pip install tomli") from e

from swiprep.doc_sync import DocLayout
from swiprep.errors import PrepareError
from swiprep.modules.interaction_handler import (
    DEFAULT_MAX_AUTO_CONFIRMS,
    DEFAULT_MAX_INVALID_ANSWERS,
)
from swiprep.modules.module_registry import DEFAULT_PREFIX, ModuleRegistry

logger = logging.getLogger(__name__)

DEFAULT_MIRRORS = (
    "https://www.swi-prolog.org/download/generated-doc",
    "https://eu.swi-prolog.org/download/generated-doc",
)


class ConfigError(PrepareError):
    """Raised when configuration operations fail."""

    pass


@dataclass
class PrepareConfig:
    """Resolved swiprep configuration."""

    mirrors: list[str] = field(default_factory=lambda: list(DEFAULT_MIRRORS))
    module_prefix: str = DEFAULT_PREFIX
    core_modules: list[str] = field(default_factory=lambda: list(ModuleRegistry.CORE_MODULES))
    all_modules: list[str] = field(default_factory=lambda: list(ModuleRegistry.ALL_MODULES))
    max_invalid_answers: int = DEFAULT_MAX_INVALID_ANSWERS
    max_auto_confirms: int = DEFAULT_MAX_AUTO_CONFIRMS
    doc_policy_file: str = ".doc-policy"
    doc_dirs: list[str] = field(default_factory=lambda: list(DocLayout().doc_dirs))

    # Run-time switches, set from the command line only
    auto_confirm: bool = False
    include_all: bool = False
    force_docs: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrepareConfig":
        """Create from a parsed TOML document.

        Raises:
            ConfigError: On unknown keys or values of the wrong type
        """
        defaults = cls()
        file_keys = {
            "mirrors": list,
            "module_prefix": str,
            "core_modules": list,
            "all_modules": list,
            "max_invalid_answers": int,
            "max_auto_confirms": int,
            "doc_policy_file": str,
            "doc_dirs": list,
        }

        unknown = set(data).difference(file_keys)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        values: dict[str, Any] = {}
        for key, expected in file_keys.items():
            if key not in data:
                continue
            value = data[key]
            if not isinstance(value, expected) or isinstance(value, bool):
                raise ConfigError(f"{key} must be of type {expected.__name__}")
            if expected is list and not all(isinstance(item, str) for item in value):
                raise ConfigError(f"{key} must be a list of strings")
            values[key] = value

        for key in ("max_invalid_answers", "max_auto_confirms"):
            if key in values and values[key] < 1:
                raise ConfigError(f"{key} must be at least 1")

        return replace(defaults, **values)

    def with_overrides(
        self,
        *,
        auto_confirm: bool = False,
        include_all: bool = False,
        force_docs: bool = False,
        server: str | None = None,
    ) -> "PrepareConfig":
        """Apply command line flags; ``server`` replaces the mirror list."""
        config = replace(
            self,
            auto_confirm=auto_confirm,
            include_all=include_all,
            force_docs=force_docs,
        )
        if server:
            config.mirrors = [server]
        return config


class ConfigManager:
    """Locate and load the swiprep configuration file."""

    DEFAULT_CONFIG_DIR = Path.home() / ".swiprep"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"
    PROJECT_CONFIG_NAME = ".swiprep.toml"

    @classmethod
    def get_config_path(cls, root: Path, custom_path: str | None = None) -> Path | None:
        """Get the configuration file to load, or None for defaults.

        Raises:
            ConfigError: If an explicitly given file does not exist
        """
        if custom_path:
            path = Path(custom_path).expanduser().resolve()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        for candidate in (root / cls.PROJECT_CONFIG_NAME, cls.DEFAULT_CONFIG_FILE):
            if candidate.exists():
                return candidate
        return None

    @classmethod
    def load_config(cls, root: Path, custom_path: str | None = None) -> PrepareConfig:
        """Load configuration from file.

        Raises:
            ConfigError: If the file cannot be read or is invalid
        """
        config_path = cls.get_config_path(root, custom_path)

        if config_path is None:
            logger.debug("Config file not found, using defaults")
            return PrepareConfig()

        try:
            with open(config_path, "rb") as f:
                data = tomli.load(f)  # type: ignore[attr-defined]
        except (OSError, tomli.TOMLDecodeError) as e:  # type: ignore[attr-defined]
            raise ConfigError(f"Failed to load config {config_path}: {e}") from e

        logger.debug(f"Loaded config from: {config_path}")
        return PrepareConfig.from_dict(data)
