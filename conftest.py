"""Pytest configuration and fixtures for swiprep tests.

CRITICAL: Keeps the developer's own ~/.swiprep/config.toml out of tests.
"""

import pytest

from swiprep.config_manager import ConfigManager


@pytest.fixture(autouse=True)
def isolate_user_config(tmp_path_factory, monkeypatch):
    """Point the user-level config file at an empty temporary directory.

    Without this a real ~/.swiprep/config.toml would change mirrors or
    module lists under the tests' feet.
    """
    config_dir = tmp_path_factory.mktemp("swiprep-home")
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_DIR", config_dir)
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_FILE", config_dir / "config.toml")
    yield
