"""Root pytest configuration."""
import logging
import os

import pytest

from clientconfig.utils.logging import disable_logging


@pytest.fixture(autouse=True)
def isolated_settings_env(monkeypatch):
    """Keep CLIENTCONFIG_* variables of the developer's shell out of tests."""
    for key in list(os.environ):
        if key.startswith("CLIENTCONFIG_"):
            monkeypatch.delenv(key, raising=False)
    disable_logging()
    logging.getLogger("clientconfig").setLevel(logging.NOTSET)


# Import fixtures from fixtures module to make them available globally
pytest_plugins = [
    "tests.fixtures.configs",
]
