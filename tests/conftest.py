"""Root pytest configuration for all tests.

This conftest applies to all test types (unit, integration).
"""

import pytest

from src.doc_tree.config_loader import ConfigLoader
from src.publisher.auth import TOKEN_ALIASES, TOKEN_SOURCES, USER_ALIASES, USER_SOURCES


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, mocker):
    """Keep tests independent of the developer's Confluence environment.

    Clears every variable the config loader and publisher read, and stops
    python-dotenv from loading a .env file.
    """
    names = set(TOKEN_ALIASES + TOKEN_SOURCES + USER_ALIASES + USER_SOURCES)
    for env_keys in ConfigLoader.ENV_MAPPING.values():
        names.update(env_keys)
    for name in names:
        monkeypatch.delenv(name, raising=False)

    mocker.patch("src.doc_tree.config_loader.load_dotenv")
    mocker.patch("src.publisher.auth.load_dotenv")
