"""Pytest configuration and fixtures for integration tests.

Integration tests run the complete two-phase cycle on a real temporary
tree, with FakePublisher standing in for the markdown-confluence CLI.
"""

from pathlib import Path
from typing import Callable

import pytest

from src.doc_tree.config_loader import ConfigLoader
from src.reference_sync.two_phase_publisher import TwoPhasePublisher
from tests.fixtures.sample_docs import FakePublisher, write_config


@pytest.fixture
def docs_root(tmp_path) -> Path:
    """Tree root holding a complete .markdown-confluence.json."""
    write_config(tmp_path)
    return tmp_path


@pytest.fixture
def make_publisher(docs_root) -> Callable[[FakePublisher], TwoPhasePublisher]:
    """Build a TwoPhasePublisher for docs_root around a publish callable."""
    def _make(publish):
        config = ConfigLoader.load(ConfigLoader.config_path_for(str(docs_root)))
        return TwoPhasePublisher(str(docs_root), config, publish=publish)
    return _make
