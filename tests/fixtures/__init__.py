"""Test fixtures for document trees and the external publisher.

These fixtures are shared by unit and integration tests.
"""

from .sample_docs import (
    BASE_URL,
    PARENT_ID,
    SPACE_KEY,
    FakePublisher,
    make_config_dict,
    page_url,
    read_tree,
    success_line,
    write_config,
    write_doc,
)

__all__ = [
    "BASE_URL",
    "PARENT_ID",
    "SPACE_KEY",
    "FakePublisher",
    "make_config_dict",
    "page_url",
    "read_tree",
    "success_line",
    "write_config",
    "write_doc",
]
