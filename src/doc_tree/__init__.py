"""Local markdown document tree.

This package reads and writes markdown files with YAML frontmatter,
normalizes the paths used to refer to them, mirrors the tree into an
isolated working copy, and loads the publisher configuration stored at
the tree root.
"""

from .config_loader import ConfigLoader
from .document_scanner import scan_documents, write_document
from .errors import (
    DocTreeError,
    FilesystemError,
    MirrorError,
    ConfigError,
    ConfigNotFoundError,
    FrontmatterError,
)
from .frontmatter_handler import FrontmatterHandler
from .models import Document, PageRef, PublishedPage, PublishConfig
from .path_normalizer import normalize_path
from .workspace_mirror import MIRROR_DIR_NAME, mirror_tree, remove_mirror

__all__ = [
    'ConfigLoader',
    'scan_documents',
    'write_document',
    'DocTreeError',
    'FilesystemError',
    'MirrorError',
    'ConfigError',
    'ConfigNotFoundError',
    'FrontmatterError',
    'FrontmatterHandler',
    'Document',
    'PageRef',
    'PublishedPage',
    'PublishConfig',
    'normalize_path',
    'MIRROR_DIR_NAME',
    'mirror_tree',
    'remove_mirror',
]
