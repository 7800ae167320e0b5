"""Path normalization for comparing document references.

Links, scanned files and publisher output all spell paths differently
("a\\b.md", "/a/b.md", "a/b"). Every comparison in the sync engine goes
through normalize_path() so that two references name the same document
exactly when their normalized forms are equal.
"""

import posixpath

from .models import MARKDOWN_EXTENSION


def normalize_path(path: str) -> str:
    """Canonicalize a path string.

    Replaces backslashes with forward slashes and strips leading and
    trailing slashes. Does not touch the filesystem.

    Args:
        path: Relative or platform-specific path

    Returns:
        Normalized path

    Examples:
        >>> normalize_path("a\\\\b.md")
        'a/b.md'
        >>> normalize_path("/docs/guide/")
        'docs/guide'
    """
    return path.replace('\\', '/').strip('/')


def strip_extension(path: str, extension: str = MARKDOWN_EXTENSION) -> str:
    """Remove a trailing document extension, if present."""
    if path.endswith(extension):
        return path[:-len(extension)]
    return path


def parent_dir(path: str) -> str:
    """Return the normalized parent directory ('' for the root)."""
    parent = posixpath.dirname(normalize_path(path))
    return '' if parent == '.' else parent
