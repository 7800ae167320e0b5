"""Loading and writing markdown documents of a content tree.

Scanning produces an explicit, ordered list of Document descriptors so
that building the identifier map and rewriting links can run as separate
passes over memory instead of being interleaved with the directory walk.
"""

import logging
import os
from typing import Iterable, List, Optional

from .errors import FilesystemError
from .frontmatter_handler import FrontmatterHandler
from .models import Document, MARKDOWN_EXTENSION
from .path_normalizer import normalize_path

logger = logging.getLogger(__name__)


def list_markdown_files(root_dir: str, exclude: Optional[Iterable[str]] = None) -> List[str]:
    """List markdown files under root_dir, relative to it.

    Args:
        root_dir: Content root to walk
        exclude: Absolute paths of directories to skip entirely

    Returns:
        Sorted list of normalized relative paths (e.g., ["a.md", "sub/b.md"])
    """
    excluded = {os.path.realpath(path) for path in (exclude or [])}
    results = []

    for current_dir, dir_names, file_names in os.walk(root_dir):
        # Prune excluded directories in place so os.walk doesn't descend
        dir_names[:] = sorted(
            name for name in dir_names
            if os.path.realpath(os.path.join(current_dir, name)) not in excluded
        )
        for name in sorted(file_names):
            if not name.endswith(MARKDOWN_EXTENSION):
                continue
            rel_path = os.path.relpath(os.path.join(current_dir, name), root_dir)
            results.append(normalize_path(rel_path))

    # os.walk yields a directory's files before its subdirectories
    return sorted(results)


def read_document(root_dir: str, rel_path: str) -> Document:
    """Load one document from the content tree.

    Raises:
        FilesystemError: If the file can't be read
        FrontmatterError: If its frontmatter is malformed
    """
    abs_path = os.path.join(root_dir, *rel_path.split('/'))
    content = read_text(abs_path)
    frontmatter, body = FrontmatterHandler.parse(content, abs_path)
    return Document(path=rel_path, abs_path=abs_path, frontmatter=frontmatter, body=body)


def scan_documents(root_dir: str, exclude: Optional[Iterable[str]] = None) -> List[Document]:
    """Load every markdown document under root_dir.

    Args:
        root_dir: Content root to walk
        exclude: Absolute paths of directories to skip entirely

    Returns:
        Documents ordered by relative path
    """
    documents = [read_document(root_dir, rel_path) for rel_path in list_markdown_files(root_dir, exclude)]
    logger.debug(f"Scanned {len(documents)} document(s) under {root_dir}")
    return documents


def write_document(document: Document) -> None:
    """Persist a document (frontmatter and body) to its abs_path.

    Raises:
        FilesystemError: If the file can't be written
    """
    content = FrontmatterHandler.serialize(document.frontmatter, document.body)
    write_text(document.abs_path, content)


def read_text(abs_path: str) -> str:
    """Read a UTF-8 text file.

    Raises:
        FilesystemError: If the file can't be read
    """
    try:
        with open(abs_path, 'r', encoding='utf-8') as f:
            return f.read()
    except PermissionError:
        raise FilesystemError(abs_path, 'read', 'Permission denied')
    except UnicodeError as e:
        raise FilesystemError(abs_path, 'read', f"Not valid UTF-8: {e}")
    except OSError as e:
        raise FilesystemError(abs_path, 'read', str(e))


def write_text(abs_path: str, content: str) -> None:
    """Write a text file as UTF-8.

    Raises:
        FilesystemError: If the file can't be written
    """
    try:
        with open(abs_path, 'w', encoding='utf-8') as f:
            f.write(content)
    except PermissionError:
        raise FilesystemError(abs_path, 'write', 'Permission denied')
    except UnicodeError as e:
        raise FilesystemError(abs_path, 'write', f"Cannot encode as UTF-8: {e}")
    except OSError as e:
        raise FilesystemError(abs_path, 'write', str(e))
