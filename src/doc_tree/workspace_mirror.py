"""Isolated working copy of the document tree.

References are rewritten in a mirror of the tree rather than in the
user's files. The mirror lives inside the folder it copies, so the copy
must skip itself.
"""

import logging
import os
import shutil
from typing import List, Optional

from .errors import MirrorError

logger = logging.getLogger(__name__)

# Well-known name of the mirror subdirectory inside the folder to publish
MIRROR_DIR_NAME = 'docs-fixed-references'


def mirror_tree(source_dir: str, dest_dir: str, exclude: Optional[str] = None) -> None:
    """Recursively copy source_dir into dest_dir.

    Directories are created as needed and dest_dir may not exist yet. Any
    entry whose resolved absolute path equals exclude is skipped, which
    keeps a mirror nested in its own source from copying itself.

    Args:
        source_dir: Directory to copy
        dest_dir: Destination directory
        exclude: Absolute or relative path to leave out of the copy

    Raises:
        MirrorError: If any source entry can't be read or any destination
                     can't be written. The copy is aborted, never silently
                     partial.
    """
    excluded = os.path.realpath(exclude) if exclude else None

    def _ignore(directory: str, names: List[str]) -> List[str]:
        if excluded is None:
            return []
        skipped = [
            name for name in names
            if os.path.realpath(os.path.join(directory, name)) == excluded
        ]
        for name in skipped:
            logger.debug(f"Excluding mirror folder from copy: {os.path.join(directory, name)}")
        return skipped

    if not os.path.isdir(source_dir):
        raise MirrorError(source_dir, dest_dir, "Source directory does not exist")

    try:
        shutil.copytree(source_dir, dest_dir, ignore=_ignore, dirs_exist_ok=True)
    except shutil.Error as e:
        # copytree collects per-file failures and raises them together
        failures = e.args[0] if e.args else []
        if isinstance(failures, list) and failures:
            src, _, reason = failures[0]
            raise MirrorError(src, dest_dir, f"{reason} ({len(failures)} failure(s))")
        raise MirrorError(source_dir, dest_dir, str(e))
    except OSError as e:
        raise MirrorError(source_dir, dest_dir, str(e))

    logger.debug(f"Mirrored {source_dir} -> {dest_dir}")


def remove_mirror(mirror_dir: str) -> bool:
    """Remove the mirror directory.

    Failures are logged as warnings and never raised, so cleanup can't mask
    the outcome of the run that created the mirror.

    Args:
        mirror_dir: Mirror directory to delete

    Returns:
        True if the directory is gone afterwards, False if removal failed
    """
    if not os.path.exists(mirror_dir):
        return True

    try:
        shutil.rmtree(mirror_dir)
        logger.info(f"Cleaned up temporary folder: {mirror_dir}")
        return True
    except OSError as e:
        logger.warning(f"Failed to clean up temporary folder {mirror_dir}: {e}")
        return False
