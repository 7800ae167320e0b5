"""Data models for CLI operations.

This module defines the data models used by the CLI module, following
the dataclass patterns of src/doc_tree/models.py.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): Filesystem, frontmatter or unexpected errors
    - CONFIG_ERROR (2): Required configuration missing or invalid
    - PUBLISH_ERROR (3): The external publisher failed

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIG_ERROR = 2
    PUBLISH_ERROR = 3
