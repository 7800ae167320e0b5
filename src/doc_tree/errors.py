"""Typed exception hierarchy for document tree errors.

This module defines all custom exceptions raised while reading, mirroring
and writing the local markdown tree. All exceptions inherit from
DocTreeError for easy catching.
"""

from typing import Optional

from src.publisher.errors import SyncError


class DocTreeError(SyncError):
    """Base exception for all document tree errors."""
    pass


class FilesystemError(DocTreeError):
    """Raised when filesystem operations fail (read, write, permissions, etc)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class MirrorError(FilesystemError):
    """Raised when the workspace mirror cannot be built."""

    def __init__(self, source: str, destination: str, reason: Optional[str] = None):
        super().__init__(source, f"mirror to {destination}", reason)
        self.source = source
        self.destination = destination


class ConfigError(DocTreeError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file is not found."""

    def __init__(self, config_path: str):
        super().__init__(f"Configuration file not found at {config_path}")
        self.config_path = config_path


class FrontmatterError(DocTreeError):
    """Raised when YAML frontmatter parsing or validation fails."""

    def __init__(self, file_path: str, message: str):
        super().__init__(
            f"Frontmatter error in {file_path}: {message}"
        )
        self.file_path = file_path
        self.message = message
