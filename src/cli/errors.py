"""Typed exception hierarchy for CLI-related errors.

All exceptions inherit from CLIError, which is itself a SyncError.
"""

from src.publisher.errors import SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class DocsDirNotFoundError(CLIError):
    """Raised when the target documentation directory doesn't exist."""

    def __init__(self, docs_dir: str):
        super().__init__(f"Documentation directory not found: {docs_dir}")
        self.docs_dir = docs_dir
