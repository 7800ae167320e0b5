"""Typed exception hierarchy for publisher-related errors.

This module defines the root of the exception hierarchy used across the
sync tool, plus the errors raised when the external markdown-confluence
publisher is invoked. All exceptions carry descriptive messages with
context to help with debugging.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all markdown-confluence-sync errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class PublisherError(SyncError):
    """Base exception for all errors raised by the external publisher."""
    pass


class PublishError(PublisherError):
    """Raised when the external publish operation exits unsuccessfully.

    The captured output is kept verbatim so callers can surface it
    unchanged to the user.

    Attributes:
        exit_code: Process exit code (None if the process never ran to completion)
        stdout: Captured standard output
        stderr: Captured standard error
    """

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ):
        if exit_code is not None:
            full_message = f"Publish failed with exit code {exit_code}: {message}"
        else:
            full_message = f"Publish failed: {message}"
        super().__init__(full_message)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class PublisherNotFoundError(PublisherError):
    """Raised when the publisher executable cannot be found."""

    def __init__(self, command: str):
        super().__init__(
            f"Publisher command '{command}' not found. "
            f"Install Node.js and make sure it is on your PATH."
        )
        self.command = command
