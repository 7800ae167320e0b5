"""Command-line interface for publishing markdown trees to Confluence.

This package provides the `md-confluence-sync` CLI tool. It loads the
publisher configuration, runs the two-phase publisher and reports
progress and errors with meaningful exit codes.
"""

from .publish_command import PublishCommand
from .models import ExitCode
from .errors import CLIError, DocsDirNotFoundError

__all__ = [
    'PublishCommand',
    'ExitCode',
    'CLIError',
    'DocsDirNotFoundError',
]
