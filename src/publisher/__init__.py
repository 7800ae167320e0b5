"""Adapter for the external markdown-confluence publisher.

This package runs the @markdown-confluence/cli publisher as a subprocess,
passes credentials through to it, and parses the page identifiers it
reports for each published document.
"""

from .auth import Authenticator, Credentials
from .errors import (
    SyncError,
    PublisherError,
    PublishError,
    PublisherNotFoundError,
)
from .executor import PublishExecutor
from .output_parser import parse_publish_output

__all__ = [
    'Authenticator',
    'Credentials',
    'SyncError',
    'PublisherError',
    'PublishError',
    'PublisherNotFoundError',
    'PublishExecutor',
    'parse_publish_output',
]
