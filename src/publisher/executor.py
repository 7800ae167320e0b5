"""Invocation of the external markdown-confluence publisher.

This module runs the @markdown-confluence/cli publisher as a subprocess
against a document tree and returns its captured output. Rendering and
uploading pages is entirely the publisher's job.
"""

import logging
import os
import shutil
import subprocess
from typing import List, Optional

from .auth import Authenticator
from .errors import PublishError, PublisherNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_PUBLISH_COMMAND = ['npx', '@markdown-confluence/cli']

# Cache directory the publisher leaves behind in its working directory
PUBLISHER_CACHE_DIR = '.confluence-confluence'

# Publish timeout in seconds (None = wait indefinitely)
PUBLISH_TIMEOUT: Optional[int] = None


class PublishExecutor:
    """Runs the publisher for a document tree.

    Instances are callables taking the content root and returning the
    publisher's stdout, which is the publish operation the sync
    orchestrator expects.

    Example:
        >>> executor = PublishExecutor("/docs", "/docs/.markdown-confluence.json", Authenticator(config))
        >>> output = executor("/docs/docs-fixed-references")
    """

    def __init__(
        self,
        working_dir: str,
        config_path: str,
        authenticator: Optional[Authenticator] = None,
        command: Optional[List[str]] = None,
        timeout: Optional[int] = PUBLISH_TIMEOUT,
    ):
        """Initialize the executor.

        Args:
            working_dir: Directory the publisher runs in (the tree root)
            config_path: Path to the .markdown-confluence.json it reads
            authenticator: Supplies credentials for the subprocess environment
            command: Publisher command line without the --config argument
            timeout: Seconds to wait before giving up (None = no limit)
        """
        self.working_dir = working_dir
        self.config_path = config_path
        self.authenticator = authenticator or Authenticator()
        self.command = list(command) if command else list(DEFAULT_PUBLISH_COMMAND)
        self.timeout = timeout

    def clear_cache(self) -> None:
        """Remove the publisher's cache directory, if present."""
        cache_dir = os.path.join(self.working_dir, PUBLISHER_CACHE_DIR)
        if os.path.exists(cache_dir):
            shutil.rmtree(cache_dir, ignore_errors=True)
            logger.info("Cleared confluence cache directory")

    def __call__(self, content_root: str) -> str:
        """Publish the documents under content_root.

        The publisher finds content_root through the config file, which
        the caller has already pointed at it.

        Args:
            content_root: Directory being published (for logging)

        Returns:
            Complete captured stdout

        Raises:
            PublisherNotFoundError: If the publisher executable is missing
            PublishError: If the publisher exits non-zero or times out
        """
        self.clear_cache()

        args = self.command + ['--config', self.config_path]
        env = self.authenticator.publisher_env()
        env['DEBUG'] = 'markdown-confluence:*'

        logger.info(f"Publishing {content_root}")
        logger.debug(f"Running publisher: {' '.join(args)} (cwd={self.working_dir})")

        try:
            result = subprocess.run(
                args,
                cwd=self.working_dir,
                env=env,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise PublisherNotFoundError(self.command[0])
        except subprocess.TimeoutExpired as e:
            raise PublishError(
                f"Publisher timed out after {self.timeout} seconds",
                stdout=_as_text(e.stdout),
                stderr=_as_text(e.stderr),
            )

        if result.returncode != 0:
            logger.error(f"Publisher exited with code: {result.returncode}")
            raise PublishError(
                "Publisher reported an error",
                exit_code=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )

        if result.stderr:
            logger.debug(f"Publisher stderr:\n{result.stderr}")
        logger.info("Publisher execution completed successfully")
        return result.stdout


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    return value
