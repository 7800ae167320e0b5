"""Publish command orchestration for CLI.

This module provides the PublishCommand class that wires configuration,
the two-phase publisher and terminal output together, and translates
errors into exit codes.
"""

import logging
import os
from typing import Callable, Optional

from src.cli.config_prompt import ensure_config
from src.cli.errors import CLIError, DocsDirNotFoundError
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.doc_tree.config_loader import ConfigLoader
from src.doc_tree.errors import ConfigError, DocTreeError
from src.doc_tree.models import PublishConfig
from src.publisher.errors import PublishError, PublisherError
from src.reference_sync.two_phase_publisher import TwoPhasePublisher

logger = logging.getLogger(__name__)

# Builds the orchestrator for a tree root and its configuration
PublisherFactory = Callable[[str, PublishConfig], TwoPhasePublisher]


class PublishCommand:
    """Runs a publish (or reference-fixing) operation for one document tree.

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> exit_code = PublishCommand("./docs", output_handler=output).run()
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        docs_dir: str = ".",
        output_handler: Optional[OutputHandler] = None,
        prompt: bool = False,
        publisher_factory: Optional[PublisherFactory] = None,
    ):
        """Initialize publish command.

        Args:
            docs_dir: Root of the document tree (holds .markdown-confluence.json)
            output_handler: OutputHandler for terminal output (optional)
            prompt: Ask for missing configuration values interactively
            publisher_factory: Builds the TwoPhasePublisher (optional, for testing)
        """
        self.docs_dir = os.path.abspath(docs_dir)
        self.config_path = ConfigLoader.config_path_for(self.docs_dir)
        self.output_handler = output_handler or OutputHandler()
        self.prompt = prompt
        self.publisher_factory = publisher_factory or TwoPhasePublisher

    def _load_publisher(self) -> TwoPhasePublisher:
        if not os.path.isdir(self.docs_dir):
            raise DocsDirNotFoundError(self.docs_dir)

        self.output_handler.info(f"Working with folder: {self.docs_dir}")
        config = ensure_config(self.config_path, self.output_handler, prompt=self.prompt)
        logger.info(f"Loaded config for space {config.space_key} (parent page: {config.parent_id})")
        return self.publisher_factory(self.docs_dir, config)

    def run(self) -> ExitCode:
        """Execute the two-phase publish.

        Returns:
            ExitCode indicating success or specific failure type
        """
        return self._guarded(self._publish)

    def fix_references(self, keep_mirror: bool = True) -> ExitCode:
        """Rewrite references into the mirror without publishing.

        Args:
            keep_mirror: Leave the mirror folder for inspection

        Returns:
            ExitCode indicating success or specific failure type
        """
        return self._guarded(lambda: self._fix_references(keep_mirror))

    def _publish(self) -> ExitCode:
        publisher = self._load_publisher()

        with self.output_handler.spinner("Publishing to Confluence..."):
            result = publisher.run()

        self.output_handler.print_publish_summary(
            passes=result.passes,
            new_pages=sorted(result.new_page_ids),
            links_resolved=result.links_resolved,
            late_pages=result.late_page_ids,
        )
        if not result.mirror_removed:
            self.output_handler.warning(f"Temporary folder was not removed: {publisher.mirror_dir}")
        return ExitCode.SUCCESS

    def _fix_references(self, keep_mirror: bool) -> ExitCode:
        publisher = self._load_publisher()
        resolved = publisher.fix_references(keep_mirror=keep_mirror)
        self.output_handler.success(f"Fixed {resolved} reference(s)")
        if keep_mirror:
            self.output_handler.print(f"Rewritten documents: {publisher.mirror_dir}")
        return ExitCode.SUCCESS

    def _guarded(self, operation: Callable[[], ExitCode]) -> ExitCode:
        """Run an operation and map errors to exit codes."""
        try:
            return operation()

        except ConfigError as e:
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(str(e))
            return ExitCode.CONFIG_ERROR

        except PublishError as e:
            logger.error(f"Publishing failed: {e}")
            self.output_handler.error(str(e))
            self.output_handler.print_publish_output(e.stdout, e.stderr)
            return ExitCode.PUBLISH_ERROR

        except PublisherError as e:
            logger.error(f"Publisher error: {e}")
            self.output_handler.error(str(e))
            return ExitCode.PUBLISH_ERROR

        except (DocTreeError, CLIError) as e:
            logger.error(f"Error: {e}")
            self.output_handler.error(str(e))
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception("Unexpected error during publish")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR
