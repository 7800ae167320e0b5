"""Two-phase publish orchestration.

A link can only become a Confluence URL once its target page has an ID,
and IDs only exist after publishing. TwoPhasePublisher therefore:

    1. mirrors the tree and rewrites links that already resolve
    2. publishes the mirror
    3. merges newly assigned page IDs into the user's source files
    4. if anything new was learned, rebuilds the mirror, rewrites links
       again (now resolving forward references) and publishes once more
    5. always removes the mirror and restores the publisher config

The user's files are only touched in step 3, and only in frontmatter.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from src.doc_tree.config_loader import ConfigLoader
from src.doc_tree.document_scanner import (
    list_markdown_files,
    read_document,
    read_text,
    scan_documents,
    write_document,
    write_text,
)
from src.doc_tree.errors import FilesystemError, MirrorError
from src.doc_tree.frontmatter_handler import FrontmatterHandler
from src.doc_tree.models import PublishConfig, PublishedPage
from src.doc_tree.path_normalizer import strip_extension
from src.doc_tree.workspace_mirror import MIRROR_DIR_NAME, mirror_tree, remove_mirror
from src.publisher.auth import Authenticator
from src.publisher.executor import PublishExecutor
from src.publisher.output_parser import parse_publish_output

from .link_rewriter import LinkRewriter
from .page_id_map import PageIdMap
from .publish_metadata import apply_publish_defaults, published_identity

logger = logging.getLogger(__name__)

# Publishes the documents under a content root and returns the publisher's output
PublishOperation = Callable[[str], str]


class PublishPhase(Enum):
    """States of a publish run."""
    IDLE = "idle"
    MIRROR_BUILT = "mirror_built"
    FIRST_PUBLISHED = "first_published"
    IDENTIFIERS_MERGED = "identifiers_merged"
    SECOND_PUBLISH_NEEDED = "second_publish_needed"
    REFERENCES_FIXED = "references_fixed"
    SECOND_PUBLISHED = "second_published"
    CLEANED = "cleaned"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PublishRunResult:
    """Outcome of a publish run.

    Attributes:
        passes: Number of publish invocations (1 or 2)
        new_page_ids: Source document path -> page ID assigned during this run
        links_resolved: Links rewritten to wiki URLs, per mirror build
        outputs: Captured publisher output, per pass
        late_page_ids: Document paths that only received an ID during the
                       second pass; links pointing at them stay local until
                       the next run
        mirror_removed: False if the mirror couldn't be deleted
    """
    passes: int = 0
    new_page_ids: Dict[str, str] = field(default_factory=dict)
    links_resolved: List[int] = field(default_factory=list)
    outputs: List[str] = field(default_factory=list)
    late_page_ids: List[str] = field(default_factory=list)
    mirror_removed: bool = True


class TwoPhasePublisher:
    """Drives the publish -> learn IDs -> fix references -> publish cycle.

    Example:
        >>> config = ConfigLoader.load("/docs/.markdown-confluence.json")
        >>> result = TwoPhasePublisher("/docs", config).run()
        >>> print(f"{result.passes} pass(es), {len(result.new_page_ids)} new page(s)")
    """

    def __init__(
        self,
        base_folder: str,
        config: PublishConfig,
        publish: Optional[PublishOperation] = None,
        config_path: Optional[str] = None,
    ):
        """Initialize the orchestrator.

        Args:
            base_folder: Root of the document tree (holds the config file)
            config: Loaded publisher configuration
            publish: Publish operation; defaults to running the
                     markdown-confluence CLI
            config_path: Config file the publisher reads (defaults to the
                         one in base_folder)
        """
        self.base_folder = os.path.abspath(base_folder)
        self.config = config
        self.config_path = config_path or ConfigLoader.config_path_for(self.base_folder)
        self.publish_root = os.path.abspath(os.path.join(self.base_folder, config.folder_to_publish))
        self.mirror_dir = os.path.join(self.publish_root, MIRROR_DIR_NAME)
        self.rewriter = LinkRewriter(config.base_url, config.space_key)
        self.publish = publish or PublishExecutor(
            self.base_folder, self.config_path, Authenticator(config)
        )
        self.phase = PublishPhase.IDLE

    def _transition(self, phase: PublishPhase) -> None:
        logger.debug(f"Publish phase: {self.phase.value} -> {phase.value}")
        self.phase = phase

    def prepare_mirror(self) -> int:
        """Build the mirror and rewrite every link that already resolves.

        Mirrored documents also get the publisher's frontmatter defaults.
        The identifier map comes purely from frontmatter found in the mirror.

        Returns:
            Number of links rewritten

        Raises:
            MirrorError: If the tree can't be copied
            FilesystemError: If a mirrored document can't be read or written
            FrontmatterError: If a document has malformed frontmatter
        """
        logger.info(f"Copying source directory from: {self.publish_root}")
        logger.info(f"Target fixed references directory (temporary folder): {self.mirror_dir}")
        # Always start from a fresh copy of the source tree
        if not remove_mirror(self.mirror_dir):
            raise MirrorError(self.publish_root, self.mirror_dir, "Previous mirror could not be removed")
        mirror_tree(self.publish_root, self.mirror_dir, exclude=self.mirror_dir)

        documents = scan_documents(self.mirror_dir)
        for document in documents:
            document.frontmatter = apply_publish_defaults(document.frontmatter, document.path)

        page_map = PageIdMap.from_documents(documents)
        logger.info(f"Built page ID map: {len(page_map)} key(s)")

        resolved = self.rewriter.rewrite_documents(documents, page_map)
        for document in documents:
            write_document(document)

        logger.info(f"Fixed {resolved} reference(s) in {len(documents)} document(s)")
        return resolved

    def merge_identifiers(self, pages: List[PublishedPage]) -> Dict[str, str]:
        """Write page IDs reported by the publisher into the source documents.

        Only frontmatter changes; files whose content would stay identical
        aren't rewritten.

        Args:
            pages: Parsed publisher output

        Returns:
            Source path -> page ID for documents whose page ID was absent
            or different before the merge
        """
        published = PageIdMap.from_published(pages)
        if not len(published):
            return {}

        new_ids: Dict[str, str] = {}
        for rel_path in list_markdown_files(self.publish_root, exclude=[self.mirror_dir]):
            ref = published.get(strip_extension(rel_path))
            if ref is None:
                logger.debug(f"No page info found for {rel_path}")
                continue

            document = read_document(self.publish_root, rel_path)
            content = read_text(document.abs_path)
            updated = FrontmatterHandler.update(
                content,
                published_identity(ref, document.frontmatter, rel_path),
                document.abs_path,
            )
            if updated != content:
                write_text(document.abs_path, updated)
                logger.info(f"Updated frontmatter for {rel_path} with page ID {ref.page_id}")

            if document.page_id != ref.page_id:
                new_ids[rel_path] = ref.page_id

        return new_ids

    def _write_publisher_config(self) -> None:
        """Point the publisher at the mirror with the resolved target settings."""
        on_disk = ConfigLoader.load_raw(self.config_path, allow_missing=True)
        ConfigLoader.save(
            self.config_path, ConfigLoader.publish_overrides(on_disk, self.mirror_dir, self.config)
        )
        logger.debug(f"Setting temporary content root folder to: {self.mirror_dir}")

    def _run_publish(self, result: PublishRunResult) -> str:
        output = self.publish(self.mirror_dir)
        result.outputs.append(output)
        result.passes += 1
        return output

    def _cleanup(self, snapshot: Optional[bytes], result: PublishRunResult, raise_errors: bool) -> None:
        """Remove the mirror and restore the config file.

        Args:
            snapshot: Config file bytes captured before the run
            result: Run result to record the mirror removal outcome on
            raise_errors: Re-raise a failed config restore (False while
                          another error is already propagating)
        """
        result.mirror_removed = remove_mirror(self.mirror_dir)
        try:
            ConfigLoader.restore(self.config_path, snapshot)
            logger.info("Restored original configuration.")
        except FilesystemError as e:
            logger.error(f"Failed to restore configuration: {e}")
            if raise_errors:
                raise

    def run(self) -> PublishRunResult:
        """Execute a complete publish run.

        Returns:
            PublishRunResult describing the run

        Raises:
            MirrorError: If the mirror can't be built
            PublishError: If a publish invocation fails
            FilesystemError: If documents or the config can't be written
            FrontmatterError: If a document has malformed frontmatter
        """
        result = PublishRunResult()
        snapshot = ConfigLoader.snapshot(self.config_path)
        succeeded = False

        try:
            self._write_publisher_config()
            result.links_resolved.append(self.prepare_mirror())
            self._transition(PublishPhase.MIRROR_BUILT)

            logger.info("Phase 1: Publishing files and getting page IDs...")
            output = self._run_publish(result)
            self._transition(PublishPhase.FIRST_PUBLISHED)

            new_ids = self.merge_identifiers(parse_publish_output(output))
            result.new_page_ids.update(new_ids)
            self._transition(PublishPhase.IDENTIFIERS_MERGED)

            if new_ids:
                self._transition(PublishPhase.SECOND_PUBLISH_NEEDED)
                logger.info(
                    f"Phase 2: {len(new_ids)} new page ID(s) found, updating references and republishing..."
                )
                result.links_resolved.append(self.prepare_mirror())
                self._transition(PublishPhase.REFERENCES_FIXED)

                second_output = self._run_publish(result)
                self._transition(PublishPhase.SECOND_PUBLISHED)

                late_ids = self.merge_identifiers(parse_publish_output(second_output))
                if late_ids:
                    # No third pass: links to these pages resolve on the next run
                    result.late_page_ids = sorted(late_ids)
                    result.new_page_ids.update(late_ids)
                    logger.warning(
                        f"{len(late_ids)} page ID(s) were first assigned during the second publish "
                        f"({', '.join(result.late_page_ids)}); links to them stay local until the next run"
                    )
            else:
                logger.info("No new page IDs; references were already resolved")

            succeeded = True
        except Exception as e:
            logger.error(f"Error during publishing: {e}")
            raise
        finally:
            self._cleanup(snapshot, result, raise_errors=succeeded)
            self._transition(PublishPhase.CLEANED if succeeded else PublishPhase.FAILED)

        self._transition(PublishPhase.DONE)
        logger.info("All changes have been published to Confluence.")
        return result

    def fix_references(self, keep_mirror: bool = True) -> int:
        """Build the mirror with rewritten references, without publishing.

        Args:
            keep_mirror: Leave the mirror in place for inspection

        Returns:
            Number of links rewritten
        """
        try:
            resolved = self.prepare_mirror()
        except Exception:
            remove_mirror(self.mirror_dir)
            raise
        if not keep_mirror:
            remove_mirror(self.mirror_dir)
        return resolved

