"""Mapping from local document paths to Confluence page identifiers.

A document can be linked as "guides/setup.md", "guides/setup" or, for a
directory index, just "guides". The map registers every such form under
its normalized key so the link rewriter can look any of them up.
"""

import logging
from typing import Dict, Iterable, Iterator, Optional, Tuple

from src.doc_tree.models import Document, PageRef, PublishedPage
from src.doc_tree.path_normalizer import normalize_path, parent_dir, strip_extension

logger = logging.getLogger(__name__)


class PageIdMap:
    """Normalized document path -> PageRef.

    Two sources feed the map:
        - frontmatter of scanned documents (from_documents)
        - success lines of a publish run (from_published)

    Registration is first-write-wins unless refresh is requested, so a
    directory key claimed by one document isn't silently taken over by a
    sibling.

    Example:
        >>> page_map = PageIdMap.from_documents(documents)
        >>> page_map.get("guides/setup")
        PageRef(page_id='123', space_key='DOCS')
    """

    def __init__(self):
        self._entries: Dict[str, PageRef] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return normalize_path(key) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def items(self) -> Iterator[Tuple[str, PageRef]]:
        return iter(self._entries.items())

    def get(self, key: str) -> Optional[PageRef]:
        """Look up a path (normalized before lookup)."""
        return self._entries.get(normalize_path(key))

    def register(self, key: str, ref: PageRef, refresh: bool = False) -> bool:
        """Register ref under a path key.

        Args:
            key: Path form of the document (normalized before storing)
            ref: Page identity
            refresh: Replace an existing entry for the same key

        Returns:
            True if the entry was stored
        """
        normalized = normalize_path(key)
        if not normalized:
            return False
        if normalized in self._entries and not refresh:
            return False
        self._entries[normalized] = ref
        return True

    def register_document_path(self, path: str, ref: PageRef, refresh: bool = False) -> None:
        """Register ref under every key form of a document path.

        Keys: full path, path without extension and parent directory
        (unless the document sits at the content root).
        """
        normalized = normalize_path(path)
        self.register(normalized, ref, refresh)
        self.register(strip_extension(normalized), ref, refresh)
        directory = parent_dir(normalized)
        if directory:
            self.register(directory, ref, refresh)
        logger.debug(f"Added page ID mapping: {normalized} -> {ref.page_id}")

    def merge(self, other: "PageIdMap", refresh: bool = False) -> int:
        """Add the entries of another map.

        Args:
            other: Map to merge in
            refresh: Let other's entries replace existing ones

        Returns:
            Number of entries stored
        """
        added = 0
        for key, ref in other.items():
            if self.register(key, ref, refresh):
                added += 1
        return added

    def space_keys(self) -> Dict[str, str]:
        """Return page_id -> space_key for entries that carry a space key."""
        return {ref.page_id: ref.space_key for ref in self._entries.values() if ref.space_key}

    @classmethod
    def from_documents(cls, documents: Iterable[Document]) -> "PageIdMap":
        """Build a map from the frontmatter of scanned documents.

        Documents without a page ID are skipped.
        """
        page_map = cls()
        for document in documents:
            page_id = document.page_id
            if not page_id:
                continue
            page_map.register_document_path(document.path, PageRef(page_id, document.space_key))
        logger.debug(f"Built page ID map with {len(page_map)} key(s) from frontmatter")
        return page_map

    @classmethod
    def from_published(cls, pages: Iterable[PublishedPage]) -> "PageIdMap":
        """Build a map from publish output, keyed by extension-less path."""
        page_map = cls()
        for page in pages:
            key = strip_extension(normalize_path(page.path))
            page_map.register(key, PageRef(page.page_id, page.space_key), refresh=True)
        return page_map
