"""Rewriting of local markdown links into Confluence page URLs.

For every inline link [text](url) in a document body, the rewriter tries
a fixed list of path forms of url against the page ID map and replaces
the first hit with the page's Confluence URL. Links that are already
absolute, or that match nothing, are left exactly as written.
"""

import logging
import posixpath
import re
from typing import Dict, Iterable, List, Optional, Tuple

from src.doc_tree.frontmatter_handler import FrontmatterHandler
from src.doc_tree.models import Document, PageRef
from src.doc_tree.path_normalizer import normalize_path, parent_dir, strip_extension

from .page_id_map import PageIdMap

logger = logging.getLogger(__name__)

# Inline links; images (![alt](src)) are not page references
LINK_PATTERN = re.compile(r'(?<!!)\[([^\]]+)\]\(([^)]+)\)')

# Scheme-qualified URLs (http:, https:, mailto:, ...) and protocol-relative ones
ABSOLUTE_URL_PATTERN = re.compile(r'^(?:[A-Za-z][A-Za-z0-9+.\-]*:|//)')

WIKI_PATH_MARKER = '/wiki/spaces/'


def build_page_url(base_url: str, space_key: str, page_id: str) -> str:
    """Build a Confluence page URL from components.

    Args:
        base_url: Confluence base URL, with or without a trailing /wiki
        space_key: Space key (e.g., "DOCS")
        page_id: Page ID (e.g., "12345678")

    Returns:
        URL of the form {base}/wiki/spaces/{space_key}/pages/{page_id}
    """
    base_url = base_url.rstrip('/')
    if not base_url.endswith('/wiki'):
        base_url = f"{base_url}/wiki"
    return f"{base_url}/spaces/{space_key}/pages/{page_id}"


def is_absolute_url(url: str) -> bool:
    """Return True for wiki URLs and any scheme-qualified URL."""
    return WIKI_PATH_MARKER in url or bool(ABSOLUTE_URL_PATTERN.match(url))


def candidate_paths(url: str, document_path: str) -> List[str]:
    """Return the normalized path forms to try for a link target, in order.

    Order: raw url, url without extension, url resolved against the
    linking document's directory (with and without extension), url with a
    leading "./" removed (with and without extension). Duplicates keep
    their first position.
    """
    resolved = posixpath.normpath(posixpath.join(parent_dir(document_path), url.replace('\\', '/')))
    dot_stripped = url[2:] if url.startswith('./') else url

    forms = [
        url,
        strip_extension(url),
        resolved,
        strip_extension(resolved),
        dot_stripped,
        strip_extension(dot_stripped),
    ]

    candidates = []
    for form in forms:
        normalized = normalize_path(form)
        if normalized and normalized not in candidates:
            candidates.append(normalized)
    return candidates


class LinkRewriter:
    """Rewrites local links for one Confluence target.

    Attributes:
        base_url: Confluence base URL used for rewritten links
        default_space_key: Space used when neither the map entry nor the
                           space key lookup names one

    Example:
        >>> rewriter = LinkRewriter("https://x.atlassian.net", "DOCS")
        >>> rewriter.rewrite("[B](./b.md)", page_map, "a.md")
        '[B](https://x.atlassian.net/wiki/spaces/DOCS/pages/200)\\n'
    """

    def __init__(self, base_url: str, default_space_key: str):
        self.base_url = base_url
        self.default_space_key = default_space_key

    def resolve(
        self,
        url: str,
        page_map: PageIdMap,
        document_path: str,
    ) -> Optional[Tuple[str, PageRef]]:
        """Find the map entry a link points at.

        Returns:
            (matched_key, PageRef) for the first matching candidate, or None
        """
        for candidate in candidate_paths(url, document_path):
            ref = page_map.get(candidate)
            if ref is not None:
                return candidate, ref
        return None

    def rewrite_body(
        self,
        body: str,
        page_map: PageIdMap,
        document_path: str,
        space_keys: Optional[Dict[str, str]] = None,
    ) -> Tuple[str, int]:
        """Rewrite links in a markdown body.

        Args:
            body: Markdown body without frontmatter
            page_map: Path -> page identity map
            document_path: Path of the document relative to the content root
            space_keys: Optional page_id -> space_key lookup used when a map
                        entry has no space key of its own

        Returns:
            Tuple of (rewritten body, number of links resolved)
        """
        space_keys = space_keys or {}
        resolved_count = 0

        def _replace(match: re.Match) -> str:
            nonlocal resolved_count
            text, url = match.group(1), match.group(2).strip()

            if is_absolute_url(url):
                return match.group(0)

            hit = self.resolve(url, page_map, document_path)
            if hit is None:
                logger.debug(f"No page ID found for any variation of: {url} (in {document_path})")
                return match.group(0)

            matched_key, ref = hit
            space_key = ref.space_key or space_keys.get(ref.page_id) or self.default_space_key
            page_url = build_page_url(self.base_url, space_key, ref.page_id)
            logger.debug(f"Resolved {url} via {matched_key} -> {page_url}")
            resolved_count += 1
            return f"[{text}]({page_url})"

        return LINK_PATTERN.sub(_replace, body), resolved_count

    def rewrite(
        self,
        content: str,
        page_map: PageIdMap,
        document_path: str,
        space_keys: Optional[Dict[str, str]] = None,
    ) -> str:
        """Rewrite links in full markdown content, keeping its frontmatter."""
        frontmatter, body = FrontmatterHandler.parse(content, document_path)
        new_body, _ = self.rewrite_body(body, page_map, document_path, space_keys)
        return FrontmatterHandler.serialize(frontmatter, new_body)

    def rewrite_documents(
        self,
        documents: Iterable[Document],
        page_map: PageIdMap,
        space_keys: Optional[Dict[str, str]] = None,
    ) -> int:
        """Rewrite the bodies of in-memory documents.

        Returns:
            Total number of links resolved
        """
        if space_keys is None:
            space_keys = page_map.space_keys()
        total = 0
        for document in documents:
            document.body, count = self.rewrite_body(document.body, page_map, document.path, space_keys)
            total += count
        return total
