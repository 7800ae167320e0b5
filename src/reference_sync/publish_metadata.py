"""Publisher frontmatter defaults and identity merging."""

import posixpath
from typing import Any, Dict

from src.doc_tree.models import (
    BLOG_POST_DATE_KEY,
    CONTENT_TYPE_KEY,
    DONT_CHANGE_PARENT_KEY,
    PAGE_ID_KEY,
    PUBLISH_KEY,
    SPACE_KEY_KEY,
    TITLE_KEY,
    PageRef,
)
from src.doc_tree.path_normalizer import strip_extension

CONTENT_TYPE_PAGE = 'page'
CONTENT_TYPE_BLOGPOST = 'blogpost'


def default_title(document_path: str) -> str:
    """File name of a document without its extension."""
    return strip_extension(posixpath.basename(document_path))


def _has_title(frontmatter: Dict[str, Any]) -> bool:
    title = frontmatter.get(TITLE_KEY)
    return title is not None and str(title).strip() != ''


def apply_publish_defaults(frontmatter: Dict[str, Any], document_path: str) -> Dict[str, Any]:
    """Fill in the fields the publisher needs before a document is published.

    - title defaults to the file name
    - dont-change-parent defaults to false
    - content type is "blogpost" when a blog post date is set, otherwise
      the existing content type or "page"

    Returns:
        A new mapping; frontmatter is not modified
    """
    result = dict(frontmatter)
    if not _has_title(result):
        result[TITLE_KEY] = default_title(document_path)
    if not result.get(DONT_CHANGE_PARENT_KEY):
        result[DONT_CHANGE_PARENT_KEY] = False

    if result.get(BLOG_POST_DATE_KEY):
        result[CONTENT_TYPE_KEY] = CONTENT_TYPE_BLOGPOST
    elif not result.get(CONTENT_TYPE_KEY):
        result[CONTENT_TYPE_KEY] = CONTENT_TYPE_PAGE
    return result


def published_identity(ref: PageRef, frontmatter: Dict[str, Any], document_path: str) -> Dict[str, Any]:
    """Fields to merge into a source document once it has been published.

    Sets page id, publish flag and space key, clears dont-change-parent,
    and defaults the title if the document has none.
    """
    new_data: Dict[str, Any] = {
        PAGE_ID_KEY: ref.page_id,
        PUBLISH_KEY: True,
        SPACE_KEY_KEY: ref.space_key,
        DONT_CHANGE_PARENT_KEY: False,
    }
    if not _has_title(frontmatter):
        new_data[TITLE_KEY] = default_title(document_path)
    return new_data
