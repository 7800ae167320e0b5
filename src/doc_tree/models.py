"""Data models for the document tree.

This module defines the data models shared by the document tree, the
reference resolver and the publish orchestrator. All models use
dataclasses for clean, type-safe data structures.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# Frontmatter keys understood by the markdown-confluence publisher
PAGE_ID_KEY = 'connie-page-id'
TITLE_KEY = 'connie-title'
PUBLISH_KEY = 'connie-publish'
SPACE_KEY_KEY = 'connie-space-key'
DONT_CHANGE_PARENT_KEY = 'connie-dont-change-parent-page'
CONTENT_TYPE_KEY = 'connie-content-type'
BLOG_POST_DATE_KEY = 'connie-blog-post-date'

MARKDOWN_EXTENSION = '.md'


@dataclass
class Document:
    """A markdown document loaded from the content tree.

    Attributes:
        path: Logical path relative to the content root, '/'-separated
              (e.g., "guides/setup.md")
        abs_path: Absolute filesystem path of the file
        frontmatter: Parsed YAML frontmatter (empty dict if none)
        body: Markdown content without the frontmatter block, trimmed
    """
    path: str
    abs_path: str
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    body: str = ""

    @property
    def page_id(self) -> Optional[str]:
        """Remote page ID from frontmatter, as a string (None if unpublished)."""
        value = self.frontmatter.get(PAGE_ID_KEY)
        if value is None or str(value).strip() == "":
            return None
        return str(value).strip()

    @property
    def space_key(self) -> Optional[str]:
        """Space key from frontmatter (None if unset)."""
        value = self.frontmatter.get(SPACE_KEY_KEY)
        if value is None or str(value).strip() == "":
            return None
        return str(value).strip()


@dataclass(frozen=True)
class PageRef:
    """Remote identity of a published document.

    Attributes:
        page_id: Confluence page ID (numeric string)
        space_key: Space the page lives in (None to use the configured default)
    """
    page_id: str
    space_key: Optional[str] = None


@dataclass(frozen=True)
class PublishedPage:
    """One successfully published document reported by the publisher.

    Attributes:
        path: Document path relative to the content root, as reported
        space_key: Space key extracted from the page URL
        page_id: Page ID extracted from the page URL
        page_url: Full page URL as reported
    """
    path: str
    space_key: str
    page_id: str
    page_url: str = ""


@dataclass
class PublishConfig:
    """Configuration stored in .markdown-confluence.json at the tree root.

    Attributes:
        base_url: Confluence base URL (e.g., https://company.atlassian.net)
        space_key: Default space key for published pages
        parent_id: Page ID new pages are created under
        user_name: Atlassian user name (email)
        api_token: Atlassian API token
        folder_to_publish: Folder to publish, relative to the tree root
        ignore: Paths the publisher must skip
        raw: Original JSON mapping, kept so unknown keys survive a rewrite
    """
    base_url: str
    space_key: str
    parent_id: str
    user_name: str = ""
    api_token: str = ""
    folder_to_publish: str = "."
    ignore: List[str] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)
