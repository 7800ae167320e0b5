"""Parsing of markdown-confluence publisher output.

The publisher reports each successfully published document on one line:

    SUCCESS: guides/setup.md Content: updated Page URL: https://x.atlassian.net/wiki/spaces/DOCS/pages/12345

This module is the only place that knows that format.
"""

import logging
import re
from typing import List

from src.doc_tree.models import PublishedPage

logger = logging.getLogger(__name__)

# Bump when the publisher changes its success line format
OUTPUT_FORMAT_VERSION = 1

SUCCESS_LINE_PATTERN = re.compile(
    r'SUCCESS: (?P<path>.+?) Content: .+?Page URL: '
    r'(?P<url>\S+?/wiki/spaces/(?P<space>[^/\s]+)/pages/(?P<page_id>\d+))'
)


def parse_publish_output(output: str) -> List[PublishedPage]:
    """Extract published documents from publisher output.

    Args:
        output: Complete captured stdout of one publish run

    Returns:
        One PublishedPage per SUCCESS line, in output order
    """
    pages = []
    for match in SUCCESS_LINE_PATTERN.finditer(output):
        page = PublishedPage(
            path=match.group('path').strip(),
            space_key=match.group('space'),
            page_id=match.group('page_id'),
            page_url=match.group('url'),
        )
        logger.debug(f"Found page ID mapping: {page.path} -> {page.page_id} (space: {page.space_key})")
        pages.append(page)
    return pages
