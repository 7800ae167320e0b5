"""Reference resolution and two-phase publishing.

This package maps local document paths to Confluence page identifiers,
rewrites inter-document links into wiki URLs, and drives the
publish / learn identifiers / fix references / republish cycle.
"""

from .link_rewriter import LinkRewriter, build_page_url
from .page_id_map import PageIdMap
from .two_phase_publisher import PublishPhase, PublishRunResult, TwoPhasePublisher

__all__ = [
    'LinkRewriter',
    'build_page_url',
    'PageIdMap',
    'PublishPhase',
    'PublishRunResult',
    'TwoPhasePublisher',
]
