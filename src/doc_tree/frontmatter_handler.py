"""YAML frontmatter parsing and generation for markdown files.

This module splits a markdown document into its YAML frontmatter block and
its body, and writes them back together. Frontmatter carries the publisher
metadata (connie-page-id, connie-space-key, connie-title, ...) that links a
local file to its Confluence page.

All operations are pure transforms on strings; callers are responsible for
persisting the result.
"""

import re
from typing import Any, Dict, Tuple

import yaml

from .errors import FrontmatterError


class FrontmatterHandler:
    """Handles YAML frontmatter operations for markdown files.

    Frontmatter format:
        ---
        connie-page-id: '123456'
        connie-title: Setup Guide
        ---
        # Body

    Documents without a frontmatter block are treated as having an empty
    mapping. Bodies are trimmed of leading/trailing whitespace on parse.
    """

    # Regex pattern to match YAML frontmatter (between --- delimiters)
    FRONTMATTER_PATTERN = re.compile(
        r'\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)',
        re.DOTALL | re.MULTILINE
    )

    # Maximum allowed depth for YAML structures to prevent DoS attacks
    MAX_YAML_DEPTH = 10

    @classmethod
    def _validate_yaml_depth(cls, obj, current_depth: int = 0, max_depth: int = MAX_YAML_DEPTH) -> None:
        """Validate that YAML structure depth doesn't exceed maximum.

        Args:
            obj: YAML object (dict, list, or primitive)
            current_depth: Current nesting depth
            max_depth: Maximum allowed depth

        Raises:
            FrontmatterError: If depth exceeds maximum
        """
        if current_depth > max_depth:
            raise FrontmatterError(
                "<yaml>",
                f"YAML structure exceeds maximum depth of {max_depth}"
            )

        if isinstance(obj, dict):
            for value in obj.values():
                cls._validate_yaml_depth(value, current_depth + 1, max_depth)
        elif isinstance(obj, list):
            for item in obj:
                cls._validate_yaml_depth(item, current_depth + 1, max_depth)

    @classmethod
    def parse(cls, content: str, file_path: str = "<unknown>") -> Tuple[Dict[str, Any], str]:
        """Split markdown content into frontmatter and body.

        Args:
            content: Full markdown content including frontmatter
            file_path: Path to the file (for error messages)

        Returns:
            Tuple of (frontmatter_dict, body). Returns ({}, body) if no
            frontmatter block is present. The body is stripped.

        Raises:
            FrontmatterError: If frontmatter is malformed or has invalid YAML
        """
        match = cls.FRONTMATTER_PATTERN.match(content)
        if not match:
            return {}, content.strip()

        frontmatter_str = match.group(1)
        body = content[match.end():].strip()

        try:
            frontmatter = yaml.safe_load(frontmatter_str)
        except yaml.YAMLError as e:
            raise FrontmatterError(
                file_path,
                f"Invalid YAML syntax: {str(e)}"
            )

        # An empty block is a valid, empty mapping
        if frontmatter is None:
            return {}, body

        if not isinstance(frontmatter, dict):
            raise FrontmatterError(
                file_path,
                f"Frontmatter must be a YAML dictionary, got {type(frontmatter).__name__}"
            )

        try:
            cls._validate_yaml_depth(frontmatter)
        except FrontmatterError as e:
            raise FrontmatterError(file_path, e.message)

        return frontmatter, body

    @classmethod
    def serialize(cls, frontmatter: Dict[str, Any], body: str) -> str:
        """Generate markdown content from a frontmatter mapping and a body.

        Args:
            frontmatter: Frontmatter fields, written in insertion order
            body: Markdown body (without frontmatter)

        Returns:
            Full markdown content ending in a newline. If frontmatter is
            empty, no block is written.
        """
        body = body.strip()
        if not frontmatter:
            return f"{body}\n"

        yaml_str = yaml.safe_dump(
            frontmatter,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )
        return f"---\n{yaml_str}---\n{body}\n"

    @classmethod
    def update(cls, content: str, new_data: Dict[str, Any], file_path: str = "<unknown>") -> str:
        """Merge new fields into the frontmatter of markdown content.

        New values win; existing keys not present in new_data are kept in
        their original order. Applying the same new_data twice gives the
        same result as applying it once.

        Args:
            content: Full markdown content including frontmatter
            new_data: Fields to merge
            file_path: Path to the file (for error messages)

        Returns:
            Updated markdown content
        """
        frontmatter, body = cls.parse(content, file_path)
        merged = {**frontmatter, **new_data}
        return cls.serialize(merged, body)
