"""
Frontmatter Parsing
-------------------
Splits an RL4 document into its YAML header and Markdown body.

Format:
    ---
    version: 1.0.0
    updated: 2025-01-01T00:00:00Z
    ---
    ## Phase
    ...
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging
import re

import yaml

_FRONTMATTER_PATTERN = re.compile(r"^---\r?\n(.*?)\r?\n---\r?\n(.*)$", re.DOTALL)

_logger = logging.getLogger("rl4.validation.frontmatter")


@dataclass
class ParsedDocument:
    """Header fields and body of an RL4 document."""
    frontmatter: Dict[str, Any] = field(default_factory=dict)
    body: str = ""
    has_frontmatter: bool = False
    error: Optional[str] = None


def parse_document(text: str) -> ParsedDocument:
    """
    Parse an RL4 document.

    No header block: empty frontmatter and the whole text as body.
    Header that is not valid YAML, or not a mapping: empty frontmatter,
    the body after the header, and `error` set.
    """
    match = _FRONTMATTER_PATTERN.match(text)
    if not match:
        return ParsedDocument(frontmatter={}, body=text, has_frontmatter=False)

    header, body = match.group(1), match.group(2)

    try:
        data = yaml.safe_load(header)
    except yaml.YAMLError as e:
        _logger.warning(f"Failed to parse frontmatter: {e}")
        return ParsedDocument(frontmatter={}, body=body, has_frontmatter=True, error=str(e))

    if data is None:
        data = {}
    if not isinstance(data, dict):
        message = f"Frontmatter is a {type(data).__name__}, not a mapping"
        _logger.warning(message)
        return ParsedDocument(frontmatter={}, body=body, has_frontmatter=True, error=message)

    return ParsedDocument(frontmatter=data, body=body, has_frontmatter=True)


def render_document(frontmatter: Dict[str, Any], body: str) -> str:
    """Serialize header fields and body back into RL4 document text."""
    header = yaml.safe_dump(frontmatter, default_flow_style=False, sort_keys=False).strip()
    return f"---\n{header}\n---\n{body}"
