# character_admin/frontmatter.py
"""YAML frontmatter codec for character markdown documents."""
from __future__ import annotations

from typing import Any, Dict, Tuple

import yaml

from .errors import MalformedDocument

DELIMITER = "---"


def parse(raw: str, source: str = "<document>") -> Tuple[Dict[str, Any], str]:
    """
    Split a document into (header, body).

    A document without a leading '---' line has an empty header and the whole text as body.
    The body is everything after the closing delimiter line, untouched.
    Raises MalformedDocument for an unterminated block, invalid YAML, or a non-mapping header.
    """
    text = raw.lstrip("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != DELIMITER:
        return {}, text

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == DELIMITER:
            end = i
            break
    if end is None:
        raise MalformedDocument(f"Unterminated frontmatter block in {source}")

    header_text = "".join(lines[1:end])
    try:
        data = yaml.safe_load(header_text) if header_text.strip() else None
    except yaml.YAMLError as exc:
        raise MalformedDocument(f"Failed to parse frontmatter in {source}: {exc}") from exc

    if data is None:
        data = {}
    elif not isinstance(data, dict):
        raise MalformedDocument(f"Frontmatter in {source} must be a YAML mapping")

    return data, "".join(lines[end + 1:])


def serialize(header: Dict[str, Any], body: str = "") -> str:
    """Render header + body back to text; key order and unknown keys are kept."""
    dumped = yaml.safe_dump(
        header,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    ) if header else ""
    if body and not body.endswith("\n"):
        body += "\n"
    return f"{DELIMITER}\n{dumped}{DELIMITER}\n{body}"
