"""Stored documents: a markdown heading with YAML front-matter."""

import re

import yaml


def parse_document(text: str) -> tuple[str, dict]:
    """Parse a document into (title, meta).

    The title is the first "# " heading, or "" if there is none.
    """
    text, meta = _extract_front_matter(text)
    for line in text.split("\n"):
        if line.startswith("# "):
            return line[2:].strip(), meta
    return "", meta


def serialize_document(title: str, meta: dict | None = None) -> str:
    """Serialize a title and meta back to document text."""
    parts: list[str] = []
    if meta:
        parts.append("---")
        parts.append(yaml.dump(meta, default_flow_style=False, sort_keys=False).rstrip())
        parts.append("---")
        parts.append("")
    if title:
        parts.append(f"# {title}")
    return "\n".join(parts).rstrip() + "\n"


def _extract_front_matter(text: str) -> tuple[str, dict]:
    """Extract YAML front-matter from text. Returns (remaining_text, meta)."""
    if not text.startswith("---"):
        return text, {}

    match = re.match(r"^---\n(.*?)\n---\n?", text, re.DOTALL)
    if not match:
        return text, {}

    remaining = text[match.end() :]
    try:
        meta = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError:
        meta = {}
    if not isinstance(meta, dict):
        meta = {}
    return remaining, meta
