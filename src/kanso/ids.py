"""Identifier generation for boards, lists and cards."""

import re


def slugify(text: str) -> str:
    """Convert text to a URL-friendly slug."""
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    return slug or "untitled"


def unique_id(desired: str, existing: set[str]) -> str:
    """Return desired if unused, otherwise append -2, -3, etc."""
    if desired not in existing:
        return desired
    n = 2
    while f"{desired}-{n}" in existing:
        n += 1
    return f"{desired}-{n}"


def next_id(existing) -> str:
    """Generate the next numeric ID after the highest numeric one in existing.

    Non-numeric IDs are ignored. Returns "1" when there are none.
    """
    highest = 0
    for id_ in existing:
        if id_.isdigit():
            highest = max(highest, int(id_))
    return str(highest + 1)
