"""Filename generation from document titles."""

from __future__ import annotations

import re

MAX_BASE_LENGTH = 60
DOCUMENT_SUFFIX = ".md"

_DISALLOWED = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN = re.compile(r"-{2,}")


def slugify(title: str) -> str:
    """Lowercase ASCII slug of *title*, or ``untitled`` when nothing is left.

    Examples:
        >>> slugify("Review Q1 Budget!")
        'review-q1-budget'
        >>> slugify("  ***  ")
        'untitled'
    """
    slug = title.lower().replace(" ", "-").replace("_", "-")
    slug = _DISALLOWED.sub("", slug)
    slug = _HYPHEN_RUN.sub("-", slug).strip("-")
    if not slug:
        return "untitled"
    if len(slug) > MAX_BASE_LENGTH:
        # Cut at the last hyphen when it keeps more than half the limit.
        cut = slug.rfind("-", 0, MAX_BASE_LENGTH)
        slug = slug[:cut] if cut > MAX_BASE_LENGTH // 2 else slug[:MAX_BASE_LENGTH]
        slug = slug.rstrip("-")
    return slug


def generate_filename(title: str) -> str:
    """Filename for a new document titled *title*."""
    return f"{slugify(title)}{DOCUMENT_SUFFIX}"
