"""Text helpers shared by schemas and derivations"""

from typing import Tuple
import html
import re
import bleach

# Review comments are stored and shown as plain text
ALLOWED_TAGS: list = []


def split_genres(genre: str) -> Tuple[str, ...]:
    """
    Split a comma-joined genre string into trimmed, non-empty tokens.
    Order is preserved, duplicates are kept as they appear.
    """
    if not genre:
        return ()
    return tuple(token.strip() for token in genre.split(",") if token.strip())


def contains_ignore_case(haystack: str, needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()


def strip_markup(value: str) -> str:
    """
    Remove HTML tags from user-entered text and return plain text.
    bleach escapes entities on the way out, so they are decoded again:
    "Tom & Jerry" stays "Tom & Jerry".
    """
    if not value:
        return value
    return html.unescape(bleach.clean(value, tags=ALLOWED_TAGS, strip=True))


def validate_no_script(value: str) -> str:
    """Block common XSS patterns"""
    if not value:
        return value

    dangerous_patterns = [
        r'<script[^>]*>',
        r'javascript:',
        r'<iframe',
    ]

    for pattern in dangerous_patterns:
        if re.search(pattern, value, re.IGNORECASE):
            raise ValueError("Invalid characters detected")

    return value
