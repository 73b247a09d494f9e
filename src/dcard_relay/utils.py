"""
Utility functions for Dcard Thread Relay.

This module provides the small pure helpers shared by the extractor,
the fetcher and the models: author display formatting and URL handling.
"""

from typing import Any, Mapping, Optional
from urllib.parse import urlparse


def format_author(data: Mapping[str, Any]) -> str:
    """
    Build the author display string for a comment or reply.

    Dcard items carry identity fields instead of a ready-made author name.
    The display string is chosen by this precedence:

    1. Nickname persona (``withNickname`` with both persona fields present):
       ``"{personaNickname} (@{personaUid}, {gender})"``
    2. ``withNickname`` set but persona fields absent:
       ``"@{school} (@{department}, {gender})"``
    3. Anonymous school identity:
       ``"{school} {department} ({gender})"``, department omitted when empty

    Args:
        data: One item from the comments or replies API

    Returns:
        The formatted author string

    Example:
        format_author({"withNickname": True, "personaNickname": "Alice",
                       "personaUid": "u1", "gender": "F"})
        # Returns: "Alice (@u1, F)"

        format_author({"withNickname": False, "school": "NTU",
                       "department": "CS", "gender": "M"})
        # Returns: "NTU CS (M)"
    """
    gender = data.get("gender")

    if data.get("withNickname") and data.get("personaNickname") and data.get("personaUid"):
        return f"{data['personaNickname']} (@{data['personaUid']}, {gender})"

    # Rule 2 reuses school/department under the nickname flag. Kept as the
    # site data has always been rendered this way.
    if data.get("withNickname"):
        return f"@{data.get('school')} (@{data.get('department')}, {gender})"

    department = data.get("department")
    suffix = f" {department}" if department else ""
    return f"{data.get('school')}{suffix} ({gender})"


def article_id_from_url(url: Optional[str]) -> Optional[str]:
    """
    Return the last path segment of an article URL.

    Example:
        article_id_from_url("https://www.dcard.tw/f/talk/p/255001234")
        # Returns: "255001234"

    A trailing slash yields an empty string, which callers treat as missing.
    """
    if not url:
        return None
    return url.split("/")[-1]


def is_http_url(source: str) -> bool:
    """True when ``source`` looks like an http(s) URL rather than a file path."""
    return urlparse(source).scheme in ("http", "https")
