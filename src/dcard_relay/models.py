"""
Data models for Dcard Thread Relay.

This module defines typed records for an extracted discussion thread.
Each record is a frozen dataclass: it is built once, relayed to the
backend, and discarded. ``to_dict()`` produces the JSON body that is
POSTed to the storage service.
"""

from dataclasses import dataclass, asdict
from typing import Any, Mapping, Optional

from .utils import format_author


@dataclass(frozen=True)
class Article:
    """
    Represents the article (original post) of a Dcard thread.

    Attributes:
        id: Article ID, taken from the last path segment of the canonical URL
        url: Canonical URL of the article page
        title: Article title
        content: Body text of the article
        created_at: ISO 8601 publish time from the page's <time> element

    Example:
        article = Article(
            id="255001234",
            url="https://www.dcard.tw/f/talk/p/255001234",
            title="Hello",
            content="First post",
            created_at="2024-01-15T10:30:00.000Z"
        )
    """
    id: str
    url: str
    title: str
    content: str
    created_at: str

    def to_dict(self) -> dict:
        """Convert the article to a dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class Comment:
    """
    Represents a top-level comment on an article.

    Attributes:
        id: Comment ID from the comments API
        content: Comment text
        author: Display string synthesized by ``format_author``
        likes: Like count
        created_at: ISO 8601 creation time
    """
    id: str
    content: str
    author: str
    likes: int = 0
    created_at: str = ""

    @classmethod
    def from_api(cls, item: Mapping[str, Any]):
        """Build a record from one item of a comments/replies API response."""
        return cls(
            id=item["id"],
            content=item.get("content") or "",
            author=format_author(item),
            likes=item.get("likeCount") or 0,
            created_at=item.get("createdAt") or "",
        )

    def to_dict(self) -> dict:
        """Convert the comment to a dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class Reply(Comment):
    """A reply to a comment. Same shape as Comment, relayed to a different endpoint."""


@dataclass
class RunSummary:
    """Counts collected during one relay run, used for the final log line."""
    article_id: Optional[str] = None
    article_stored: bool = False
    comments: int = 0
    replies: int = 0
    relayed: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
