"""
Relay client: posts extracted records to the storage backend.

Every record is sent as one JSON POST under ``{base_url}/{platform}``.
Storage failures never propagate; each call resolves to True or False and
the caller decides whether to continue.
"""

import logging
from typing import Optional, Union

import httpx
import orjson

from .models import Article, Comment, Reply

DEFAULT_BACKEND_URL = "http://localhost:8080"
DEFAULT_PLATFORM = "dcard"

JSON_HEADERS = {"Content-Type": "application/json"}


class RelayClient:
    """
    POSTs articles, comments and replies to the storage backend.

    Endpoints:
        POST {endpoint}/articles
        POST {endpoint}/articles/{article_id}/comments
        POST {endpoint}/articles/{article_id}/comments/{comment_id}/replies

    The endpoint is fixed at construction time.

    Usage:
        async with httpx.AsyncClient() as client:
            relay = RelayClient(client, base_url="http://localhost:8080")
            ok = await relay.store_article(article)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = DEFAULT_BACKEND_URL,
        platform: str = DEFAULT_PLATFORM,
        logger: Optional[logging.Logger] = None,
    ):
        self.client = client
        self._endpoint = f"{base_url.rstrip('/')}/{platform}"
        self.log = logger or logging.getLogger(__name__)
        self.log.info("Initialized relay for platform: %s (%s)", platform, self._endpoint)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def _post(self, path: str, record: Union[Article, Comment], kind: str) -> bool:
        """POST one record; True only on a 2xx response."""
        if not record.id:
            self.log.error("Refusing to store %s without an id", kind)
            return False

        try:
            response = await self.client.post(
                f"{self._endpoint}{path}",
                content=orjson.dumps(record.to_dict()),
                headers=JSON_HEADERS,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self.log.error("Error storing %s %s: %s", kind, record.id, e)
            return False

        if not response.is_success:
            self.log.error("Failed to store %s %s: HTTP %d %s",
                           kind, record.id, response.status_code, response.reason_phrase)
            return False

        self.log.debug("Successfully stored %s: %s", kind, record.id)
        return True

    async def store_article(self, article: Article) -> bool:
        """Store the article. Comments must not be relayed unless this succeeds."""
        self.log.info("Attempting to store article: %s", article.id)
        stored = await self._post("/articles", article, "article")
        if stored:
            self.log.info("Successfully stored article: %s", article.id)
        return stored

    async def store_comment(self, article_id: str, comment: Comment) -> bool:
        self.log.debug("Attempting to store comment: %s for article: %s", comment.id, article_id)
        return await self._post(f"/articles/{article_id}/comments", comment, "comment")

    async def store_reply(self, article_id: str, comment_id: str, reply: Reply) -> bool:
        self.log.debug("Attempting to store reply: %s for comment: %s", reply.id, comment_id)
        return await self._post(
            f"/articles/{article_id}/comments/{comment_id}/replies", reply, "reply"
        )
