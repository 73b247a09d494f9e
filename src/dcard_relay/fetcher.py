"""
Async comment and reply fetcher for Dcard threads.

This module walks the Dcard comments API page by page and relays every
comment, and the replies under it, through a RelayClient:
- Cursor pagination (``nextKey``) bounded by a maximum page count
- Fixed request delay with jitter to stay under the rate limit
- Bounded retry on HTTP 429 and transport errors
- Concurrent relay of the replies under one comment

API: https://www.dcard.tw/service/api/v2/
"""

import asyncio
import logging
from typing import Any, List, Optional

import httpx
import orjson
from tqdm import tqdm

from .models import Comment, Reply
from .relay import RelayClient
from .telemetry import COMMENT_PAGE, REPLIES, FetchStats, add_jitter

API_BASE_URL = "https://www.dcard.tw/service/api/v2"

# Traversal bounds
MAX_COMMENT_PAGES = 3
COMMENTS_PER_PAGE = 20

# Pacing between API requests
REQUEST_DELAY = 1.0
REQUEST_JITTER = 0.5
REQUEST_TIMEOUT = 30.0

# Retry settings for rate limiting and network errors
MAX_RETRIES = 3
RETRY_DELAY = 2.0

# HTTP status codes that are safe to retry
RETRYABLE_STATUS_CODES = {429}


class ThreadFetcher:
    """
    Fetches the comments and replies of one article and relays them.

    Comments are processed strictly in page order. A comment with replies
    has its replies fetched and relayed before the next comment starts.
    Replies under one comment are relayed concurrently.

    Usage:
        fetcher = ThreadFetcher(relay, client)
        comments = await fetcher.fetch_comments(article.id)
    """

    def __init__(
        self,
        relay: RelayClient,
        client: httpx.AsyncClient,
        max_pages: int = MAX_COMMENT_PAGES,
        replies_limit: int = COMMENTS_PER_PAGE,
        request_delay: float = REQUEST_DELAY,
        jitter: float = REQUEST_JITTER,
        max_retries: int = MAX_RETRIES,
        retry_delay: float = RETRY_DELAY,
        timeout: float = REQUEST_TIMEOUT,
        api_base_url: str = API_BASE_URL,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            relay: Relay client used to store every comment and reply
            client: Shared HTTP client for the Dcard API
            max_pages: Maximum number of comment pages requested per run
            replies_limit: Page size of the (single) replies request
            request_delay: Seconds to wait before each comment page after the first
            jitter: Maximum random seconds added to every delay
            max_retries: Retries after a 429 or network error before giving up
            retry_delay: Fixed pause before each retry
            timeout: Per-request timeout in seconds
            api_base_url: Root of the Dcard API
            logger: Logger to report progress to
        """
        self.relay = relay
        self.client = client
        self.max_pages = max_pages
        self.replies_limit = replies_limit
        self.request_delay = request_delay
        self.jitter = jitter
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.api_base_url = api_base_url.rstrip("/")
        self.log = logger or logging.getLogger(__name__)

        self.stats = FetchStats()
        self.comment_count = 0
        self.reply_count = 0
        self.relayed = 0
        self.failed = 0

    def _count(self, stored: bool):
        if stored:
            self.relayed += 1
        else:
            self.failed += 1

    def comments_url(self, article_id: str, cursor: Optional[str] = None) -> str:
        url = f"{self.api_base_url}/commentRanking/posts/{article_id}/comments?negative=downvote"
        if cursor:
            url += f"&nextKey={cursor}"
        return url

    def replies_url(self, article_id: str, comment_id: str) -> str:
        return (
            f"{self.api_base_url}/posts/{article_id}/comments"
            f"?parentId={comment_id}&limit={self.replies_limit}"
        )

    async def _get_json(self, url: str) -> Optional[Any]:
        """Fetch a URL and decode its JSON body, with bounded retry.

        Retries on rate limiting (429) and network errors, including timeouts,
        after a fixed pause with jitter. Any other non-success status fails
        immediately. Returns None when the fetch failed.
        """
        attempt = 0

        while True:
            try:
                response = await self.client.get(url, timeout=self.timeout)
            except httpx.RequestError as e:
                reason = type(e).__name__
                self.log.warning("Request error for %s: %s", url, e)
            else:
                self.stats.record_status(response.status_code)

                if response.status_code not in RETRYABLE_STATUS_CODES:
                    if not response.is_success:
                        self.log.error("HTTP %d for %s: %s",
                                       response.status_code, url, response.reason_phrase)
                        return None
                    return orjson.loads(response.content)

                reason = f"HTTP {response.status_code}"
                self.log.warning("Rate limited (HTTP %d) for %s", response.status_code, url)

            if attempt >= self.max_retries:
                self.stats.record_retry_exhausted(reason)
                self.log.error("Failed to fetch %s after %d attempts", url, attempt + 1)
                return None

            attempt += 1
            delay = add_jitter(self.retry_delay, self.jitter)
            self.log.info("Retrying %s in %.1fs (%d/%d)", url, delay, attempt, self.max_retries)
            await asyncio.sleep(delay)

    async def fetch_comments(self, article_id: str) -> List[Comment]:
        """
        Fetch, relay and return the comments of an article.

        Walks at most ``max_pages`` pages, following ``nextKey`` until the
        API stops returning one. A failed page ends the walk; comments
        relayed before it stay relayed.
        """
        all_comments: List[Comment] = []
        cursor: Optional[str] = None

        with tqdm(total=self.max_pages, desc="Comment pages", unit="page") as pbar:
            for page in range(1, self.max_pages + 1):
                self.log.info("Extracting comment page (%d/%d)...", page, self.max_pages)

                if page > 1:
                    await asyncio.sleep(add_jitter(self.request_delay, self.jitter))

                try:
                    data = await self._get_json(self.comments_url(article_id, cursor))
                    if data is None:
                        self.stats.record_fetch(COMMENT_PAGE, False)
                        self.log.error("Failed to fetch comments page %d", page)
                        break

                    for item in data["items"]:
                        comment = Comment.from_api(item)
                        all_comments.append(comment)
                        self.comment_count += 1

                        self._count(await self.relay.store_comment(article_id, comment))

                        if (item.get("subCommentCount") or 0) > 0:
                            await self.fetch_and_store_replies(article_id, comment.id)

                    cursor = data.get("nextKey")
                    self.stats.record_fetch(COMMENT_PAGE, True)
                except Exception as e:
                    self.stats.record_fetch(COMMENT_PAGE, False)
                    self.log.error("Error fetching comments page %d: %s", page, e)
                    break

                pbar.update(1)

                if not cursor:
                    break

        self.log.info("Relayed %d comments for article %s", len(all_comments), article_id)
        return all_comments

    async def fetch_and_store_replies(self, article_id: str, comment_id: str) -> List[Reply]:
        """
        Fetch the first page of replies to a comment and relay them concurrently.

        Returns the replies, or an empty list when the fetch failed.
        """
        self.log.info("Extracting replies for comment %s...", comment_id)

        try:
            data = await self._get_json(self.replies_url(article_id, comment_id))
            if data is None:
                self.stats.record_fetch(REPLIES, False)
                self.log.error("Failed to fetch replies for comment %s", comment_id)
                return []

            replies = [Reply.from_api(item) for item in data]
            results = await asyncio.gather(
                *[self.relay.store_reply(article_id, comment_id, reply) for reply in replies]
            )
        except Exception as e:
            self.stats.record_fetch(REPLIES, False)
            self.log.error("Error fetching replies for comment %s: %s", comment_id, e)
            return []

        self.stats.record_fetch(REPLIES, True)
        self.reply_count += len(replies)
        for stored in results:
            self._count(stored)
        self.log.info("Stored %d/%d replies for comment %s", sum(results), len(replies), comment_id)
        return replies
