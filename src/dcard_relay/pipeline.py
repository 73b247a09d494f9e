"""
Run orchestration: extract the article, relay it, then relay its thread.
"""

import logging
from typing import Optional

import httpx

from .extractor import MissingFieldError, extract_article
from .fetcher import ThreadFetcher
from .models import RunSummary
from .relay import RelayClient


async def relay_thread(
    html: str,
    relay: RelayClient,
    fetcher: ThreadFetcher,
    logger: Optional[logging.Logger] = None,
) -> RunSummary:
    """
    Relay one Dcard thread to the backend.

    1. Extract the article from the page HTML (a missing field ends the run
       before any network call)
    2. Store the article; stop if the backend rejects it
    3. Fetch and store comments, which also fetches and stores replies

    Unexpected errors are logged and reported through the returned summary
    rather than raised.
    """
    log = logger or logging.getLogger(__name__)
    summary = RunSummary()

    try:
        article = extract_article(html)
        summary.article_id = article.id
        log.info("Starting extraction for article: %s", article.id)

        summary.article_stored = await relay.store_article(article)
        if not summary.article_stored:
            log.error("Failed to store article. Aborting extraction.")
            return summary

        await fetcher.fetch_comments(article.id)
        log.info("Extraction completed successfully!")
    except MissingFieldError as e:
        log.error("%s", e)
    except Exception:
        log.exception("Error during extraction")
    finally:
        summary.comments = fetcher.comment_count
        summary.replies = fetcher.reply_count
        summary.relayed = fetcher.relayed + (1 if summary.article_stored else 0)
        summary.failed = fetcher.failed + (1 if summary.article_id and not summary.article_stored else 0)

    return summary


def build_client(timeout: float) -> httpx.AsyncClient:
    """Create the shared HTTP client used for the Dcard site and the backend."""
    return httpx.AsyncClient(
        http2=True,
        timeout=timeout,
        follow_redirects=True,
        headers={
            'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
            'Accept': 'application/json, text/html;q=0.9, */*;q=0.8',
            'Accept-Language': 'zh-TW,zh;q=0.9,en-US;q=0.8,en;q=0.7',
        }
    )
