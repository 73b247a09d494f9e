"""
Dcard Thread Relay

This package extracts a Dcard discussion thread (article, comments and
replies) and relays every record to a storage backend over HTTP.

Main components:
- extract_article: Reads the article record from a rendered page
- ThreadFetcher: Paginates the comments API and fetches replies
- RelayClient: POSTs each record to the backend
- relay_thread: Runs the whole thread through the pipeline

Usage:
    import asyncio
    from dcard_relay import RelayClient, ThreadFetcher, relay_thread
    from dcard_relay.pipeline import build_client

    async def run(html):
        async with build_client(30.0) as client:
            relay = RelayClient(client, base_url="http://localhost:8080")
            fetcher = ThreadFetcher(relay, client)
            return await relay_thread(html, relay, fetcher)
"""

from .extractor import MissingFieldError, PageLoadError, extract_article
from .fetcher import ThreadFetcher
from .models import Article, Comment, Reply, RunSummary
from .pipeline import relay_thread
from .relay import RelayClient
from .utils import format_author

__all__ = [
    'Article',
    'Comment',
    'Reply',
    'RunSummary',
    'MissingFieldError',
    'PageLoadError',
    'extract_article',
    'format_author',
    'ThreadFetcher',
    'RelayClient',
    'relay_thread',
]

__version__ = '1.0.0'
