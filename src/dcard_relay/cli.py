"""CLI interface for Dcard Thread Relay."""

import asyncio
import logging
import sys

import click
import orjson

from .extractor import ExtractionError, extract_article, load_page
from .fetcher import MAX_COMMENT_PAGES, MAX_RETRIES, REQUEST_DELAY, REQUEST_TIMEOUT, ThreadFetcher
from .pipeline import build_client, relay_thread
from .relay import DEFAULT_BACKEND_URL, DEFAULT_PLATFORM, RelayClient


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable debug logging')
def main(verbose):
    """Dcard Thread Relay - extract a Dcard thread and relay it to a storage backend."""
    _setup_logging(verbose)


@main.command()
@click.argument('source')
@click.option(
    '--backend-url',
    default=DEFAULT_BACKEND_URL,
    envvar='DCARD_RELAY_BACKEND_URL',
    show_default=True,
    help='Base URL of the storage backend'
)
@click.option(
    '--platform',
    default=DEFAULT_PLATFORM,
    envvar='DCARD_RELAY_PLATFORM',
    show_default=True,
    help='Platform path segment on the backend'
)
@click.option(
    '--max-pages',
    default=MAX_COMMENT_PAGES,
    type=click.IntRange(min=1),
    show_default=True,
    help='Maximum number of comment pages to fetch'
)
@click.option(
    '--max-retries',
    default=MAX_RETRIES,
    type=click.IntRange(min=0),
    show_default=True,
    help='Retries after a rate limit or network error'
)
@click.option(
    '--timeout',
    default=REQUEST_TIMEOUT,
    type=float,
    show_default=True,
    help='Per-request timeout in seconds'
)
@click.option(
    '--delay',
    default=REQUEST_DELAY,
    type=float,
    show_default=True,
    help='Delay between comment page requests in seconds'
)
def relay(source, backend_url, platform, max_pages, max_retries, timeout, delay):
    """Relay the thread at SOURCE (a saved page file or an article URL)."""
    summary = asyncio.run(
        _relay(source, backend_url, platform, max_pages, max_retries, timeout, delay)
    )
    if summary is None or not summary.article_stored:
        sys.exit(1)


async def _relay(source, backend_url, platform, max_pages, max_retries, timeout, delay):
    """Async relay implementation."""
    log = logging.getLogger("dcard_relay")

    async with build_client(timeout) as client:
        try:
            html = await load_page(source, client)
        except ExtractionError as e:
            log.error("%s", e)
            return None

        relay_client = RelayClient(client, base_url=backend_url, platform=platform, logger=log)
        fetcher = ThreadFetcher(
            relay_client,
            client,
            max_pages=max_pages,
            max_retries=max_retries,
            request_delay=delay,
            timeout=timeout,
            logger=log,
        )
        summary = await relay_thread(html, relay_client, fetcher, logger=log)

    log.info("Run summary: %d comments, %d replies, %d relayed, %d failed",
             summary.comments, summary.replies, summary.relayed, summary.failed)
    log.info("Dcard API responses:\n%s", fetcher.stats.get_summary())
    return summary


@main.command()
@click.argument('source', type=click.Path(exists=True, dir_okay=False))
def extract(source):
    """Print the article extracted from a saved page as JSON (no network)."""
    try:
        html = asyncio.run(load_page(source))
        article = extract_article(html)
    except ExtractionError as e:
        raise click.ClickException(str(e))
    click.echo(orjson.dumps(article.to_dict(), option=orjson.OPT_INDENT_2).decode())


if __name__ == '__main__':
    main()
