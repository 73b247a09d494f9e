"""
Article page extraction for Dcard Thread Relay.

Reads the article fields from a rendered Dcard article page. The selectors
below are a contract with the Dcard front-end; when the site changes its
markup these are the strings to update.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

import httpx
from bs4 import BeautifulSoup

from .models import Article
from .utils import article_id_from_url, is_http_url

logger = logging.getLogger(__name__)

TITLE_SELECTOR = "h1"
TIME_SELECTOR = "article time"
CONTENT_SELECTOR = "article .d_ma_2n.d_gr0vis_23.c1golu5u"
CANONICAL_SELECTOR = "link[rel=canonical]"

REQUIRED_FIELDS = ("title", "created_at", "content", "url", "id")


class ExtractionError(Exception):
    """Base class for failures that make a run impossible before any relay."""


class MissingFieldError(ExtractionError, ValueError):
    """Raised when a required article field is absent from the page."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(
            "Failed to scrape article data: missing required data (%s)" % ", ".join(missing)
        )


class PageLoadError(ExtractionError):
    """Raised when the article page cannot be read or downloaded."""


def _text(soup: BeautifulSoup, selector: str) -> Optional[str]:
    elem = soup.select_one(selector)
    if elem is None:
        return None
    # Keep block-level line breaks the way a browser's innerText does
    return elem.get_text("\n").strip()


def _attr(soup: BeautifulSoup, selector: str, name: str) -> Optional[str]:
    elem = soup.select_one(selector)
    if elem is None:
        return None
    value = elem.get(name)
    return value.strip() if value else None


def extract_article(html: str) -> Article:
    """
    Extract the article record from a rendered Dcard article page.

    Args:
        html: Full HTML of the article page

    Returns:
        The Article record

    Raises:
        MissingFieldError: If title, publish time, body, canonical URL or the
            ID derived from it is missing or empty. No record is produced.
    """
    soup = BeautifulSoup(html, "lxml")

    url = _attr(soup, CANONICAL_SELECTOR, "href")
    fields: Dict[str, Optional[str]] = {
        "title": _text(soup, TITLE_SELECTOR),
        "created_at": _attr(soup, TIME_SELECTOR, "datetime"),
        "content": _text(soup, CONTENT_SELECTOR),
        "url": url,
        "id": article_id_from_url(url),
    }

    missing = [name for name in REQUIRED_FIELDS if not fields[name]]
    if missing:
        raise MissingFieldError(missing)

    return Article(**fields)


async def load_page(source: str, client: Optional[httpx.AsyncClient] = None) -> str:
    """
    Return the HTML of the article page.

    ``source`` is either a saved page on disk or an http(s) URL, in which
    case the page is downloaded with ``client``.

    Raises:
        PageLoadError: If the file cannot be read or the download fails.
    """
    if not is_http_url(source):
        try:
            return Path(source).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PageLoadError(f"Could not read page file {source}: {e}") from e

    if client is None:
        raise PageLoadError(f"No HTTP client available to download {source}")

    logger.info("Downloading article page %s", source)
    try:
        response = await client.get(source)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise PageLoadError(f"Failed to fetch {source}: {e}") from e
    return response.text
