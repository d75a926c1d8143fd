"""
Feed fetch adapter.

Fetches one feed URL and normalizes it into a FeedResult. Wire-format
parsing is delegated to feedparser; the adapter's own job is dropping items
whose link is missing or not a usable absolute URL, and normalizing dates.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import time
from typing import Any
from urllib.parse import urlparse

import feedparser
import httpx

from ..config import FetchConfig
from ..core.errors import FeedFetchError
from ..core.types import Article, FeedResult
from ..utils.logging import log_event
from .extractor import html_to_text
from .fetcher import http_client

logger = logging.getLogger(__name__)


def is_valid_link(link: str | None) -> bool:
    """Return True if ``link`` is a syntactically valid absolute URL.

    The URL must parse, and carry both a scheme and a host.

    Examples:
        >>> is_valid_link("https://example.com/post")
        True
        >>> is_valid_link("/relative/path")
        False
        >>> is_valid_link("http://[::1")
        False
    """
    if not link or not isinstance(link, str):
        return False
    try:
        parts = urlparse(link)
        # Accessing port validates it; malformed ports raise ValueError
        parts.port
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc)


async def fetch_feed(
    url: str,
    cfg: FetchConfig,
    client: httpx.AsyncClient | None = None,
) -> FeedResult:
    """Fetch and parse a feed.

    Args:
        url: Feed URL
        cfg: Fetch configuration (timeout, user agent, proxy behavior)
        client: Optional pre-built client

    Returns:
        FeedResult with the feed metadata and items in source order

    Raises:
        FeedFetchError: If the request fails, returns a non-success status,
            times out, or the body is not a parseable feed
    """
    log_event(logger, "Feed fetch start", level=logging.DEBUG, event="feed_fetch_start", url=url)
    try:
        async with http_client(cfg, user_agent=cfg.feed_user_agent, client=client) as http:
            resp = await http.get(url, headers={"User-Agent": cfg.feed_user_agent})
            resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise FeedFetchError("Failed to fetch feed", detail=f"{type(exc).__name__}: {exc}") from exc

    parsed = feedparser.parse(resp.content)
    feed_meta = parsed.get("feed", {})
    if parsed.get("bozo") and not parsed.get("entries") and not feed_meta.get("title"):
        raise FeedFetchError(
            "Failed to fetch feed",
            detail=f"Unparseable feed: {parsed.get('bozo_exception')}",
        )

    items: list[Article] = []
    skipped = 0
    for entry in parsed.get("entries", []):
        article = normalize_entry(entry)
        if article is None:
            skipped += 1
            continue
        items.append(article)

    log_event(
        logger,
        "Feed fetched",
        level=logging.DEBUG,
        event="feed_fetched",
        url=url,
        items=len(items),
        skipped=skipped,
    )
    return FeedResult(
        url=url,
        title=feed_meta.get("title"),
        description=feed_meta.get("subtitle") or feed_meta.get("description"),
        link=feed_meta.get("link"),
        items=items,
    )


def normalize_entry(entry: dict[str, Any]) -> Article | None:
    """Convert one feedparser entry into an Article, or None if its link is unusable."""
    link = entry.get("link")
    if not is_valid_link(link):
        return None

    content = _entry_content(entry)
    summary = entry.get("summary")
    return Article(
        title=(entry.get("title") or "").strip(),
        link=link,
        pub_date=entry.get("published") or entry.get("updated"),
        iso_date=_iso_date(entry),
        content=content,
        content_snippet=html_to_text(summary or content) or None,
        categories=[tag.get("term") for tag in entry.get("tags", []) if tag.get("term")],
    )


def _entry_content(entry: dict[str, Any]) -> str | None:
    contents = entry.get("content") or []
    for item in contents:
        value = item.get("value")
        if value:
            return value
    return entry.get("summary") or None


def _iso_date(entry: dict[str, Any]) -> str | None:
    """Normalize the entry date to ISO 8601 UTC using feedparser's parsed struct."""
    for key in ("published_parsed", "updated_parsed"):
        parsed: time.struct_time | None = entry.get(key)
        if not parsed:
            continue
        try:
            dt = datetime(*parsed[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError):
            continue
        return dt.strftime("%Y-%m-%dT%H:%M:%SZ")
    return None
