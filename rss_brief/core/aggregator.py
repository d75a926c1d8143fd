"""
Feed aggregation.

Fetches every subscription concurrently, tags items with their source,
drops anything outside the recency window and returns one list sorted
newest first. Each subscription is fetched in its own branch whose result is
an explicit FeedOutcome, so a dead feed only ever contributes an empty list.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from functools import partial
import logging
from typing import Awaitable, Callable, Iterable

from ..config import FetchConfig
from ..fetch.feed import fetch_feed
from ..utils.logging import log_event
from .types import AggregatedArticle, Article, FeedResult, Subscription

logger = logging.getLogger(__name__)

FeedFetcher = Callable[[str], Awaitable[FeedResult]]

RECENCY_WINDOW_HOURS = 48.0


@dataclass
class FeedOutcome:
    """Result of fetching one subscription during aggregation.

    Attributes:
        subscription: The subscription that was fetched
        items: Items of the feed, empty on failure
        error: Error description on failure, None on success
    """

    subscription: Subscription
    items: list[Article] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_timestamp(value: str | None) -> float | None:
    """Parse an ISO 8601 or RFC 2822 date string into a POSIX timestamp.

    Naive values are read as UTC. Returns None when the value is empty or
    cannot be parsed in either format.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    dt: datetime | None = None
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            dt = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            return None
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def effective_timestamp(article: Article) -> float:
    """Best-available timestamp: ISO date, then the original date, then epoch 0."""
    for value in (article.iso_date, article.pub_date):
        ts = parse_timestamp(value)
        if ts is not None:
            return ts
    return 0.0


def filter_recent(
    articles: Iterable[AggregatedArticle],
    now: datetime,
    window_hours: float = RECENCY_WINDOW_HOURS,
) -> list[AggregatedArticle]:
    """Keep articles whose effective timestamp is strictly after ``now - window``."""
    cutoff = (now - timedelta(hours=window_hours)).timestamp()
    return [item for item in articles if effective_timestamp(item.article) > cutoff]


def sort_newest_first(articles: Iterable[AggregatedArticle]) -> list[AggregatedArticle]:
    """Sort by effective timestamp, descending. Ties keep their input order."""
    return sorted(articles, key=lambda item: effective_timestamp(item.article), reverse=True)


async def fetch_subscription(subscription: Subscription, fetch: FeedFetcher) -> FeedOutcome:
    """Fetch one subscription, converting any failure into a FeedOutcome."""
    try:
        feed = await fetch(subscription.url)
    except Exception as exc:  # noqa: BLE001
        error = f"{type(exc).__name__}: {exc}"
        log_event(
            logger,
            "Feed fetch failed",
            level=logging.WARNING,
            event="feed_fetch_failed",
            url=subscription.url,
            feed_title=subscription.title,
            error=error,
        )
        return FeedOutcome(subscription=subscription, error=error)
    return FeedOutcome(subscription=subscription, items=list(feed.items))


async def aggregate_feeds(
    subscriptions: list[Subscription],
    fetch: FeedFetcher | None = None,
    window_hours: float = RECENCY_WINDOW_HOURS,
    now: datetime | None = None,
) -> list[AggregatedArticle]:
    """Fetch all subscriptions concurrently and merge them into one timeline.

    Args:
        subscriptions: Subscriptions to fetch
        fetch: Coroutine function mapping a feed URL to a FeedResult
        window_hours: Recency window; older items are dropped
        now: Reference time for the recency cutoff (defaults to the current time)

    Returns:
        Aggregated articles, newest first
    """
    fetch = fetch or partial(fetch_feed, cfg=FetchConfig())

    tasks = [asyncio.create_task(fetch_subscription(sub, fetch)) for sub in subscriptions]
    outcomes: list[FeedOutcome] = list(await asyncio.gather(*tasks)) if tasks else []

    merged = [
        AggregatedArticle(article=item, feed_title=outcome.subscription.title)
        for outcome in outcomes
        for item in outcome.items
    ]
    # Cutoff is taken once all fetches have completed
    now = now or datetime.now(timezone.utc)
    recent = filter_recent(merged, now, window_hours)
    result = sort_newest_first(recent)

    log_event(
        logger,
        "Aggregation complete",
        event="aggregation_complete",
        subscriptions=len(subscriptions),
        failed=sum(1 for outcome in outcomes if not outcome.ok),
        fetched=len(merged),
        kept=len(result),
    )
    return result
