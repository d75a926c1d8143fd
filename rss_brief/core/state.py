"""
Application state owned by the composition root.

AppState bundles the subscription store with the in-memory aggregated
timeline. The timeline is recomputed and replaced wholesale on every
refresh; overlapping refreshes are ordered by a monotonically increasing
token so a slow, older refresh can never overwrite a newer result.
"""

from __future__ import annotations

from datetime import datetime, timezone
from functools import partial
import logging

from ..config import AppConfig
from ..fetch.feed import fetch_feed, is_valid_link
from ..llm.tracing import set_span_output, start_span
from ..utils.logging import log_event
from .aggregator import RECENCY_WINDOW_HOURS, FeedFetcher, aggregate_feeds
from .errors import DuplicateSubscriptionError, InvalidInputError
from .store import JsonFileStorage, StoragePort, SubscriptionStore
from .types import AggregatedArticle, Subscription

logger = logging.getLogger(__name__)


class AppState:
    """Subscriptions plus the current aggregated timeline."""

    def __init__(
        self,
        store: SubscriptionStore,
        fetch: FeedFetcher,
        window_hours: float = RECENCY_WINDOW_HOURS,
    ) -> None:
        self.store = store
        self.fetch = fetch
        self.window_hours = window_hours
        self.articles: list[AggregatedArticle] = []
        self.last_refreshed: datetime | None = None
        self._latest_token = 0

    @classmethod
    def from_config(cls, cfg: AppConfig, storage: StoragePort | None = None) -> "AppState":
        storage = storage or JsonFileStorage(cfg.storage.path)
        store = SubscriptionStore(storage, key=cfg.storage.key, defaults=cfg.feeds.defaults)
        return cls(
            store=store,
            fetch=partial(fetch_feed, cfg=cfg.fetch),
            window_hours=cfg.feeds.recency_window_hours,
        )

    @property
    def subscriptions(self) -> list[Subscription]:
        return self.store.list()

    async def add_feed(self, url: str, title: str | None = None, category: str | None = None) -> Subscription:
        """Validate a feed URL by fetching it, then subscribe to it.

        The display title defaults to the feed's own title, then to "Unknown Feed".

        Raises:
            InvalidInputError: If the URL is missing or malformed
            DuplicateSubscriptionError: If the URL is already subscribed
            FeedFetchError: If the feed cannot be fetched or parsed
        """
        url = (url or "").strip()
        if not url:
            raise InvalidInputError("Missing URL parameter")
        if not is_valid_link(url):
            raise InvalidInputError("Invalid feed URL", detail=url)
        if self.store.has_url(url):
            raise DuplicateSubscriptionError("Feed already subscribed", detail=url)

        feed = await self.fetch(url)
        subscription = Subscription.create(
            url=url,
            title=title or feed.title or "Unknown Feed",
            category=category,
        )
        self.store.add(subscription)
        return subscription

    def remove_feed(self, subscription_id: str) -> bool:
        return self.store.remove(subscription_id)

    def issue_token(self) -> int:
        self._latest_token += 1
        return self._latest_token

    def is_latest(self, token: int) -> bool:
        return token == self._latest_token

    async def refresh(self) -> bool:
        """Re-aggregate all subscriptions.

        Returns:
            True if this refresh's result was applied, False if a newer refresh
            was issued while it was in flight and the result was discarded
        """
        token = self.issue_token()
        subscriptions = self.store.list()
        with start_span(
            "rss_brief.refresh",
            kind="chain",
            input_value={"subscriptions": len(subscriptions), "token": token},
        ) as span:
            articles = await aggregate_feeds(subscriptions, self.fetch, self.window_hours)
            if not self.is_latest(token):
                log_event(
                    logger,
                    "Discarding stale refresh",
                    event="refresh_discarded",
                    token=token,
                    latest_token=self._latest_token,
                )
                set_span_output(span, {"applied": False})
                return False

            self.articles = articles
            self.last_refreshed = datetime.now(timezone.utc)
            set_span_output(span, {"applied": True, "articles": len(articles)})
        return True
