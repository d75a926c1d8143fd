"""Tests for AppState: subscribing, refreshing and refresh ordering."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from rss_brief.config import AppConfig
from rss_brief.core.errors import DuplicateSubscriptionError, FeedFetchError, InvalidInputError
from rss_brief.core.state import AppState
from rss_brief.core.store import MemoryStorage, SubscriptionStore
from rss_brief.core.types import Article, FeedResult


def _recent_iso(hours_ago: float = 1) -> str:
    return (datetime.now(timezone.utc) - timedelta(hours=hours_ago)).strftime("%Y-%m-%dT%H:%M:%SZ")


def _state(fetch, defaults=None) -> AppState:
    store = SubscriptionStore(MemoryStorage(), defaults=defaults or [])
    return AppState(store, fetch)


def test_add_feed_uses_feed_title_and_persists():
    async def fetch(url: str) -> FeedResult:
        return FeedResult(url=url, title="Fetched Title")

    state = _state(fetch)
    sub = asyncio.run(state.add_feed("https://example.com/rss"))

    assert sub.title == "Fetched Title"
    assert state.subscriptions == [sub]


def test_add_feed_falls_back_to_unknown_feed_title():
    async def fetch(url: str) -> FeedResult:
        return FeedResult(url=url, title=None)

    sub = asyncio.run(_state(fetch).add_feed("https://example.com/rss"))

    assert sub.title == "Unknown Feed"


def test_add_feed_rejects_invalid_and_duplicate_urls_without_fetching():
    calls: list[str] = []

    async def fetch(url: str) -> FeedResult:
        calls.append(url)
        return FeedResult(url=url, title="T")

    state = _state(fetch, defaults=[{"title": "A", "url": "https://a.example.com/rss"}])

    with pytest.raises(InvalidInputError):
        asyncio.run(state.add_feed(""))
    with pytest.raises(InvalidInputError):
        asyncio.run(state.add_feed("not a url"))
    with pytest.raises(DuplicateSubscriptionError):
        asyncio.run(state.add_feed("https://a.example.com/rss"))
    assert calls == []


def test_add_feed_propagates_fetch_failure_and_stores_nothing():
    async def fetch(url: str) -> FeedResult:
        raise FeedFetchError("Failed to fetch feed")

    state = _state(fetch)

    with pytest.raises(FeedFetchError):
        asyncio.run(state.add_feed("https://example.com/rss"))
    assert state.subscriptions == []


def test_refresh_replaces_timeline():
    async def fetch(url: str) -> FeedResult:
        return FeedResult(url=url, items=[Article(title="new", link="https://a.example.com/1", iso_date=_recent_iso())])

    state = _state(fetch, defaults=[{"title": "A", "url": "https://a.example.com/rss"}])

    assert asyncio.run(state.refresh()) is True
    assert [a.article.title for a in state.articles] == ["new"]
    assert state.last_refreshed is not None


def test_stale_refresh_result_is_discarded():
    async def scenario():
        slow_gate = asyncio.Event()

        async def fetch(url: str) -> FeedResult:
            if not slow_gate.is_set():
                slow_gate.set()
                await asyncio.sleep(0.05)
                return FeedResult(url=url, items=[Article(title="old", link="https://a.example.com/old", iso_date=_recent_iso())])
            return FeedResult(url=url, items=[Article(title="latest", link="https://a.example.com/new", iso_date=_recent_iso())])

        state = _state(fetch, defaults=[{"title": "A", "url": "https://a.example.com/rss"}])
        first = asyncio.create_task(state.refresh())
        await slow_gate.wait()
        second = asyncio.create_task(state.refresh())
        return state, await first, await second

    state, first_applied, second_applied = asyncio.run(scenario())

    assert first_applied is False
    assert second_applied is True
    assert [a.article.title for a in state.articles] == ["latest"]


def test_from_config_uses_configured_storage_key_and_defaults():
    cfg = AppConfig()
    storage = MemoryStorage()

    state = AppState.from_config(cfg, storage=storage)

    assert len(state.subscriptions) == len(cfg.feeds.defaults)
    assert state.window_hours == 48.0
