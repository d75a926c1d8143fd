"""Tests for concurrent feed aggregation and the recency window."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from rss_brief.core.aggregator import (
    aggregate_feeds,
    effective_timestamp,
    filter_recent,
    parse_timestamp,
)
from rss_brief.core.errors import FeedFetchError
from rss_brief.core.types import AggregatedArticle, Article, FeedResult, Subscription


NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _iso(hours_ago: float) -> str:
    return (NOW - timedelta(hours=hours_ago)).strftime("%Y-%m-%dT%H:%M:%SZ")


def _article(title: str, hours_ago: float | None) -> Article:
    return Article(
        title=title,
        link=f"https://example.com/{title.replace(' ', '-')}",
        iso_date=_iso(hours_ago) if hours_ago is not None else None,
    )


def _fetcher(feeds: dict[str, list[Article] | Exception]):
    calls: list[str] = []

    async def fetch(url: str) -> FeedResult:
        calls.append(url)
        result = feeds[url]
        if isinstance(result, Exception):
            raise result
        return FeedResult(url=url, title="ignored", items=list(result))

    return fetch, calls


def test_one_feed_keeps_only_recent_item_tagged_with_feed_title():
    subs = [Subscription(id="1", url="https://a.example.com/rss", title="Feed A")]
    fetch, _ = _fetcher({subs[0].url: [_article("fresh", 1), _article("stale", 72)]})

    result = asyncio.run(aggregate_feeds(subs, fetch, now=NOW))

    assert [item.article.title for item in result] == ["fresh"]
    assert result[0].feed_title == "Feed A"


def test_aggregate_sorts_newest_first_across_feeds():
    subs = [
        Subscription(id="1", url="https://a.example.com/rss", title="Feed A"),
        Subscription(id="2", url="https://b.example.com/rss", title="Feed B"),
    ]
    fetch, _ = _fetcher(
        {
            subs[0].url: [_article("a-5h", 5), _article("a-1h", 1)],
            subs[1].url: [_article("b-3h", 3), _article("b-30h", 30)],
        }
    )

    result = asyncio.run(aggregate_feeds(subs, fetch, now=NOW))

    assert [item.article.title for item in result] == ["a-1h", "b-3h", "a-5h", "b-30h"]
    assert [item.feed_title for item in result] == ["Feed A", "Feed B", "Feed A", "Feed B"]


def test_failing_feed_contributes_nothing_and_does_not_block_others():
    subs = [
        Subscription(id="1", url="https://down.example.com/rss", title="Down"),
        Subscription(id="2", url="https://up.example.com/rss", title="Up"),
    ]
    fetch, calls = _fetcher(
        {
            subs[0].url: FeedFetchError("Failed to fetch feed"),
            subs[1].url: [_article("alive", 2)],
        }
    )

    result = asyncio.run(aggregate_feeds(subs, fetch, now=NOW))

    assert sorted(calls) == sorted(sub.url for sub in subs)
    assert [(item.feed_title, item.article.title) for item in result] == [("Up", "alive")]


def test_unexpected_exception_is_absorbed():
    subs = [Subscription(id="1", url="https://a.example.com/rss", title="A")]
    fetch, _ = _fetcher({subs[0].url: RuntimeError("boom")})

    assert asyncio.run(aggregate_feeds(subs, fetch, now=NOW)) == []


def test_no_subscriptions_yields_empty_timeline():
    fetch, calls = _fetcher({})

    assert asyncio.run(aggregate_feeds([], fetch, now=NOW)) == []
    assert calls == []


def test_cutoff_is_strict_and_undated_items_are_dropped():
    items = [
        AggregatedArticle(article=_article("at-cutoff", 48), feed_title="F"),
        AggregatedArticle(article=_article("just-inside", 47.99), feed_title="F"),
        AggregatedArticle(article=_article("undated", None), feed_title="F"),
    ]

    kept = filter_recent(items, NOW, 48)

    assert [item.article.title for item in kept] == ["just-inside"]


def test_effective_timestamp_falls_back_to_pub_date():
    article = Article(title="t", link="https://example.com/t", pub_date="Mon, 19 Oct 2026 11:00:00 GMT")

    assert effective_timestamp(article) == (NOW - timedelta(hours=1)).timestamp()


def test_parse_timestamp_formats():
    expected = NOW.timestamp()
    assert parse_timestamp("2026-10-19T12:00:00Z") == expected
    assert parse_timestamp("2026-10-19T14:00:00+02:00") == expected
    assert parse_timestamp("2026-10-19T12:00:00") == expected
    assert parse_timestamp("Mon, 19 Oct 2026 12:00:00 +0000") == expected
    assert parse_timestamp("yesterday-ish") is None
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None
