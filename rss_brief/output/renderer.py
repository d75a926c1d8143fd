"""
HTML rendering of the aggregated timeline.

The index page is a card grid of the current articles, newest first, with
the subscriptions listed alongside. Rendering is pure: it takes the data and
returns a string, the web layer decides when to call it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.aggregator import parse_timestamp
from ..core.types import AggregatedArticle, Subscription
from ..fetch.extractor import html_to_text

CARD_SNIPPET_CHARS = 300


def _env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(Path(__file__).resolve().parent.parent / "templates")),
        autoescape=select_autoescape(["html"]),
    )


def display_date(article: AggregatedArticle) -> str:
    """Short month-day label, e.g. "Oct 19". Empty when the item is undated."""
    ts = parse_timestamp(article.article.iso_date) or parse_timestamp(article.article.pub_date)
    if ts is None:
        return ""
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return f"{dt.strftime('%b')} {dt.day}"


def _card_snippet(article: AggregatedArticle) -> str:
    item = article.article
    if item.content_snippet:
        return item.content_snippet
    return html_to_text(item.content)[:CARD_SNIPPET_CHARS]


def render_index(
    articles: Iterable[AggregatedArticle],
    subscriptions: Iterable[Subscription],
    last_refreshed: datetime | None = None,
    title: str = "rss-brief",
    feed_filter: str | None = None,
) -> str:
    """Render the article grid.

    Args:
        articles: Aggregated timeline, already sorted newest first
        subscriptions: Current subscriptions, shown with per-feed counts
        last_refreshed: When the timeline was last recomputed
        title: Page title
        feed_filter: Only show articles whose feed title matches exactly
    """
    articles = list(articles)
    counts: dict[str, int] = {}
    for article in articles:
        counts[article.feed_title] = counts.get(article.feed_title, 0) + 1

    shown = [a for a in articles if not feed_filter or a.feed_title == feed_filter]
    cards = [
        {
            "title": a.article.title,
            "link": a.article.link,
            "feed_title": a.feed_title,
            "date": display_date(a),
            "snippet": _card_snippet(a),
            "categories": a.article.categories[:3],
        }
        for a in shown
    ]
    feeds = [
        {"id": sub.id, "title": sub.title, "url": sub.url, "count": counts.get(sub.title, 0)}
        for sub in subscriptions
    ]

    template = _env().get_template("index.html")
    return template.render(
        title=title,
        cards=cards,
        feeds=feeds,
        feed_filter=feed_filter,
        total=len(articles),
        last_refreshed=last_refreshed.strftime("%Y-%m-%d %H:%M UTC") if last_refreshed else None,
    )
