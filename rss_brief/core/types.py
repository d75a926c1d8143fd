"""
Core data types for rss-brief.

This module defines the fundamental data structures shared by every layer:
- Article: One normalized feed item
- FeedResult: A parsed feed with its metadata and valid items
- Subscription: The user's record of intent to follow one feed URL
- AggregatedArticle: Article tagged with the title of the feed it came from
- SummaryResult / AnalysisResult / BriefingResult: Model-generated records

The model-generated records mirror the JSON object the prompts ask for, so
``to_dict`` emits the camelCase keys of the HTTP contract and ``from_dict``
accepts the decoded model output directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
import uuid


@dataclass
class Article:
    """A single normalized feed item.

    Attributes:
        title: The item headline
        link: Absolute URL of the item, always syntactically valid
        pub_date: Publish date exactly as the feed supplied it
        iso_date: Publish date normalized to ISO 8601 (UTC)
        content: Full HTML content, if the feed carries it
        content_snippet: Short plain-text excerpt
        categories: Tags attached to the item by the feed
    """

    title: str
    link: str
    pub_date: str | None = None
    iso_date: str | None = None
    content: str | None = None
    content_snippet: str | None = None
    categories: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "pubDate": self.pub_date,
            "isoDate": self.iso_date,
            "content": self.content,
            "contentSnippet": self.content_snippet,
            "categories": list(self.categories),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Article":
        """Build an article from its wire form. Only ``title`` is required."""
        categories = data.get("categories")
        return cls(
            title=str(data.get("title") or ""),
            link=str(data.get("link") or ""),
            pub_date=data.get("pubDate"),
            iso_date=data.get("isoDate"),
            content=data.get("content"),
            content_snippet=data.get("contentSnippet"),
            categories=[str(c) for c in categories] if isinstance(categories, list) else [],
        )


@dataclass
class FeedResult:
    """A fetched and parsed feed.

    Attributes:
        url: The URL the feed was fetched from
        title: The feed's own title, if any
        description: The feed's description, if any
        link: The feed's homepage link, if any
        items: Valid items in the order the feed supplied them
    """

    url: str
    title: str | None = None
    description: str | None = None
    link: str | None = None
    items: list[Article] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "link": self.link,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class Subscription:
    """A followed feed. Immutable once created."""

    id: str
    url: str
    title: str
    category: str | None = None

    @classmethod
    def create(cls, url: str, title: str, category: str | None = None) -> "Subscription":
        return cls(id=uuid.uuid4().hex, url=url, title=title, category=category)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "url": self.url, "title": self.title}
        if self.category is not None:
            data["category"] = self.category
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Subscription":
        return cls(
            id=str(data["id"]),
            url=str(data["url"]),
            title=str(data.get("title") or "Unknown Feed"),
            category=data.get("category"),
        )


@dataclass
class AggregatedArticle:
    """An article tagged with the title of its source subscription."""

    article: Article
    feed_title: str

    def to_dict(self) -> dict[str, Any]:
        data = self.article.to_dict()
        data["feedTitle"] = self.feed_title
        return data


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


@dataclass
class SummaryResult:
    """Short structured summary of one article.

    Attributes:
        tldr: Two or three sentence summary
        key_points: Three key points
        technical_depth: Label describing how technical the article is
        worth_reading: One-line verdict
        status: "ok" or "parse_error" when the placeholder was substituted
    """

    tldr: str
    key_points: list[str] = field(default_factory=list)
    technical_depth: str = ""
    worth_reading: str = ""
    status: str = "ok"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SummaryResult":
        return cls(
            tldr=str(data.get("tldr") or ""),
            key_points=_str_list(data.get("keyPoints")),
            technical_depth=str(data.get("technicalDepth") or ""),
            worth_reading=str(data.get("worthReading") or ""),
        )

    @classmethod
    def placeholder(cls) -> "SummaryResult":
        return cls(
            tldr="Could not parse AI summary.",
            key_points=[],
            technical_depth="Unknown",
            worth_reading="Summary unavailable.",
            status="parse_error",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tldr": self.tldr,
            "keyPoints": list(self.key_points),
            "technicalDepth": self.technical_depth,
            "worthReading": self.worth_reading,
            "status": self.status,
        }


@dataclass
class AnalysisResult:
    """Longer "expert take" on one article.

    Attributes:
        summary: What happened and why it matters
        insight: The non-obvious angle
        technical_context: Optional deeper mechanics, may be empty
        takeaways: Five practical takeaways
        what_to_watch: Optional forward-looking note, may be empty
        status: "ok" or "parse_error" when the placeholder was substituted
    """

    summary: str
    insight: str
    technical_context: str = ""
    takeaways: list[str] = field(default_factory=list)
    what_to_watch: str = ""
    status: str = "ok"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisResult":
        return cls(
            summary=str(data.get("summary") or ""),
            insight=str(data.get("insight") or ""),
            technical_context=str(data.get("technicalContext") or ""),
            takeaways=_str_list(data.get("takeaways")),
            what_to_watch=str(data.get("whatToWatch") or ""),
        )

    @classmethod
    def placeholder(cls) -> "AnalysisResult":
        return cls(
            summary="Could not parse AI summary.",
            insight="Analysis failed.",
            status="parse_error",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "insight": self.insight,
            "technicalContext": self.technical_context,
            "takeaways": list(self.takeaways),
            "whatToWatch": self.what_to_watch,
            "status": self.status,
        }


@dataclass
class BriefingResult:
    """Editorial morning briefing over the aggregated articles."""

    greeting: str
    summary: str
    key_takeaway: str
    status: str = "ok"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BriefingResult":
        return cls(
            greeting=str(data.get("greeting") or ""),
            summary=str(data.get("summary") or ""),
            key_takeaway=str(data.get("key_takeaway") or ""),
        )

    @classmethod
    def placeholder(cls) -> "BriefingResult":
        return cls(
            greeting="Good Morning",
            summary="Here are your top stories for the day.",
            key_takeaway="Stay curious.",
            status="parse_error",
        )

    @property
    def paragraphs(self) -> list[str]:
        return [part.strip() for part in self.summary.split("\n\n") if part.strip()]

    def to_dict(self) -> dict[str, Any]:
        return {
            "greeting": self.greeting,
            "summary": self.summary,
            "key_takeaway": self.key_takeaway,
            "status": self.status,
        }
