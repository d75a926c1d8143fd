"""Tests for the summary, analysis and briefing services."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from rss_brief.analyzers import Analyst, Summarizer, Synthesizer
from rss_brief.config import AppConfig
from rss_brief.core.errors import (
    ContentUnavailableError,
    InsufficientContentError,
    InvalidInputError,
    ModelError,
)
from rss_brief.core.types import AggregatedArticle, Article


ARTICLE_HTML = """
<html>
  <head><title>Why Caching Matters</title></head>
  <body>
    <nav>Home | About | Contact</nav>
    <article>
      <h1>Why Caching Matters</h1>
      <p>Caching is the practice of keeping the result of an expensive computation around so that
      the next request for the same thing can be answered without repeating the work.</p>
      <p>Every layer of a modern system caches something, from CPU registers to content delivery
      networks, and understanding the trade-offs between freshness and speed pays off.</p>
    </article>
    <footer>Copyright</footer>
  </body>
</html>
"""

SUMMARY_JSON = (
    '{"tldr": "Caching trades freshness for speed.", '
    '"keyPoints": ["One", "Two", "Three"], '
    '"technicalDepth": "Intermediate", "worthReading": "Yes."}'
)


class _DummyProvider:
    """Records prompts and replies with a canned response."""

    name = "dummy"

    def __init__(self, response: str = "", error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[tuple[str, int, str]] = []

    async def complete(self, prompt, max_output_tokens, event="llm_completion", logger=None):  # noqa: ANN001
        self.calls.append((prompt, max_output_tokens, event))
        if self.error is not None:
            raise self.error
        return self.response


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _summarize(provider, handler, **kwargs):
    async def run():
        async with _client(handler) as client:
            return await Summarizer(AppConfig(), provider, client=client).summarize(**kwargs)

    return asyncio.run(run())


def test_summary_of_url_returning_404_is_content_unavailable():
    provider = _DummyProvider(SUMMARY_JSON)

    with pytest.raises(ContentUnavailableError) as excinfo:
        _summarize(provider, lambda request: httpx.Response(404), url="https://example.com/gone")

    assert excinfo.value.detail == "HTTP 404"
    assert provider.calls == []


def test_summary_fetch_timeout_is_content_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(ContentUnavailableError):
        _summarize(_DummyProvider(SUMMARY_JSON), handler, url="https://slow.example.com/a")


def test_summary_of_url_extracts_text_and_decodes_record():
    provider = _DummyProvider("```json\n" + SUMMARY_JSON + "\n```")

    result = _summarize(
        provider,
        lambda request: httpx.Response(200, text=ARTICLE_HTML),
        url="https://example.com/caching",
    )

    assert result.status == "ok"
    assert result.tldr == "Caching trades freshness for speed."
    assert result.key_points == ["One", "Two", "Three"]
    prompt, max_tokens, event = provider.calls[0]
    assert max_tokens == 1000
    assert event == "llm_summary"
    assert "TITLE: Why Caching Matters" in prompt
    assert "expensive computation" in prompt


def test_summary_short_page_falls_back_to_supplied_content():
    provider = _DummyProvider(SUMMARY_JSON)
    fallback = "<p>" + "Supplied body text. " * 10 + "</p>"

    result = _summarize(
        provider,
        lambda request: httpx.Response(200, text="<html><body><p>Too short.</p></body></html>"),
        url="https://example.com/short",
        content=fallback,
    )

    assert result.status == "ok"
    assert "Supplied body text." in provider.calls[0][0]


def test_summary_short_page_without_content_is_insufficient():
    provider = _DummyProvider(SUMMARY_JSON)

    with pytest.raises(InsufficientContentError):
        _summarize(
            provider,
            lambda request: httpx.Response(200, text="<html><body><p>Too short.</p></body></html>"),
            url="https://example.com/short",
        )
    assert provider.calls == []


def test_summary_empty_page_without_content_is_insufficient():
    provider = _DummyProvider(SUMMARY_JSON)

    with pytest.raises(InsufficientContentError):
        _summarize(provider, lambda request: httpx.Response(200, text=""), url="https://example.com/empty")
    assert provider.calls == []


def test_summary_blank_page_falls_back_to_supplied_content():
    provider = _DummyProvider(SUMMARY_JSON)

    result = _summarize(
        provider,
        lambda request: httpx.Response(200, text="   \n  "),
        url="https://example.com/blank",
        content="word " * 50,
    )

    assert result.status == "ok"
    assert "TITLE: Article" in provider.calls[0][0]
    assert "word word word" in provider.calls[0][0]


def test_summary_requires_url_or_content():
    provider = _DummyProvider(SUMMARY_JSON)

    with pytest.raises(InvalidInputError):
        _summarize(provider, lambda request: httpx.Response(500))
    assert provider.calls == []


def test_summary_parse_failure_yields_placeholder():
    provider = _DummyProvider("I could not produce JSON, sorry.")

    result = _summarize(provider, lambda request: httpx.Response(500), content="Plenty of words " * 20)

    assert result.status == "parse_error"
    assert result.tldr == "Could not parse AI summary."


def test_summary_truncates_to_word_budget():
    cfg = AppConfig()
    cfg.summary.summary_max_words = 5
    provider = _DummyProvider(SUMMARY_JSON)

    asyncio.run(Summarizer(cfg, provider).summarize(content="one two three four five six seven"))

    assert "CONTENT: one two three four five..." in provider.calls[0][0]


def test_analysis_truncates_content_and_decodes_record():
    provider = _DummyProvider(
        '{"summary": "S", "insight": "I", "technicalContext": "", '
        '"takeaways": ["1", "2", "3", "4", "5"], "whatToWatch": "W"}'
    )
    content = "x" * 20000 + "TAIL"

    result = asyncio.run(Analyst(AppConfig(), provider).analyze(content))

    assert result.status == "ok"
    assert result.takeaways == ["1", "2", "3", "4", "5"]
    assert result.technical_context == ""
    prompt, max_tokens, _ = provider.calls[0]
    assert max_tokens == 3000
    assert "x" * 15000 in prompt
    assert "x" * 15001 not in prompt
    assert "TAIL" not in prompt


def test_analysis_placeholder_on_parse_failure():
    result = asyncio.run(Analyst(AppConfig(), _DummyProvider("nope")).analyze("some content"))

    assert result.status == "parse_error"
    assert result.summary == "Could not parse AI summary."
    assert result.insight == "Analysis failed."
    assert result.takeaways == []


def test_analysis_requires_content():
    provider = _DummyProvider("{}")

    with pytest.raises(InvalidInputError):
        asyncio.run(Analyst(AppConfig(), provider).analyze("   "))
    assert provider.calls == []


def test_model_error_propagates():
    provider = _DummyProvider(error=ModelError("Language model request failed"))

    with pytest.raises(ModelError):
        asyncio.run(Analyst(AppConfig(), provider).analyze("content"))


def test_briefing_with_zero_articles_makes_no_provider_call():
    provider = _DummyProvider('{"greeting": "Hi", "summary": "S", "key_takeaway": "K"}')

    assert asyncio.run(Synthesizer(AppConfig(), provider).brief([])) is None
    assert provider.calls == []


def test_briefing_uses_top_ten_and_snippet_fallback():
    provider = _DummyProvider(
        '{"greeting": "Rise and Shine", "summary": "First.\\n\\nSecond.", "key_takeaway": "Stay sharp."}'
    )
    articles = [
        AggregatedArticle(
            article=Article(title=f"Story {i}", link=f"https://example.com/{i}", content_snippet=f"snippet {i}"),
            feed_title="Feed",
        )
        for i in range(12)
    ]
    articles[0] = AggregatedArticle(
        article=Article(title="Story 0", link="https://example.com/0", content="c" * 300),
        feed_title="Feed",
    )

    result = asyncio.run(Synthesizer(AppConfig(), provider).brief(articles))

    assert result is not None
    assert result.greeting == "Rise and Shine"
    assert result.paragraphs == ["First.", "Second."]
    prompt, max_tokens, _ = provider.calls[0]
    assert max_tokens == 1200
    assert f"- Story 0: {'c' * 200}\n" in prompt
    assert "- Story 9: snippet 9" in prompt
    assert "Story 10" not in prompt


def test_briefing_placeholder_on_parse_failure():
    articles = [Article(title="Only", link="https://example.com/only", content_snippet="s")]

    result = asyncio.run(Synthesizer(AppConfig(), _DummyProvider("```\nnot json\n```")).brief(articles))

    assert result is not None
    assert result.status == "parse_error"
    assert (result.greeting, result.summary, result.key_takeaway) == (
        "Good Morning",
        "Here are your top stories for the day.",
        "Stay curious.",
    )
