"""Prompt loading and rendering helpers for the model-backed services."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Iterable

from ..config import SummaryConfig
from ..core.types import Article


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def truncate_words(text: str, max_words: int) -> str:
    """Keep the first ``max_words`` words, appending ``...`` when cut."""
    words = text.split()
    if len(words) <= max_words:
        return text
    return " ".join(words[:max_words]) + "..."


def build_summary_prompt(title: str, text: str, cfg: SummaryConfig) -> str:
    return _render_template(
        "summary",
        title=title,
        content=truncate_words(text, cfg.summary_max_words),
    )


def build_analysis_prompt(content: str, cfg: SummaryConfig) -> str:
    return _render_template("analysis", content=content[: cfg.analysis_max_chars])


def headline_line(article: Article, snippet_chars: int) -> str:
    snippet = article.content_snippet or (article.content or "")[:snippet_chars]
    return f"- {article.title}: {snippet}"


def build_briefing_prompt(articles: Iterable[Article], cfg: SummaryConfig) -> str:
    """Render the briefing prompt from already-selected articles."""
    lines = [headline_line(article, cfg.briefing_snippet_chars) for article in articles]
    return _render_template("briefing", headlines="\n".join(lines))
