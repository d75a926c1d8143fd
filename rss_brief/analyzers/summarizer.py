"""Short structured summaries of a single article."""

from __future__ import annotations

import json
import logging

import httpx

from ..config import AppConfig
from ..core.errors import ContentUnavailableError, InsufficientContentError, InvalidInputError
from ..core.types import SummaryResult
from ..fetch.extractor import extract_text, extract_title, html_to_text
from ..fetch.feed import is_valid_link
from ..fetch.fetcher import categorize_error, fetch_url
from ..llm.json_parser import decode_model_json
from ..llm.prompts import build_summary_prompt
from ..llm.providers.base import CompletionProvider
from ..utils.logging import log_event

logger = logging.getLogger(__name__)


class Summarizer:
    """Fetch an article, extract its text and ask the model for a summary."""

    def __init__(
        self,
        cfg: AppConfig,
        provider: CompletionProvider,
        client: httpx.AsyncClient | None = None,
        llm_logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        self.client = client
        self.llm_logger = llm_logger

    async def summarize(self, url: str | None = None, content: str | None = None) -> SummaryResult:
        """Summarize the article at ``url``, or the supplied ``content``.

        When both are given the URL wins, and ``content`` is only used if the
        page yields too little readable text.

        Raises:
            InvalidInputError: If neither a valid URL nor content is supplied
            ContentUnavailableError: If the article page cannot be fetched
            InsufficientContentError: If too little text remains and no content was supplied
            ModelError: If the model call fails
        """
        url = (url or "").strip()
        fallback_text = html_to_text(content) if content else ""
        if not url and not fallback_text:
            raise InvalidInputError("Missing article URL")

        if url:
            title, text = await self._read_article(url, fallback_text)
        else:
            title, text = "Article", fallback_text

        prompt = build_summary_prompt(title, text, self.cfg.summary)
        raw = await self.provider.complete(
            prompt,
            self.cfg.summary.summary_max_output_tokens,
            event="llm_summary",
            logger=self.llm_logger,
        )
        try:
            return SummaryResult.from_dict(decode_model_json(raw))
        except json.JSONDecodeError as exc:
            log_event(
                logger,
                "Model summary could not be decoded",
                level=logging.WARNING,
                event="summary_parse_error",
                url=url or None,
                error=str(exc),
            )
            return SummaryResult.placeholder()

    async def _read_article(self, url: str, fallback_text: str) -> tuple[str, str]:
        if not is_valid_link(url):
            raise InvalidInputError("Invalid article URL", detail=url)

        result = await fetch_url(url, self.cfg.fetch, client=self.client)
        if not result.ok:
            log_event(
                logger,
                "Article fetch failed",
                level=logging.WARNING,
                event="article_fetch_failed",
                url=url,
                status_code=result.status_code,
                category=categorize_error(result.error, result.status_code),
                error=result.error,
            )
            raise ContentUnavailableError("Failed to fetch article", detail=result.error)

        html = result.text or ""
        extract_cfg = self.cfg.extract
        text = extract_text(html, extract_cfg.primary, extract_cfg.fallback) or ""
        if len(text) < extract_cfg.min_chars:
            log_event(
                logger,
                "Extracted text too short",
                event="extraction_insufficient",
                url=url,
                chars=len(text),
                used_fallback=bool(fallback_text),
            )
            if not fallback_text:
                raise InsufficientContentError(
                    "Content too short",
                    detail=f"{len(text)} characters extracted",
                )
            text = fallback_text
        return extract_title(html), text
