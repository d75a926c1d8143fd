"""Synthesizer for producing the morning briefing from aggregated articles."""

from __future__ import annotations

import json
import logging
from typing import Sequence

from ..config import AppConfig
from ..core.types import AggregatedArticle, Article, BriefingResult
from ..llm.json_parser import decode_model_json
from ..llm.prompts import build_briefing_prompt
from ..llm.providers.base import CompletionProvider
from ..utils.logging import log_event

logger = logging.getLogger(__name__)


class Synthesizer:
    """Produce an editorial briefing over the top of the timeline."""

    def __init__(
        self,
        cfg: AppConfig,
        provider: CompletionProvider,
        llm_logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        self.llm_logger = llm_logger

    async def brief(self, articles: Sequence[Article | AggregatedArticle]) -> BriefingResult | None:
        """Brief the first ``feeds.briefing_top_n`` articles.

        Returns None, without calling the model, when there are no articles.
        """
        if not articles:
            return None

        top = [_as_article(item) for item in articles[: self.cfg.feeds.briefing_top_n]]
        prompt = build_briefing_prompt(top, self.cfg.summary)
        raw = await self.provider.complete(
            prompt,
            self.cfg.summary.briefing_max_output_tokens,
            event="llm_briefing",
            logger=self.llm_logger,
        )
        try:
            return BriefingResult.from_dict(decode_model_json(raw))
        except json.JSONDecodeError as exc:
            log_event(
                logger,
                "Model briefing could not be decoded",
                level=logging.WARNING,
                event="briefing_parse_error",
                articles=len(top),
                error=str(exc),
            )
            return BriefingResult.placeholder()


def _as_article(item: Article | AggregatedArticle) -> Article:
    if isinstance(item, AggregatedArticle):
        return item.article
    return item
