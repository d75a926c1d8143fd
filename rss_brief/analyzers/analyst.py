"""Expert-take analysis of caller-supplied article content."""

from __future__ import annotations

import json
import logging

from ..config import AppConfig
from ..core.errors import InvalidInputError
from ..core.types import AnalysisResult
from ..llm.json_parser import decode_model_json
from ..llm.prompts import build_analysis_prompt
from ..llm.providers.base import CompletionProvider
from ..utils.logging import log_event

logger = logging.getLogger(__name__)


class Analyst:
    def __init__(
        self,
        cfg: AppConfig,
        provider: CompletionProvider,
        llm_logger: logging.Logger | None = None,
    ) -> None:
        self.cfg = cfg
        self.provider = provider
        self.llm_logger = llm_logger

    async def analyze(self, content: str | None) -> AnalysisResult:
        if not content or not content.strip():
            raise InvalidInputError("Missing content to analyze")

        prompt = build_analysis_prompt(content, self.cfg.summary)
        raw = await self.provider.complete(
            prompt,
            self.cfg.summary.analysis_max_output_tokens,
            event="llm_analysis",
            logger=self.llm_logger,
        )
        try:
            return AnalysisResult.from_dict(decode_model_json(raw))
        except json.JSONDecodeError as exc:
            log_event(
                logger,
                "Model analysis could not be decoded",
                level=logging.WARNING,
                event="analysis_parse_error",
                error=str(exc),
            )
            return AnalysisResult.placeholder()
