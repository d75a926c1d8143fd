"""Provider interface for single-shot language-model completions."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import Any

import httpx

from ...config import LoggingConfig, ProviderConfig
from ...core.errors import ModelError
from ...utils.logging import log_event, redact_text, truncate_text
from ..tracing import record_span_error, set_span_output, start_span


class CompletionProvider(ABC):
    """Turns a prompt into raw model text."""

    name = "base"

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        max_output_tokens: int,
        event: str = "llm_completion",
        logger: logging.Logger | None = None,
    ) -> str:
        """Return the model's raw text response.

        Raises:
            ModelError: If the model call fails
        """
        raise NotImplementedError


class HttpCompletionProvider(CompletionProvider):
    """Shared request, tracing and logging flow for HTTP JSON APIs.

    Subclasses describe the request with ``_build_request`` and pull the text
    out of the decoded response with ``_extract_text``.
    """

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        if not api_key:
            raise ValueError(f"Missing API key for provider {self.name} (set {cfg.api_key_env})")
        self.cfg = cfg
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger
        self.client = client

    async def complete(
        self,
        prompt: str,
        max_output_tokens: int,
        event: str = "llm_completion",
        logger: logging.Logger | None = None,
    ) -> str:
        url, headers, params, payload = self._build_request(prompt, max_output_tokens)
        with start_span(
            f"{self.name}.{event}",
            kind="llm",
            input_value=prompt,
            attributes={
                "llm.model": self.cfg.model,
                "llm.provider": self.name,
                "llm.max_output_tokens": max_output_tokens,
            },
        ) as span:
            try:
                data = await self._post(url, headers, params, payload)
            except (httpx.HTTPError, ValueError) as exc:
                record_span_error(span, exc)
                self._log_llm_response(event, "provider_error", str(exc), prompt, logger)
                raise ModelError(
                    "Language model request failed",
                    detail=f"{type(exc).__name__}: {exc}",
                ) from exc
            content = self._extract_text(data)
            set_span_output(span, content)
            self._log_llm_response(event, "ok", content, prompt, logger)
        return content

    @abstractmethod
    def _build_request(
        self, prompt: str, max_output_tokens: int
    ) -> tuple[str, dict[str, str], dict[str, str], dict[str, Any]]:
        """Return (url, headers, query params, JSON payload)."""
        raise NotImplementedError

    @abstractmethod
    def _extract_text(self, data: dict[str, Any]) -> str:
        raise NotImplementedError

    async def _post(
        self,
        url: str,
        headers: dict[str, str],
        params: dict[str, str],
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        if self.client is not None:
            resp = await self.client.post(url, headers=headers, params=params, json=payload)
            resp.raise_for_status()
            return resp.json()
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.cfg.timeout_seconds),
            trust_env=self.cfg.trust_env,
        ) as client:
            resp = await client.post(url, headers=headers, params=params, json=payload)
            resp.raise_for_status()
            return resp.json()

    def _log_llm_response(
        self,
        event: str,
        status: str,
        content: str,
        prompt: str,
        logger: logging.Logger | None = None,
    ) -> None:
        active_logger = logger or self.llm_logger
        if active_logger is None:
            return
        redaction = self.log_cfg.llm_log_redaction
        payload: dict[str, Any] = {
            "event": event,
            "status": status,
            "provider": self.name,
            "model": self.cfg.model,
        }
        if self.log_cfg.llm_log_detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(prompt, redaction))
        payload["raw_response"] = truncate_text(redact_text(content, redaction))
        log_event(active_logger, "LLM response", **payload)
