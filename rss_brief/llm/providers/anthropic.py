"""Anthropic Messages API provider."""

from __future__ import annotations

from typing import Any

from .base import HttpCompletionProvider

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(HttpCompletionProvider):
    """Claude models over ``POST /v1/messages``."""

    name = "anthropic"

    def _build_request(
        self, prompt: str, max_output_tokens: int
    ) -> tuple[str, dict[str, str], dict[str, str], dict[str, Any]]:
        url = f"{self.cfg.base_url.rstrip('/')}/v1/messages"
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": self.cfg.model,
            "max_tokens": max_output_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        return url, headers, {}, payload

    def _extract_text(self, data: dict[str, Any]) -> str:
        blocks = data.get("content") or []
        parts = [
            block.get("text", "")
            for block in blocks
            if isinstance(block, dict) and block.get("type") == "text"
        ]
        return "".join(parts)
