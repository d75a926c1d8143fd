"""Google Gemini provider (Generative Language API)."""

from __future__ import annotations

from typing import Any

from .base import HttpCompletionProvider


class GeminiProvider(HttpCompletionProvider):
    """Gemini models over ``generateContent``."""

    name = "gemini"

    def _build_request(
        self, prompt: str, max_output_tokens: int
    ) -> tuple[str, dict[str, str], dict[str, str], dict[str, Any]]:
        url = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{self.cfg.model}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.2, "maxOutputTokens": max_output_tokens},
        }
        return url, {}, {"key": self.api_key}, payload

    def _extract_text(self, data: dict[str, Any]) -> str:
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return ""
