"""Tests for the provider registry and the HTTP providers."""

from __future__ import annotations

import asyncio
import json
import logging

import httpx
import pytest

from rss_brief.config import LoggingConfig, ProviderConfig
from rss_brief.core.errors import ModelError
from rss_brief.llm.providers.anthropic import AnthropicProvider
from rss_brief.llm.providers.factory import available_providers, create_provider
from rss_brief.llm.providers.gemini import GeminiProvider


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record):  # noqa: ANN001
        self.records.append(record)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_available_providers_contains_expected_backends():
    names = available_providers()
    assert "anthropic" in names
    assert "gemini" in names


def test_create_provider_defaults_to_anthropic(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "env-key")

    provider = create_provider(ProviderConfig(), LoggingConfig(), llm_logger=None)

    assert isinstance(provider, AnthropicProvider)
    assert provider.api_key == "env-key"


def test_create_provider_gemini():
    provider = create_provider(
        ProviderConfig(
            name="gemini",
            model="gemini-2.5-flash",
            api_key="test-key",
            base_url="https://generativelanguage.googleapis.com",
        ),
        LoggingConfig(),
        llm_logger=None,
    )
    assert isinstance(provider, GeminiProvider)


def test_create_provider_rejects_unknown_backend():
    with pytest.raises(ValueError, match="Unsupported provider"):
        create_provider(ProviderConfig(name="unknown-provider", api_key="k"), LoggingConfig())


def test_create_provider_requires_api_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

    with pytest.raises(ValueError, match="Missing API key"):
        create_provider(ProviderConfig(), LoggingConfig())


def test_anthropic_request_shape_and_text_extraction():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"content": [{"type": "text", "text": '{"a": '}, {"type": "text", "text": "1}"}]},
        )

    async def run():
        async with _client(handler) as client:
            provider = create_provider(ProviderConfig(api_key="sk-test"), LoggingConfig(), client=client)
            return await provider.complete("Hello", 1200, event="llm_briefing")

    text = asyncio.run(run())

    assert text == '{"a": 1}'
    assert seen["url"] == "https://api.anthropic.com/v1/messages"
    assert seen["headers"]["x-api-key"] == "sk-test"
    assert seen["headers"]["anthropic-version"] == "2023-06-01"
    assert seen["body"] == {
        "model": "claude-sonnet-4-5",
        "max_tokens": 1200,
        "messages": [{"role": "user", "content": "Hello"}],
    }


def test_gemini_request_shape_and_text_extraction():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "answer"}]}}]})

    cfg = ProviderConfig(
        name="gemini",
        model="gemini-2.5-flash",
        api_key="g-key",
        base_url="https://generativelanguage.googleapis.com",
    )

    async def run():
        async with _client(handler) as client:
            return await create_provider(cfg, LoggingConfig(), client=client).complete("Q", 1000)

    assert asyncio.run(run()) == "answer"
    request = seen["request"]
    assert request.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
    assert request.url.params["key"] == "g-key"
    assert json.loads(request.content)["generationConfig"]["maxOutputTokens"] == 1000


def test_http_failure_raises_model_error_and_is_logged():
    handler_log = _ListHandler()
    llm_logger = logging.getLogger("rss_brief.test.llm")
    llm_logger.setLevel(logging.INFO)
    llm_logger.addHandler(handler_log)

    async def run():
        async with _client(lambda request: httpx.Response(529, json={"error": "overloaded"})) as client:
            provider = create_provider(ProviderConfig(api_key="k"), LoggingConfig(), llm_logger, client=client)
            await provider.complete("https://secret.example.com/article", 1000, event="llm_summary")

    try:
        with pytest.raises(ModelError):
            asyncio.run(run())
    finally:
        llm_logger.removeHandler(handler_log)

    record = handler_log.records[-1]
    assert record.event == "llm_summary"
    assert record.status == "provider_error"
    assert record.provider == "anthropic"


def test_non_json_success_body_raises_model_error():
    async def run():
        async with _client(lambda request: httpx.Response(200, text="<html>gateway</html>")) as client:
            provider = create_provider(ProviderConfig(api_key="k"), LoggingConfig(), client=client)
            await provider.complete("hi", 10)

    with pytest.raises(ModelError) as excinfo:
        asyncio.run(run())

    assert "JSONDecodeError" in excinfo.value.detail


def test_prompt_logging_redacts_urls():
    handler_log = _ListHandler()
    llm_logger = logging.getLogger("rss_brief.test.llm_redact")
    llm_logger.setLevel(logging.INFO)
    llm_logger.addHandler(handler_log)
    log_cfg = LoggingConfig(llm_log_detail="prompt_response", llm_log_redaction="redact_urls_authors")

    async def run():
        response = {"content": [{"type": "text", "text": "see https://leak.example.com"}]}
        async with _client(lambda request: httpx.Response(200, json=response)) as client:
            provider = create_provider(ProviderConfig(api_key="k"), log_cfg, llm_logger, client=client)
            await provider.complete("read https://secret.example.com/a", 100)

    try:
        asyncio.run(run())
    finally:
        llm_logger.removeHandler(handler_log)

    record = handler_log.records[-1]
    assert "secret.example.com" not in record.raw_prompt
    assert "leak.example.com" not in record.raw_response
