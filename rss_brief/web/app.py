"""
Flask application: JSON API plus the HTML article grid.

``create_app`` is the composition root for the web surface. It wires the
application state, the three model-backed services and a provider that is
only built on first use, so the read-only endpoints work without an API key.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, Flask, current_app, jsonify, request
import httpx
from werkzeug.exceptions import HTTPException

from ..analyzers import Analyst, Summarizer, Synthesizer
from ..config import AppConfig
from ..core.errors import InvalidInputError, ModelError, RssBriefError
from ..core.state import AppState
from ..core.types import Article
from ..fetch.feed import fetch_feed, is_valid_link
from ..llm.providers.base import CompletionProvider
from ..llm.providers.factory import create_provider
from ..output.renderer import render_index
from ..utils.logging import log_event

logger = logging.getLogger(__name__)

EXTENSION_KEY = "rss_brief"

api = Blueprint("api", __name__)


class ConfiguredProvider(CompletionProvider):
    """Builds the configured provider on first completion."""

    def __init__(self, cfg: AppConfig, llm_logger: logging.Logger | None = None) -> None:
        self.cfg = cfg
        self.llm_logger = llm_logger
        self._provider: CompletionProvider | None = None

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.cfg.provider.name

    def resolve(self) -> CompletionProvider:
        if self._provider is None:
            try:
                self._provider = create_provider(self.cfg.provider, self.cfg.logging, self.llm_logger)
            except ValueError as exc:
                raise ModelError("Language model is not configured", detail=str(exc)) from exc
        return self._provider

    async def complete(
        self,
        prompt: str,
        max_output_tokens: int,
        event: str = "llm_completion",
        logger: logging.Logger | None = None,
    ) -> str:
        return await self.resolve().complete(prompt, max_output_tokens, event=event, logger=logger)


class Services:
    """Everything a request handler needs, stored on ``app.extensions``."""

    def __init__(
        self,
        cfg: AppConfig,
        state: AppState,
        provider: CompletionProvider,
        llm_logger: logging.Logger | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.cfg = cfg
        self.state = state
        self.http_client = http_client
        self.summarizer = Summarizer(cfg, provider, client=http_client, llm_logger=llm_logger)
        self.analyst = Analyst(cfg, provider, llm_logger=llm_logger)
        self.synthesizer = Synthesizer(cfg, provider, llm_logger=llm_logger)


def create_app(
    cfg: AppConfig | None = None,
    state: AppState | None = None,
    provider: CompletionProvider | None = None,
    llm_logger: logging.Logger | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Flask:
    """Build the Flask app.

    Args:
        cfg: Application config, defaults are used when omitted
        state: Application state, built from ``cfg`` when omitted
        provider: Model provider, the configured one is built lazily when omitted
        llm_logger: Logger receiving model responses
        http_client: Client used for feed and article fetches
    """
    cfg = cfg or AppConfig()
    state = state or AppState.from_config(cfg)
    provider = provider or ConfiguredProvider(cfg, llm_logger)

    app = Flask(__name__)
    app.json.sort_keys = False
    app.extensions[EXTENSION_KEY] = Services(cfg, state, provider, llm_logger, http_client)
    app.register_blueprint(api)

    @app.errorhandler(RssBriefError)
    def handle_error(exc: RssBriefError):
        log_event(
            logger,
            "Request failed",
            level=logging.WARNING if exc.status < 500 else logging.ERROR,
            event="request_failed",
            path=request.path,
            code=exc.code,
            error=exc.message,
            detail=exc.detail,
        )
        return jsonify(exc.to_dict()), exc.status

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        log_event(
            logger,
            "Unhandled request error",
            level=logging.ERROR,
            event="request_unhandled",
            path=request.path,
            error=f"{type(exc).__name__}: {exc}",
        )
        return jsonify({"error": "Internal error", "code": "failure"}), 500

    return app


def _services() -> Services:
    return current_app.extensions[EXTENSION_KEY]


def _json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def _timeline() -> dict[str, Any]:
    articles = _services().state.articles
    return {"articles": [a.to_dict() for a in articles], "count": len(articles)}


@api.get("/health")
def health():
    return jsonify({"status": "ok"})


@api.get("/")
def index():
    state = _services().state
    return render_index(
        state.articles,
        state.subscriptions,
        last_refreshed=state.last_refreshed,
        feed_filter=request.args.get("feed") or None,
    )


@api.get("/api/feed")
async def get_feed():
    url = (request.args.get("url") or "").strip()
    if not url:
        raise InvalidInputError("Missing URL parameter")
    if not is_valid_link(url):
        raise InvalidInputError("Invalid feed URL", detail=url)
    services = _services()
    feed = await fetch_feed(url, services.cfg.fetch, client=services.http_client)
    return jsonify(feed.to_dict())


@api.post("/api/analyze")
async def analyze():
    result = await _services().analyst.analyze(_json_body().get("content"))
    return jsonify(result.to_dict())


@api.post("/api/summary")
async def summary():
    body = _json_body()
    url = body.get("url")
    content = body.get("content")
    result = await _services().summarizer.summarize(
        url=url if isinstance(url, str) else None,
        content=content if isinstance(content, str) else None,
    )
    return jsonify(result.to_dict())


@api.post("/api/briefing")
async def briefing():
    articles = _json_body().get("articles")
    if not isinstance(articles, list):
        raise InvalidInputError("Missing articles to analyze")
    items = [Article.from_dict(item) for item in articles if isinstance(item, dict)]
    result = await _services().synthesizer.brief(items)
    if result is None:
        return "", 204
    return jsonify(result.to_dict())


@api.get("/api/subscriptions")
def list_subscriptions():
    return jsonify([sub.to_dict() for sub in _services().state.subscriptions])


@api.post("/api/subscriptions")
async def add_subscription():
    body = _json_body()
    url = body.get("url")
    if not isinstance(url, str):
        raise InvalidInputError("Missing URL parameter")
    subscription = await _services().state.add_feed(
        url,
        title=body.get("title") or None,
        category=body.get("category") or None,
    )
    return jsonify(subscription.to_dict()), 201


@api.delete("/api/subscriptions/<subscription_id>")
def remove_subscription(subscription_id: str):
    _services().state.remove_feed(subscription_id)
    return "", 204


@api.post("/api/refresh")
async def refresh():
    await _services().state.refresh()
    return jsonify(_timeline())


@api.get("/api/articles")
def list_articles():
    return jsonify(_timeline())
