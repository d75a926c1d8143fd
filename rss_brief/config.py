"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FeedsConfig: Recency window, briefing size and default subscriptions
- FetchConfig: Outbound HTTP settings shared by feed and article fetches
- ExtractConfig: Readable-content extraction settings
- SummaryConfig: Prompt truncation budgets and output token ceilings
- ProviderConfig: Language-model provider settings
- StorageConfig: Where the subscription blob is persisted
- ServerConfig: HTTP server bind settings
- LoggingConfig: Logging behavior
- LangfuseConfig: Langfuse tracing settings
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml


DEFAULT_FEEDS: list[dict[str, str]] = [
    {"title": "The Verge", "url": "https://www.theverge.com/rss/index.xml"},
    {"title": "Hacker News", "url": "https://news.ycombinator.com/rss"},
    {"title": "ArXiv AI", "url": "http://arxiv.org/rss/cs.AI"},
    {"title": "Hugging Face", "url": "https://huggingface.co/blog/feed.xml"},
    {"title": "BBC Tech", "url": "https://feeds.bbci.co.uk/news/technology/rss.xml"},
    {"title": "Ars Technica", "url": "https://feeds.arstechnica.com/arstechnica/index"},
    {"title": "Wired", "url": "https://www.wired.com/feed/rss"},
    {"title": "TechCrunch", "url": "https://techcrunch.com/feed/"},
]


@dataclass
class FeedsConfig:
    """Configuration for feed aggregation.

    Attributes:
        recency_window_hours: Items published at or before now minus this window are dropped
        briefing_top_n: Maximum number of articles handed to the briefing prompt
        defaults: Subscriptions seeded when no persisted state exists
    """

    recency_window_hours: float = 48.0
    briefing_top_n: int = 10
    defaults: list[dict[str, str]] = field(default_factory=lambda: [dict(f) for f in DEFAULT_FEEDS])


@dataclass
class FetchConfig:
    """Configuration for outbound HTTP fetching.

    Attributes:
        timeout_seconds: Bound applied to every feed and article request
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
        feed_user_agent: User-Agent used when polling feeds
    """

    timeout_seconds: float = 10.0
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    feed_user_agent: str = "rss-brief/0.1 (+https://github.com/rss-brief)"


@dataclass
class ExtractConfig:
    """Configuration for HTML content extraction.

    Attributes:
        primary: Primary extraction method ("trafilatura", "readability", or "bs4")
        fallback: List of fallback methods to try if primary fails
        min_chars: Extracted text shorter than this counts as insufficient content
    """

    primary: str = "trafilatura"
    fallback: list[str] = field(default_factory=lambda: ["readability", "bs4"])
    min_chars: int = 100


@dataclass
class SummaryConfig:
    """Configuration for the language-model backed services.

    Attributes:
        summary_max_words: Word budget for article text sent to the summarizer
        analysis_max_chars: Character budget for content sent to the analyst
        briefing_snippet_chars: Characters of content used when an article has no snippet
        summary_max_output_tokens: Output ceiling for article summaries
        analysis_max_output_tokens: Output ceiling for article analyses
        briefing_max_output_tokens: Output ceiling for the daily briefing
    """

    summary_max_words: int = 6000
    analysis_max_chars: int = 15000
    briefing_snippet_chars: int = 200
    summary_max_output_tokens: int = 1000
    analysis_max_output_tokens: int = 3000
    briefing_max_output_tokens: int = 1200


@dataclass
class ProviderConfig:
    """Configuration for LLM provider.

    Attributes:
        name: Provider name ("anthropic" or "gemini")
        model: Model identifier
        api_key_env: Environment variable name containing the API key
        base_url: Base URL for the provider API
        api_key: Optional inline API key (overrides env var)
        timeout_seconds: Bound applied to every model call
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "anthropic"
    model: str = "claude-sonnet-4-5"
    api_key_env: str = "ANTHROPIC_API_KEY"
    base_url: str = "https://api.anthropic.com"
    api_key: str | None = None
    timeout_seconds: float = 60.0
    trust_env: bool = True


@dataclass
class StorageConfig:
    """Configuration for subscription persistence.

    Attributes:
        path: JSON file holding the persisted blob
        key: Well-known key the subscription list is stored under
    """

    path: str = "~/.rss-brief/storage.json"
    key: str = "rss-feed-storage-v2"


@dataclass
class ServerConfig:
    """Configuration for the HTTP server."""

    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        log_dir: Directory holding log files
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate LLM interaction logging
        llm_log_detail: LLM log detail level ("response_only", "prompt_response")
        llm_log_redaction: Redaction mode for LLM logs ("none", "redact_content", "redact_urls_authors")
        llm_log_file: Name of the LLM log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    log_dir: str = "logs"
    filename: str = "rss-brief.jsonl"
    llm_log_enabled: bool = True
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_urls_authors"
    llm_log_file: str = "llm.jsonl"


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse tracing.

    Attributes:
        enabled: Whether to enable Langfuse tracing
        public_key: Langfuse public key (optional)
        secret_key: Langfuse secret key (optional)
        host: Langfuse host URL (optional)
        environment: Langfuse environment label (optional)
        release: Langfuse release identifier (optional)
        redaction: Redaction mode for prompt/response payloads
        max_text_chars: Maximum characters for prompt/response payloads
    """

    enabled: bool = False
    public_key: str | None = None
    secret_key: str | None = None
    host: str | None = None
    environment: str | None = None
    release: str | None = None
    redaction: str = "redact_urls_authors"
    max_text_chars: int = 20000


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    feeds: FeedsConfig = field(default_factory=FeedsConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)


_SECTIONS: dict[str, type] = {
    "feeds": FeedsConfig,
    "fetch": FetchConfig,
    "extract": ExtractConfig,
    "summary": SummaryConfig,
    "provider": ProviderConfig,
    "storage": StorageConfig,
    "server": ServerConfig,
    "logging": LoggingConfig,
    "langfuse": LangfuseConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    sections = {name: cls(**data.get(name, {})) for name, cls in _SECTIONS.items()}
    return AppConfig(**sections)


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)
