"""
Async HTTP fetching for feeds and article pages.

Every outbound request goes through ``http_client`` so that feed polls and
article fetches share one timeout policy. Callers may pass their own
``httpx.AsyncClient`` (tests use this to install a mock transport).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx

from ..config import FetchConfig


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text will be populated (success) or error will be populated (failure),
    but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The response body text, or None on error
        error: Error message if fetch failed, None on success
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


@asynccontextmanager
async def http_client(
    cfg: FetchConfig,
    user_agent: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield ``client`` unchanged, or a short-lived client built from ``cfg``."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(cfg.timeout_seconds),
        headers={"User-Agent": user_agent or cfg.user_agent},
        follow_redirects=True,
        trust_env=cfg.trust_env,
    ) as owned:
        yield owned


async def fetch_url(
    url: str,
    cfg: FetchConfig,
    client: httpx.AsyncClient | None = None,
) -> FetchResult:
    """Fetch an article page.

    A single attempt bounded by ``cfg.timeout_seconds``. Non-success status
    codes are reported as errors with the status code kept.

    Args:
        url: The URL to fetch
        cfg: Fetch configuration (timeout, user agent, proxy behavior)
        client: Optional pre-built client

    Returns:
        FetchResult with text on success or error message on failure
    """
    try:
        async with http_client(cfg, client=client) as http:
            resp = await http.get(url, headers={"User-Agent": cfg.user_agent})
    except httpx.TimeoutException as exc:
        return FetchResult(url=url, status_code=None, text=None, error=f"TimeoutError: {exc}")
    except httpx.HTTPError as exc:
        return FetchResult(url=url, status_code=None, text=None, error=f"{type(exc).__name__}: {exc}")

    if not resp.is_success:
        return FetchResult(url=url, status_code=resp.status_code, text=None, error=f"HTTP {resp.status_code}")
    return FetchResult(url=url, status_code=resp.status_code, text=resp.text, error=None)


def categorize_error(error: str | None, status_code: int | None) -> str:
    """Categorize fetch errors for logging.

    Returns:
        Error category: "timeout", "blocked", "not_found", "http_error", "network_failed", "unknown"
    """
    if not error:
        return "unknown"
    error_lower = error.lower()
    if "timeout" in error_lower or "timed out" in error_lower:
        return "timeout"
    if status_code in (401, 403):
        return "blocked"
    if status_code == 404:
        return "not_found"
    if status_code is not None:
        return "http_error"
    if "connect" in error_lower or "connection" in error_lower:
        return "network_failed"
    return "unknown"
