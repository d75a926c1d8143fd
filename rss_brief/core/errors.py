"""
Error taxonomy shared by the services and the HTTP layer.

Each error carries a stable ``code`` and the HTTP ``status`` it maps to, so
the web layer can render any of them without knowing where it came from.
"""

from __future__ import annotations

from typing import Any


class RssBriefError(Exception):
    """Base class for failures surfaced to a caller."""

    code = "failure"
    status = 500

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.detail:
            payload["detail"] = self.detail
        return payload


class InvalidInputError(RssBriefError):
    """Missing or malformed request input. Raised before any network call."""

    code = "invalid_input"
    status = 400


class DuplicateSubscriptionError(InvalidInputError):
    """The feed URL is already subscribed."""

    code = "duplicate_subscription"
    status = 409


class FeedFetchError(RssBriefError):
    """A feed could not be fetched or parsed."""

    code = "feed_fetch_failed"
    status = 500


class ContentUnavailableError(RssBriefError):
    """An article URL could not be fetched (timeout, non-2xx, unreachable)."""

    code = "content_unavailable"
    status = 502


class InsufficientContentError(RssBriefError):
    """Extraction produced too little text and no fallback was supplied."""

    code = "insufficient_content"
    status = 422


class ModelError(RssBriefError):
    """The language-model call itself failed."""

    code = "model_error"
    status = 502
