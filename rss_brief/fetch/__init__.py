"""
Feed and article fetching.

This package handles HTTP fetching, feed normalization and readable-content
extraction.
"""

from .extractor import extract_text, extract_title, html_to_text
from .feed import fetch_feed, is_valid_link, normalize_entry
from .fetcher import FetchResult, categorize_error, fetch_url, http_client

__all__ = [
    "fetch_feed",
    "is_valid_link",
    "normalize_entry",
    "fetch_url",
    "http_client",
    "FetchResult",
    "categorize_error",
    "extract_text",
    "extract_title",
    "html_to_text",
]
