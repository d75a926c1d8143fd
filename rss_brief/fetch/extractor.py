"""
HTML content extraction with multiple fallback strategies.

This module provides a chain of extraction methods:
1. trafilatura: Fast, purpose-built for article content (default)
2. readability: Mozilla's readability algorithm (fallback)
3. bs4: BeautifulSoup plain text extraction (last resort)
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from bs4 import BeautifulSoup
import trafilatura
from readability import Document

from ..utils.logging import log_event

logger = logging.getLogger(__name__)


# Elements that never hold article text
_NOISE_TAGS = ["script", "style", "noscript", "nav", "footer", "header", "aside", "ads", "form", "iframe"]
_NOISE_SELECTORS = ".ads, .advert, .advertisement, [class*='ad-slot'], [id*='ad-slot']"
_CONTENT_SELECTORS = "article, main, .content, .post-content"
_WS_RE = re.compile(r"\s+")


def extract_text(html: str, primary: str, fallback: list[str]) -> str | None:
    """Extract plain text from HTML using a chain of extractors.

    Tries each extraction method in order until one produces non-empty
    output. This provides robustness against different HTML structures.

    Args:
        html: The HTML content to extract text from
        primary: Name of the primary extraction method to try first
        fallback: List of fallback method names to try if primary fails

    Returns:
        Extracted plain text with leading/trailing whitespace stripped,
        or None if all methods fail

    Examples:
        >>> extract_text(html, "trafilatura", ["readability", "bs4"])
        "Article content here..."
    """
    if not html or not html.strip():
        return None
    order = [primary] + [name for name in fallback if name != primary]
    for method in order:
        extractor = _get_extractor(method)
        if not extractor:
            continue
        try:
            text = extractor(html)
        except Exception as exc:
            log_event(
                logger,
                "Extractor failed",
                level=logging.WARNING,
                event="extract_failed",
                method=method,
                error=f"{type(exc).__name__}: {exc}",
            )
            continue
        if text and text.strip():
            return text.strip()
    return None


def extract_title(html: str) -> str:
    """Return the document <title>, or "Article" when there is none."""
    soup = BeautifulSoup(html, "html.parser")
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text(strip=True)
    return "Article"


def html_to_text(fragment: str | None) -> str:
    """Collapse an HTML fragment (feed summaries, content) into one line of text."""
    if not fragment:
        return ""
    text = BeautifulSoup(fragment, "html.parser").get_text(separator=" ")
    return _WS_RE.sub(" ", text).strip()


def _get_extractor(name: str) -> Callable[[str], str | None] | None:
    """Get the extractor function for a given method name.

    Args:
        name: The name of the extraction method ("trafilatura", "readability", "bs4")

    Returns:
        The corresponding extractor function, or None if name is unrecognized
    """
    if name == "trafilatura":
        return _extract_trafilatura
    if name == "readability":
        return _extract_readability
    if name == "bs4":
        return _extract_bs4
    return None


def _extract_trafilatura(html: str) -> str | None:
    """Extract article content using trafilatura."""
    return trafilatura.extract(html)


def _extract_readability(html: str) -> str | None:
    """Extract article content using Mozilla's readability algorithm.

    Readability returns simplified HTML for the main content block, which
    is then flattened to text with bs4.
    """
    doc = Document(html)
    content_html = doc.summary()
    return _extract_bs4(content_html)


def _extract_bs4(html: str) -> str | None:
    """Extract plain text from HTML using BeautifulSoup.

    Removes navigation, footers, ads and scripts, then prefers the text of
    article-like containers over the whole body.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_NOISE_TAGS):
        tag.decompose()
    for tag in soup.select(_NOISE_SELECTORS):
        tag.decompose()

    matched = soup.select(_CONTENT_SELECTORS)
    matched_ids = {id(block) for block in matched}
    # Nested matches (an <article> inside <main>) would repeat text
    blocks = [b for b in matched if not any(id(parent) in matched_ids for parent in b.parents)]
    if blocks:
        text = " ".join(block.get_text(separator=" ") for block in blocks)
    else:
        root = soup.body or soup
        text = root.get_text(separator=" ")
    cleaned = _WS_RE.sub(" ", text).strip()
    return cleaned if cleaned else None
