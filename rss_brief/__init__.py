"""rss-brief: aggregate RSS feeds and brief them with a language model."""

__version__ = "0.1.0"
