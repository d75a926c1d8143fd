"""HTML output for the aggregated timeline."""

from .renderer import render_index

__all__ = ["render_index"]
