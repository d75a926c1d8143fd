"""Model-backed services: article summaries, analyses and the daily briefing."""

from .analyst import Analyst
from .summarizer import Summarizer
from .synthesizer import Synthesizer

__all__ = ["Analyst", "Summarizer", "Synthesizer"]
