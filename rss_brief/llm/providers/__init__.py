"""Language-model provider implementations."""

from .anthropic import AnthropicProvider
from .base import CompletionProvider, HttpCompletionProvider
from .factory import available_providers, create_provider
from .gemini import GeminiProvider

__all__ = [
    "AnthropicProvider",
    "CompletionProvider",
    "GeminiProvider",
    "HttpCompletionProvider",
    "available_providers",
    "create_provider",
]
