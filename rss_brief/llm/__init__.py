"""Language-model access, prompt rendering and observability."""

from .json_parser import clean_model_text, decode_model_json
from .providers import (
    AnthropicProvider,
    CompletionProvider,
    GeminiProvider,
    available_providers,
    create_provider,
)
from .tracing import flush, record_span_error, set_span_output, setup_langfuse, start_span

__all__ = [
    "AnthropicProvider",
    "CompletionProvider",
    "GeminiProvider",
    "available_providers",
    "clean_model_text",
    "create_provider",
    "decode_model_json",
    "flush",
    "record_span_error",
    "set_span_output",
    "setup_langfuse",
    "start_span",
]
