"""
Recovery of JSON objects from free-form model output.

Models are asked for a bare JSON object but sometimes wrap it in code
fences, surround it with prose, or typeset quotes as "smart" quotes. All
repair happens here so services only ever call ``decode_model_json``.
"""

from __future__ import annotations

import json
import re
from typing import Any


_FENCE_RE = re.compile(r"```[a-zA-Z0-9_-]*[ \t]*\n?|\n?```")

# U+201C, U+201D, U+201E, U+201F, U+2033
_DOUBLE_QUOTES = "“”„‟″"
# U+2018, U+2019, U+201A, U+201B, U+2032
_SINGLE_QUOTES = "‘’‚‛′"
_QUOTE_TABLE = str.maketrans(
    {**{ch: '"' for ch in _DOUBLE_QUOTES}, **{ch: "'" for ch in _SINGLE_QUOTES}}
)


def clean_model_text(text: str) -> str:
    """Strip code-fence markers, normalize smart quotes to ASCII, and trim.

    Examples:
        >>> clean_model_text('```json\\n{“a”: “it’s”}\\n```')
        '{"a": "it\\'s"}'
    """
    if not text:
        return ""
    cleaned = _FENCE_RE.sub("", text)
    cleaned = cleaned.translate(_QUOTE_TABLE)
    return cleaned.strip()


def decode_model_json(text: str) -> dict[str, Any]:
    """Decode the JSON object in a model response.

    The cleaned text is decoded strictly first. If that fails, the outermost
    ``{...}`` span is decoded instead, which drops any prose around it.

    Raises:
        json.JSONDecodeError: If no JSON object can be recovered
    """
    cleaned = clean_model_text(text)
    if not cleaned:
        raise json.JSONDecodeError("Empty content", text or "", 0)
    try:
        obj = json.loads(cleaned)
    except json.JSONDecodeError:
        obj = json.loads(_extract_object_span(cleaned))
    if not isinstance(obj, dict):
        raise json.JSONDecodeError("Expected a JSON object", cleaned, 0)
    return obj


def _extract_object_span(content: str) -> str:
    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise json.JSONDecodeError("No JSON object found", content, 0)
    return content[start : end + 1]
