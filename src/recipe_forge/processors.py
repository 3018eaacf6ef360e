"""Built-in pipeline processors for raw LLM text.

Processors take the previous value and return a transformed one. They raise
when the input cannot be transformed, which fails the pipeline step.
"""

import json
import re
from typing import Any

_CODE_FENCE = re.compile(r"^\s*```[\w-]*\s*\n(?P<body>.*?)\n?\s*```\s*$", re.DOTALL)
_decoder = json.JSONDecoder()


def strip_code_fences(text: str) -> str:
    """Remove a Markdown code fence wrapping the whole text, if any."""
    match = _CODE_FENCE.match(text)
    if match:
        return match.group("body").strip()
    return text.strip()


def _first_json_value(text: str, opener: str, expected: type) -> Any:
    position = text.find(opener)
    while position != -1:
        try:
            value, _ = _decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(value, expected):
                return value
        position = text.find(opener, position + 1)
    return None


def extract_json_array(text: str) -> list[Any]:
    """Return the first JSON array embedded in ``text``.

    Raises:
        ValueError: If no parseable JSON array is found.

    """
    value = _first_json_value(text, "[", list)
    if value is None:
        raise ValueError("No JSON array found")
    return value


def extract_json_object(text: str) -> dict[str, Any]:
    """Return the first JSON object embedded in ``text``.

    Raises:
        ValueError: If no parseable JSON object is found.

    """
    value = _first_json_value(text, "{", dict)
    if value is None:
        raise ValueError("No JSON object found")
    return value
