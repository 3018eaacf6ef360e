"""Prompt preparation: serialisation, templating and length capping."""

import json
from typing import Any

from pydantic import BaseModel

DATA_PLACEHOLDER = "<%data%>"
TRUNCATION_MARKER = "..."
SENTENCE_TERMINATORS = (".", "!", "?")

# Minimum position (as a share of the limit) a boundary must reach to be used
SENTENCE_MIN_RATIO = 0.8
PARAGRAPH_MIN_RATIO = 0.8
WORD_MIN_RATIO = 0.9


def _to_json(payload: Any) -> str:
    if isinstance(payload, BaseModel):
        return payload.model_dump_json()
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


def serialise_prompt(prompt: Any) -> str:
    """Return the canonical text form of a prompt payload.

    Strings pass through untouched; everything else becomes compact JSON.
    """
    if isinstance(prompt, str):
        return prompt
    return _to_json(prompt)


def render_prompt(template: str, data: Any) -> str:
    """Substitute ``data`` as JSON into the ``<%data%>`` slot of a template.

    Only the first placeholder is replaced. Templates without a placeholder
    get the data appended after a blank line.
    """
    payload = _to_json(data)
    if DATA_PLACEHOLDER in template:
        return template.replace(DATA_PLACEHOLDER, payload, 1)
    return f"{template}\n\n{payload}"


def truncate_text(text: str, max_length: int) -> str:
    """Cap ``text`` at ``max_length`` characters without cutting mid-word.

    Boundaries are tried in order: the last sentence terminator past 80% of
    the limit (kept), the last line break past 80% (dropped), the last space
    past 90% (dropped). When none qualifies the text is hard-cut and the
    truncation marker appended.

    Args:
        text: Text to cap.
        max_length: Maximum number of characters to keep.

    Returns:
        The input text if it fits, otherwise the truncated text.

    Raises:
        ValueError: If ``max_length`` is smaller than 1.

    """
    if max_length < 1:
        raise ValueError(f"max_length must be positive, got {max_length}")
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]

    sentence_end = max(truncated.rfind(char) for char in SENTENCE_TERMINATORS)
    if sentence_end > max_length * SENTENCE_MIN_RATIO:
        return truncated[: sentence_end + 1]

    paragraph_end = truncated.rfind("\n")
    if paragraph_end > max_length * PARAGRAPH_MIN_RATIO:
        return truncated[:paragraph_end]

    word_end = truncated.rfind(" ")
    if word_end > max_length * WORD_MIN_RATIO:
        return truncated[:word_end]

    return truncated + TRUNCATION_MARKER
