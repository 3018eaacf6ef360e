"""Internal helpers for pulling text out of provider responses."""

from typing import Any


def extract_text(content: Any) -> str:
    """Extract text from a LangChain message's ``content``.

    Content is either a plain string or a list of blocks, where each block is
    a string or a dict such as ``{"type": "text", "text": "..."}``. Non-text
    blocks (tool calls, thinking) are ignored.
    """
    if isinstance(content, str):
        return content

    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type", "text") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)

    return str(content)


def extract_block_text(blocks: Any) -> str:
    """Join the text blocks of an Anthropic SDK message's ``content`` list."""
    return "".join(
        block.text for block in blocks or [] if getattr(block, "type", None) == "text"
    )
