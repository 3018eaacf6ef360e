"""Text-generation providers.

This package contains the provider protocols and concrete implementations
for the supported backends (Anthropic, OpenAI).
"""

from recipe_forge.providers.anthropic import AnthropicProvider
from recipe_forge.providers.openai import OpenAIProvider
from recipe_forge.providers.protocol import BatchJobProvider, CompletionProvider

__all__ = [
    "CompletionProvider",
    "BatchJobProvider",
    "AnthropicProvider",
    "OpenAIProvider",
]
