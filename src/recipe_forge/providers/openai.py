"""OpenAI provider implementation."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import SecretStr

from recipe_forge.errors import (
    EmptyResponseError,
    LLMConfigurationError,
    LLMConnectionError,
)
from recipe_forge.prompting import serialise_prompt, truncate_text
from recipe_forge.providers._content import extract_text
from recipe_forge.types import GenerationOptions, GenerationRequest

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1-nano"
DEFAULT_MAX_INPUT_LENGTH = 3000
MIN_INPUT_LENGTH = 100


class OpenAIProvider:
    """OpenAI provider using LangChain's ``ChatOpenAI``.

    Completion only: it satisfies ``CompletionProvider`` but not
    ``BatchJobProvider``. Unlike Anthropic, it honours the presence and
    frequency penalty terms.

    Supports custom base_url for OpenAI-compatible APIs (e.g., local LLMs).
    """

    def __init__(  # noqa: PLR0913 - provider configuration surface
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        *,
        max_input_length: int = DEFAULT_MAX_INPUT_LENGTH,
        default_options: GenerationOptions | None = None,
    ) -> None:
        """Initialise the OpenAI provider.

        Args:
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY env var.
                     Optional when base_url is set (for local LLMs).
            model: Model name. Falls back to OPENAI_MODEL env var,
                   then defaults to gpt-4.1-nano.
            base_url: Base URL for OpenAI-compatible APIs. Falls back to
                      OPENAI_BASE_URL env var.
            max_input_length: Character limit for prompts (minimum 100).
            default_options: Sampling parameters applied to every request
                unless the request overrides them.

        Raises:
            LLMConfigurationError: If API key is not provided and base_url is not set.

        """
        self._model = model or os.getenv("OPENAI_MODEL") or DEFAULT_MODEL
        self._base_url = base_url or os.getenv("OPENAI_BASE_URL")
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")

        if not self._api_key and not self._base_url:
            raise LLMConfigurationError(
                "OpenAI API key is required. Set OPENAI_API_KEY environment "
                "variable or provide api_key parameter. "
                "For local LLMs, set OPENAI_BASE_URL instead."
            )

        self._max_input_length = max(MIN_INPUT_LENGTH, max_input_length)
        self._default_options = default_options or GenerationOptions()

        # API key placeholder for local LLMs (LangChain requires it but servers ignore it)
        effective_api_key = self._api_key or "local"

        self._llm = ChatOpenAI(
            model=self._model,
            api_key=SecretStr(effective_api_key),
            base_url=self._base_url,
            timeout=300,
        )

        logger.info(f"Initialised OpenAI provider with model: {self._model}")

    @property
    def model_name(self) -> str:
        """Return the model name being used."""
        return self._model

    def _request_kwargs(self, request: GenerationRequest) -> dict[str, Any]:
        resolved = self._default_options.merged(request.options)
        kwargs: dict[str, Any] = {"model": request.model or self._model}
        for name, value in resolved.model_dump(exclude_none=True).items():
            kwargs[name] = value
        return kwargs

    async def complete(self, request: GenerationRequest) -> str:
        """Complete a prompt and return the generated text.

        Args:
            request: Prompt, optional model, system text and sampling options.

        Returns:
            Non-empty generated text.

        Raises:
            LLMConnectionError: If the backend call fails.
            EmptyResponseError: If the backend returns no usable text.

        """
        prompt_text = truncate_text(
            serialise_prompt(request.prompt), self._max_input_length
        )
        messages: list[BaseMessage] = []
        if request.system:
            messages.append(SystemMessage(content=request.system))
        messages.append(HumanMessage(content=prompt_text))

        kwargs = self._request_kwargs(request)
        stop = kwargs.pop("stop", None)

        try:
            logger.debug(f"Requesting completion from {kwargs['model']}")
            response = await asyncio.to_thread(
                self._llm.invoke, messages, stop=stop, **kwargs
            )

        except Exception as e:
            logger.error(f"Completion request failed: {e}")
            raise LLMConnectionError(f"Completion failed: {e}") from e

        text = extract_text(response.content)
        if not text.strip():
            raise EmptyResponseError("Empty response from GPT")

        logger.debug(f"Completion finished (response length: {len(text)} chars)")
        return text
