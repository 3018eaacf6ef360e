"""Anthropic Claude provider implementation."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

from anthropic import AsyncAnthropic
from langchain_anthropic import ChatAnthropic
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from pydantic import SecretStr

from recipe_forge.batch_types import (
    BatchJobHandle,
    BatchJobStatus,
    BatchRequest,
    BatchResult,
    ProcessingStats,
)
from recipe_forge.errors import (
    BatchSubmissionError,
    EmptyResponseError,
    LLMConfigurationError,
    LLMConnectionError,
)
from recipe_forge.prompting import serialise_prompt, truncate_text
from recipe_forge.providers._content import extract_block_text, extract_text
from recipe_forge.types import GenerationOptions, GenerationRequest

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-3-5-haiku-20241022"
DEFAULT_MAX_TOKENS = 4096
DEFAULT_MAX_INPUT_LENGTH = 3000
MIN_INPUT_LENGTH = 100
MAX_BATCH_REQUESTS = 100_000


class AnthropicProvider:
    """Anthropic Claude provider using LangChain and the Anthropic SDK.

    Single completions go through LangChain's ``ChatAnthropic``; batch job
    operations go through the ``anthropic`` SDK's ``AsyncAnthropic`` Message
    Batches API. Both paths share the same prompt preparation (serialisation
    and truncation) and sampling parameters. Satisfies both the
    ``CompletionProvider`` and ``BatchJobProvider`` protocols.
    """

    _async_client: AsyncAnthropic | None = None

    def __init__(  # noqa: PLR0913 - provider configuration surface
        self,
        api_key: str | None = None,
        model: str | None = None,
        *,
        max_input_length: int = DEFAULT_MAX_INPUT_LENGTH,
        max_batch_requests: int = MAX_BATCH_REQUESTS,
        default_options: GenerationOptions | None = None,
    ) -> None:
        """Initialise the Anthropic provider.

        Args:
            api_key: Anthropic API key. Falls back to ANTHROPIC_API_KEY env var.
            model: Model name. Falls back to ANTHROPIC_MODEL env var,
                   then defaults to claude-3-5-haiku.
            max_input_length: Character limit for prompts (minimum 100).
            max_batch_requests: Per-job request cap enforced at submission.
            default_options: Sampling parameters applied to every request
                unless the request overrides them.

        Raises:
            LLMConfigurationError: If API key is not provided or found in environment.

        """
        self._model = model or os.getenv("ANTHROPIC_MODEL") or DEFAULT_MODEL
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")

        if not self._api_key:
            raise LLMConfigurationError(
                "Anthropic API key is required. Set ANTHROPIC_API_KEY environment "
                "variable or provide api_key parameter."
            )

        self._max_input_length = max(MIN_INPUT_LENGTH, max_input_length)
        self._max_batch_requests = max_batch_requests
        self._default_options = default_options or GenerationOptions()
        self._llm = ChatAnthropic(
            model_name=self._model,
            api_key=SecretStr(self._api_key),
            max_tokens_to_sample=DEFAULT_MAX_TOKENS,
            timeout=300,
            stop=None,
        )

        logger.info(f"Initialised Anthropic provider with model: {self._model}")

    @property
    def model_name(self) -> str:
        """Return the model name being used."""
        return self._model

    @property
    def max_input_length(self) -> int:
        """Return the prompt character limit."""
        return self._max_input_length

    @property
    def max_batch_requests(self) -> int:
        """Return the per-job request cap."""
        return self._max_batch_requests

    # -------------------------------------------------------------------------
    # Request shaping
    # -------------------------------------------------------------------------

    def _prepare_prompt(self, prompt: Any) -> str:
        return truncate_text(serialise_prompt(prompt), self._max_input_length)

    def _sampling_params(self, options: GenerationOptions | None) -> dict[str, Any]:
        """Map generation options onto Messages API parameter names."""
        resolved = self._default_options.merged(options)
        if (
            resolved.presence_penalty is not None
            or resolved.frequency_penalty is not None
        ):
            logger.debug("Anthropic does not support penalty terms, ignoring them")

        params: dict[str, Any] = {
            "max_tokens": resolved.max_tokens or DEFAULT_MAX_TOKENS
        }
        if resolved.temperature is not None:
            params["temperature"] = resolved.temperature
        if resolved.top_p is not None:
            params["top_p"] = resolved.top_p
        if resolved.stop:
            params["stop_sequences"] = list(resolved.stop)
        return params

    def _build_message_params(self, request: GenerationRequest) -> dict[str, Any]:
        """Build Messages API parameters for one request."""
        params: dict[str, Any] = {
            "model": request.model or self._model,
            "messages": [
                {"role": "user", "content": self._prepare_prompt(request.prompt)}
            ],
            **self._sampling_params(request.options),
        }
        if request.system:
            params["system"] = request.system
        return params

    # -------------------------------------------------------------------------
    # CompletionProvider protocol
    # -------------------------------------------------------------------------

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
        messages: list[BaseMessage] = []
        if request.system:
            messages.append(SystemMessage(content=request.system))
        messages.append(HumanMessage(content=self._prepare_prompt(request.prompt)))

        kwargs = self._sampling_params(request.options)
        stop = kwargs.pop("stop_sequences", None)
        kwargs["model"] = request.model or self._model

        try:
            logger.debug(f"Requesting completion from {kwargs['model']}")

            # LangChain is sync, so wrap in asyncio.to_thread
            response = await asyncio.to_thread(
                self._llm.invoke, messages, stop=stop, **kwargs
            )

        except Exception as e:
            logger.error(f"Completion request failed: {e}")
            raise LLMConnectionError(f"Completion failed: {e}") from e

        text = extract_text(response.content)
        if not text.strip():
            raise EmptyResponseError("Empty response from Claude")

        logger.debug(f"Completion finished (response length: {len(text)} chars)")
        return text

    # -------------------------------------------------------------------------
    # BatchJobProvider protocol
    # -------------------------------------------------------------------------

    def _get_async_client(self) -> AsyncAnthropic:
        """Return the lazily-initialised ``AsyncAnthropic`` client.

        The completion path uses LangChain's ``ChatAnthropic`` and does not
        need this client.
        """
        if self._async_client is None:
            self._async_client = AsyncAnthropic(api_key=self._api_key)
        return self._async_client

    async def submit_batch(self, requests: list[BatchRequest]) -> str:
        """Submit multiple prompts as a single Message Batches job.

        Args:
            requests: Non-empty list of requests, each tagged with a custom_id.

        Returns:
            The provider's job identifier.

        Raises:
            BatchSubmissionError: If the batch is empty, exceeds the per-job
                cap, or the submission request fails.

        """
        if not requests:
            raise BatchSubmissionError("Cannot submit an empty batch")
        if len(requests) > self._max_batch_requests:
            raise BatchSubmissionError(
                f"Batch of {len(requests)} requests exceeds the limit of "
                f"{self._max_batch_requests} requests per job"
            )

        try:
            client = self._get_async_client()
            request_list = [
                {
                    "custom_id": request.custom_id,
                    "params": self._build_message_params(request),
                }
                for request in requests
            ]

            batch = await client.messages.batches.create(requests=request_list)  # type: ignore[reportArgumentType]

            logger.info(f"Submitted batch {batch.id} with {len(requests)} request(s)")
            return batch.id

        except Exception as e:
            logger.error(f"Batch submission failed: {e}")
            raise BatchSubmissionError(f"Failed to create batch: {e}") from e

    async def get_batch_status(self, job_id: str) -> BatchJobHandle:
        """Poll a batch job's processing status.

        Args:
            job_id: The provider's job identifier from submission.

        Returns:
            Current status and request counts.

        Raises:
            LLMConnectionError: If the status request fails.

        """
        try:
            client = self._get_async_client()
            batch = await client.messages.batches.retrieve(job_id)

            counts = batch.request_counts
            stats = ProcessingStats(
                processing=counts.processing or 0,
                succeeded=counts.succeeded or 0,
                errored=counts.errored or 0,
                canceled=counts.canceled or 0,
                expired=counts.expired or 0,
            )

            return BatchJobHandle(
                job_id=job_id,
                status=_ANTHROPIC_STATUS_MAP.get(batch.processing_status, "validating"),
                processing_stats=stats,
            )

        except Exception as e:
            logger.error(f"Batch status check failed: {e}")
            raise LLMConnectionError(f"Failed to get batch status: {e}") from e

    async def get_batch_results(self, job_id: str) -> list[BatchResult]:
        """Retrieve per-item results for a completed batch job.

        Streams results and classifies each item: ``succeeded`` becomes a
        completed result with the message text, ``errored`` a failed result
        with the backend message, and any other kind (canceled, expired, or
        anything newer) a failed result naming the kind.

        Args:
            job_id: The provider's job identifier from submission.

        Returns:
            Per-request results carrying the submitted custom_id.

        Raises:
            LLMConnectionError: If the results request fails.

        """
        try:
            client = self._get_async_client()
            results: list[BatchResult] = []

            result_stream = await client.messages.batches.results(job_id)
            async for response in result_stream:
                results.append(_map_batch_item(response.custom_id, response.result))

            return results

        except Exception as e:
            logger.error(f"Batch results retrieval failed: {e}")
            raise LLMConnectionError(f"Failed to get batch results: {e}") from e


def _map_batch_item(custom_id: str, result: Any) -> BatchResult:
    """Classify one streamed batch item into a completed or failed result."""
    if result.type == "succeeded":
        text = extract_block_text(result.message.content)
        return BatchResult.success(custom_id, text)

    if result.type == "errored":
        # ErrorResponse wraps the error object in a response envelope
        envelope = getattr(result, "error", None)
        inner = getattr(envelope, "error", None)
        message = (
            getattr(inner, "message", None)
            or getattr(inner, "type", None)
            or "Unknown error"
        )
        return BatchResult.failure(custom_id, str(message))

    return BatchResult.failure(custom_id, f"Request {result.type}")


_ANTHROPIC_STATUS_MAP: dict[str, BatchJobStatus] = {
    "in_progress": "in_progress",
    "canceling": "in_progress",
    "ended": "completed",
    "failed": "failed",
    "expired": "expired",
}
