"""Provider protocols.

Defines the contracts that text-generation providers must satisfy:

- ``CompletionProvider``: single-item completion (required for all providers)
- ``BatchJobProvider``: asynchronous batch job API operations (optional)

A provider can implement both protocols or just ``CompletionProvider``.
"""

from typing import Protocol, runtime_checkable

from recipe_forge.batch_types import BatchJobHandle, BatchRequest, BatchResult
from recipe_forge.types import GenerationRequest


@runtime_checkable
class CompletionProvider(Protocol):
    """Protocol for single-item text completion.

    The protocol is runtime_checkable to allow isinstance() verification,
    which is useful for validation and testing.
    """

    @property
    def model_name(self) -> str:
        """Return the default model identifier."""
        ...

    async def complete(self, request: GenerationRequest) -> str:
        """Complete a prompt and return the generated text.

        The prompt is serialised to text and truncated to the provider's
        input limit before dispatch.

        Args:
            request: Prompt, optional model, system text and sampling options.

        Returns:
            Non-empty generated text.

        Raises:
            LLMConnectionError: If the backend call fails.
            EmptyResponseError: If the backend returns no usable text.

        """
        ...


@runtime_checkable
class BatchJobProvider(Protocol):
    """Protocol for providers that support an asynchronous batch job API.

    Not all providers support batch mode, so implementing this protocol is
    optional. ``BatchJobRunner`` drives these operations to completion.
    """

    async def submit_batch(self, requests: list[BatchRequest]) -> str:
        """Submit multiple prompts as a single batch job.

        Args:
            requests: Non-empty list of requests, each tagged with a custom_id.

        Returns:
            The provider's job identifier.

        Raises:
            BatchSubmissionError: If the batch is empty, exceeds the provider's
                per-job cap, or the submission request fails.

        """
        ...

    async def get_batch_status(self, job_id: str) -> BatchJobHandle:
        """Poll a batch job's processing status.

        Args:
            job_id: The provider's job identifier from submission.

        Returns:
            Current status mapped onto the library's job status taxonomy.

        Raises:
            LLMConnectionError: If the status request fails.

        """
        ...

    async def get_batch_results(self, job_id: str) -> list[BatchResult]:
        """Retrieve per-item results for a completed batch job.

        Should only be called once ``get_batch_status`` reports the job as
        completed. Every item the backend reports is returned as either a
        completed or a failed result.

        Args:
            job_id: The provider's job identifier from submission.

        Returns:
            Per-request results carrying the submitted custom_id.

        Raises:
            LLMConnectionError: If the results request fails.

        """
        ...
