"""Error classes for recipe-forge.

This module provides:
- RecipeForgeError: Base exception class for all library errors
- LLMServiceError and its subclasses: provider, batch job and polling errors
- StepValidationError: Raised by pipeline validators to reject output
"""


class RecipeForgeError(Exception):
    """Base exception for all recipe-forge errors."""

    pass


class LLMServiceError(RecipeForgeError):
    """Base exception for LLM service related errors."""

    pass


class LLMConfigurationError(LLMServiceError):
    """Exception raised when LLM service is misconfigured."""

    pass


class LLMConnectionError(LLMServiceError):
    """Exception raised when an LLM backend call fails."""

    pass


class EmptyResponseError(LLMServiceError):
    """Exception raised when a backend call succeeds but returns no text."""

    pass


class BatchSubmissionError(LLMServiceError):
    """Exception raised when a batch job cannot be submitted."""

    pass


class BatchJobError(LLMServiceError):
    """Raised when a batch job reaches a failed or expired terminal state."""

    def __init__(self, job_id: str, status: str) -> None:
        """Initialise with the job identifier and its terminal status.

        Args:
            job_id: The provider's batch identifier.
            status: Terminal status reported by the provider.

        """
        self.job_id = job_id
        self.status = status
        super().__init__(f"Batch {status}: {job_id}")


class BatchTimeoutError(LLMServiceError):
    """Raised when polling exceeds its wall-clock ceiling."""

    def __init__(self, job_id: str, waited: float) -> None:
        """Initialise with the abandoned job and the time waited.

        Args:
            job_id: The provider's batch identifier.
            waited: Seconds elapsed before giving up.

        """
        self.job_id = job_id
        self.waited = waited
        super().__init__(
            f"Batch processing timeout after {waited:g}s (job {job_id} abandoned)"
        )


class StepValidationError(RecipeForgeError):
    """Raised by a validator that rejects a pipeline step's output."""

    pass
