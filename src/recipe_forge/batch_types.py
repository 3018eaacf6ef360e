"""Batch mode data models for the asynchronous batch job API.

These types define the contract between the batch orchestrator, the polling
runner and batch-capable providers (e.g., Anthropic Message Batches). They are
pure value objects, immutable after creation.
"""

from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from recipe_forge.types import GenerationRequest

type BatchResultStatus = Literal["completed", "failed", "processing", "expired"]
"""Per-item outcome reported back to callers."""

type BatchJobStatus = Literal[
    "validating", "in_progress", "completed", "failed", "expired"
]
"""Job-level status after mapping the provider's vocabulary."""

TERMINAL_JOB_STATUSES: frozenset[str] = frozenset({"completed", "failed", "expired"})


class BatchRequest(GenerationRequest):
    """A single prompt submission within a batch.

    The ``custom_id`` is assigned by the caller and must be unique within one
    batch call; it is the only way results are correlated back to requests.
    """

    custom_id: str = Field(min_length=1)


class BatchResult(BaseModel):
    """Per-request outcome of a batch call.

    Exactly one of ``result`` and ``error`` is set.
    """

    model_config = ConfigDict(frozen=True)

    custom_id: str
    status: BatchResultStatus
    result: str | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _check_exactly_one_outcome(self) -> Self:
        if (self.result is None) == (self.error is None):
            raise ValueError("BatchResult needs exactly one of result or error")
        return self

    @classmethod
    def success(cls, custom_id: str, text: str) -> Self:
        """Build a completed result carrying the generated text."""
        return cls(custom_id=custom_id, status="completed", result=text)

    @classmethod
    def failure(
        cls,
        custom_id: str,
        error: str,
        status: BatchResultStatus = "failed",
    ) -> Self:
        """Build a failed result carrying an error message."""
        return cls(custom_id=custom_id, status=status, error=error)

    @property
    def ok(self) -> bool:
        """Whether the request produced text."""
        return self.status == "completed" and self.result is not None


class ProcessingStats(BaseModel):
    """Item counts reported by the provider for a batch job."""

    model_config = ConfigDict(frozen=True)

    processing: int = 0
    succeeded: int = 0
    errored: int = 0
    canceled: int = 0
    expired: int = 0

    @property
    def total(self) -> int:
        """Total number of items across all states."""
        return (
            self.processing
            + self.succeeded
            + self.errored
            + self.canceled
            + self.expired
        )


class BatchJobHandle(BaseModel):
    """Polling response for a submitted batch job."""

    model_config = ConfigDict(frozen=True)

    job_id: str
    status: BatchJobStatus
    processing_stats: ProcessingStats | None = None

    @property
    def is_terminal(self) -> bool:
        """Whether no further status transition will occur."""
        return self.status in TERMINAL_JOB_STATUSES
