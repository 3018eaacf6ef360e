"""Batch orchestrator: route bulk requests to direct calls or batch jobs.

Small volumes are dispatched as concurrent single completions, because the
fixed overhead of a batch job (submission plus poll latency) dominates for a
handful of items. Larger volumes are split into chunks and each chunk runs as
one asynchronous batch job, one chunk at a time.

Failures never escape as exceptions for partial problems: an item's failure
becomes that item's ``BatchResult.error`` and a chunk's failure becomes a
failed result for every item in the chunk. Every request yields exactly one
result with its ``custom_id``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from recipe_forge.batch_runner import BatchJobRunner
from recipe_forge.batch_types import BatchRequest, BatchResult
from recipe_forge.providers.protocol import CompletionProvider

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 50
DEFAULT_SMALL_BATCH_THRESHOLD = 3
MISSING_RESULT_ERROR = "No result returned for request"


class BatchOrchestrator:
    """Chooses between parallel completions and chunked batch jobs."""

    def __init__(
        self,
        completion_provider: CompletionProvider,
        batch_runner: BatchJobRunner,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        small_batch_threshold: int = DEFAULT_SMALL_BATCH_THRESHOLD,
    ) -> None:
        """Initialise the orchestrator.

        Args:
            completion_provider: Provider used for the small-batch path.
            batch_runner: Runner used to execute each chunk as a batch job.
            chunk_size: Default maximum number of requests per batch job.
            small_batch_threshold: Request counts up to this value skip the
                batch API and use concurrent single completions.

        Raises:
            ValueError: If chunk_size is not positive or the threshold is negative.

        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if small_batch_threshold < 0:
            raise ValueError(
                f"small_batch_threshold cannot be negative, got {small_batch_threshold}"
            )
        self._completion_provider = completion_provider
        self._batch_runner = batch_runner
        self._chunk_size = chunk_size
        self._small_batch_threshold = small_batch_threshold

    async def ask_batch(
        self,
        requests: Sequence[BatchRequest],
        chunk_size: int | None = None,
    ) -> list[BatchResult]:
        """Run every request and return one result per request.

        Args:
            requests: Requests with caller-assigned, unique custom_ids.
            chunk_size: Maximum requests per batch job (orchestrator default
                if None).

        Returns:
            One BatchResult per request. Order is not guaranteed; correlate
            by custom_id.

        Raises:
            ValueError: If chunk_size is not positive or custom_ids repeat.

        """
        size = self._chunk_size if chunk_size is None else chunk_size
        if size <= 0:
            raise ValueError(f"chunk_size must be positive, got {size}")

        custom_ids = [request.custom_id for request in requests]
        if len(set(custom_ids)) != len(custom_ids):
            raise ValueError("custom_id values must be unique within one batch call")

        if not requests:
            return []

        if len(requests) <= self._small_batch_threshold:
            logger.debug(
                f"Dispatching {len(requests)} request(s) as direct completions"
            )
            return await self._process_individually(requests)

        return await self._process_in_chunks(requests, size)

    async def _complete_one(self, request: BatchRequest) -> BatchResult:
        try:
            text = await self._completion_provider.complete(request)
        except Exception as e:
            logger.warning(f"Request {request.custom_id} failed: {e}")
            return BatchResult.failure(request.custom_id, str(e))
        return BatchResult.success(request.custom_id, text)

    async def _process_individually(
        self, requests: Sequence[BatchRequest]
    ) -> list[BatchResult]:
        """Run all requests concurrently and wait for every one to settle."""
        outcomes = await asyncio.gather(
            *(self._complete_one(request) for request in requests),
            return_exceptions=True,
        )

        results: list[BatchResult] = []
        for request, outcome in zip(requests, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                results.append(BatchResult.failure(request.custom_id, str(outcome)))
            else:
                results.append(outcome)
        return results

    async def _process_in_chunks(
        self, requests: Sequence[BatchRequest], chunk_size: int
    ) -> list[BatchResult]:
        """Run consecutive chunks as batch jobs, strictly one after another."""
        results: list[BatchResult] = []
        chunk_count = (len(requests) + chunk_size - 1) // chunk_size

        for number, start in enumerate(range(0, len(requests), chunk_size), start=1):
            chunk = list(requests[start : start + chunk_size])
            logger.info(
                f"Processing chunk {number}/{chunk_count} ({len(chunk)} request(s))"
            )

            try:
                chunk_results = await self._batch_runner.run_to_completion(chunk)
            except Exception as e:
                logger.warning(f"Chunk {number}/{chunk_count} failed: {e}")
                results.extend(
                    BatchResult.failure(
                        request.custom_id, f"Batch processing failed: {e}"
                    )
                    for request in chunk
                )
                continue

            results.extend(_reconcile(chunk, chunk_results))

        return results


def _reconcile(
    chunk: Sequence[BatchRequest], chunk_results: Sequence[BatchResult]
) -> list[BatchResult]:
    """Match backend results to a chunk's requests, one result per request."""
    by_id: dict[str, BatchResult] = {}
    for result in chunk_results:
        by_id.setdefault(result.custom_id, result)

    expected = {request.custom_id for request in chunk}
    unknown = set(by_id) - expected
    if unknown:
        logger.warning(f"Dropping {len(unknown)} result(s) with unknown custom_id")

    reconciled: list[BatchResult] = []
    for request in chunk:
        result = by_id.get(request.custom_id)
        if result is None:
            logger.warning(f"No result returned for {request.custom_id}")
            result = BatchResult.failure(request.custom_id, MISSING_RESULT_ERROR)
        reconciled.append(result)
    return reconciled
