"""Batch job runner: submit, poll until terminal, collect results.

Drives a ``BatchJobProvider`` through the job state machine::

    validating → in_progress → {completed, failed, expired}

A ``canceling`` job is reported by the provider as ``in_progress`` and keeps
being polled. Polling stops at the first terminal state or once the
wall-clock ceiling is reached; a job that times out is abandoned locally, not
cancelled remotely.

Typical usage::

    runner = BatchJobRunner(provider, poll_interval=5, max_wait=1800)
    results = await runner.run_to_completion(requests)
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from recipe_forge.batch_types import BatchRequest, BatchResult
from recipe_forge.errors import BatchJobError, BatchTimeoutError
from recipe_forge.providers.protocol import BatchJobProvider

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_MAX_WAIT = 30 * 60.0

type Clock = Callable[[], float]
type Sleeper = Callable[[float], Awaitable[None]]


class BatchJobRunner:
    """Runs batch jobs to completion against a batch-capable provider."""

    def __init__(
        self,
        provider: BatchJobProvider,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_wait: float = DEFAULT_MAX_WAIT,
        clock: Clock = time.monotonic,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        """Initialise the runner.

        Args:
            provider: Batch-capable provider for submit/status/results calls.
            poll_interval: Default seconds between status polls.
            max_wait: Default wall-clock ceiling in seconds.
            clock: Monotonic time source (injectable for tests).
            sleep: Coroutine used to wait between polls (injectable for tests).

        """
        self._provider = provider
        self._poll_interval = poll_interval
        self._max_wait = max_wait
        self._clock = clock
        self._sleep = sleep

    @property
    def provider(self) -> BatchJobProvider:
        """Return the provider this runner drives."""
        return self._provider

    async def run_to_completion(
        self,
        requests: list[BatchRequest],
        poll_interval: float | None = None,
        max_wait: float | None = None,
    ) -> list[BatchResult]:
        """Submit a batch and wait for its results.

        Args:
            requests: Requests to submit as one job.
            poll_interval: Seconds between polls (runner default if None).
            max_wait: Wall-clock ceiling in seconds (runner default if None).

        Returns:
            Per-item results of the completed job.

        Raises:
            BatchSubmissionError: If the job cannot be submitted.
            BatchJobError: If the job ends failed or expired.
            BatchTimeoutError: If no terminal state is reached within max_wait.
            LLMConnectionError: If a status or results request fails.

        """
        interval = self._poll_interval if poll_interval is None else poll_interval
        ceiling = self._max_wait if max_wait is None else max_wait

        job_id = await self._provider.submit_batch(requests)
        started = self._clock()
        last_status: str | None = None

        while self._clock() - started < ceiling:
            handle = await self._provider.get_batch_status(job_id)

            if handle.status != last_status:
                logger.debug(f"Batch {job_id} is {handle.status}")
                last_status = handle.status

            if handle.status == "completed":
                stats = handle.processing_stats
                logger.info(
                    f"Batch {job_id} completed"
                    + (
                        f" ({stats.succeeded} succeeded, {stats.errored} errored)"
                        if stats
                        else ""
                    )
                )
                return await self._provider.get_batch_results(job_id)

            if handle.status in ("failed", "expired"):
                logger.warning(f"Batch {job_id} ended {handle.status}")
                raise BatchJobError(job_id, handle.status)

            await self._sleep(interval)

        logger.warning(f"Batch {job_id} abandoned after {ceiling:g}s without finishing")
        raise BatchTimeoutError(job_id, ceiling)
