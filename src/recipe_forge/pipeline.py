"""Generation pipeline: ordered fallback attempts with processing and validation.

A pipeline is a fixed list of steps. Each step produces data (usually an LLM
completion), transforms it through processors, then checks it with
validators. The first step that gets through all three wins; any exception
moves on to the next step. This expresses a "strict attempt, then relaxed
attempts" policy without nested try/except chains::

    result = await (
        pipeline()
        .step(
            lambda: provider.complete(strict_request),
            processors=[extract_json_object],
            validators=[RecipeContentValidator(), DescriptionValidator()],
        )
        .step(
            lambda: provider.complete(relaxed_request),
            processors=[extract_json_object],
            validators=[DescriptionValidator(min_words=35, max_words=80)],
        )
        .execute()
    )
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Self

logger = logging.getLogger(__name__)

type Producer = Callable[[], Awaitable[Any]]
type Processor = Callable[[Any], Any]
"""Transforms data; may return an awaitable."""
type Validator = Callable[[Any], Any]
"""Raises to reject data; may return an awaitable. Must not mutate its input."""

NO_STEPS_ERROR = "No steps in pipeline"


@dataclass(frozen=True)
class PipelineStep:
    """One fallback attempt: a producer plus processor and validator chains."""

    producer: Producer
    processors: tuple[Processor, ...] = ()
    validators: tuple[Validator, ...] = ()


@dataclass(frozen=True)
class PipelineResult[T]:
    """Outcome of ``Pipeline.execute()``.

    On success ``data`` holds the accepted output and ``step_index`` the step
    that produced it. On failure ``error`` holds the last step's error
    message and ``step_index`` the last step attempted (``None`` when the
    pipeline had no steps).
    """

    success: bool
    data: T | None = None
    error: str | None = None
    step_index: int | None = None

    @classmethod
    def succeeded(cls, data: T, step_index: int) -> PipelineResult[T]:
        """Build a successful result."""
        return cls(success=True, data=data, step_index=step_index)

    @classmethod
    def failed(cls, error: str, step_index: int | None = None) -> PipelineResult[T]:
        """Build a failed result."""
        return cls(success=False, error=error, step_index=step_index)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Pipeline[T]:
    """Ordered list of fallback steps, tried one at a time."""

    def __init__(self) -> None:
        """Initialise an empty pipeline."""
        self._steps: list[PipelineStep] = []

    @property
    def steps(self) -> tuple[PipelineStep, ...]:
        """Return the steps in declaration order."""
        return tuple(self._steps)

    def step(
        self,
        producer: Producer,
        *,
        processors: Iterable[Processor] = (),
        validators: Iterable[Validator] = (),
    ) -> Self:
        """Append a step and return the pipeline for chaining.

        Args:
            producer: Zero-argument callable returning an awaitable of the data.
            processors: Transformations applied in order to the produced data.
            validators: Checks applied in order; each raises to reject.

        Returns:
            This pipeline.

        """
        self._steps.append(
            PipelineStep(
                producer=producer,
                processors=tuple(processors),
                validators=tuple(validators),
            )
        )
        return self

    async def _run_step(self, step: PipelineStep) -> Any:
        data = await step.producer()

        for processor in step.processors:
            data = await _resolve(processor(data))

        for validator in step.validators:
            await _resolve(validator(data))

        return data

    async def execute(self) -> PipelineResult[T]:
        """Run steps in order until one succeeds.

        Returns:
            Success with the first accepted data, or failure carrying the last
            step's error message.

        """
        steps = tuple(self._steps)
        if not steps:
            return PipelineResult.failed(NO_STEPS_ERROR)

        total = len(steps)
        last_error = NO_STEPS_ERROR
        for index, step in enumerate(steps):
            logger.debug(f"Pipeline: executing step {index + 1}/{total}")

            try:
                data = await self._run_step(step)
            except Exception as e:
                last_error = str(e) or type(e).__name__
                logger.warning(
                    f"Pipeline: step {index + 1}/{total} failed: {last_error}"
                )
                continue

            logger.debug(f"Pipeline: step {index + 1}/{total} succeeded")
            return PipelineResult.succeeded(data, index)

        return PipelineResult.failed(last_error, total - 1)


def pipeline[T]() -> Pipeline[T]:
    """Create an empty pipeline."""
    return Pipeline[T]()
