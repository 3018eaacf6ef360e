"""Tests for BatchOrchestrator.

Business behaviour: Routes a bulk request list either to concurrent single
completions (small volumes) or to sequential chunked batch jobs, and returns
exactly one result per request even when items or whole chunks fail.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from recipe_forge.batch_runner import BatchJobRunner
from recipe_forge.batch_types import BatchRequest, BatchResult
from recipe_forge.errors import BatchTimeoutError, LLMConnectionError
from recipe_forge.orchestrator import MISSING_RESULT_ERROR, BatchOrchestrator
from recipe_forge.types import GenerationRequest

# =============================================================================
# Helpers
# =============================================================================


def _requests(count: int, prefix: str = "req") -> list[BatchRequest]:
    return [
        BatchRequest(custom_id=f"{prefix}-{i}", prompt=f"Rewrite recipe {i}")
        for i in range(count)
    ]


def _echo_batch(chunk: list[BatchRequest]) -> list[BatchResult]:
    """Simulate a batch job that succeeds for every request in the chunk."""
    return [BatchResult.success(r.custom_id, f"done {r.custom_id}") for r in chunk]


def _create_orchestrator(
    completion: AsyncMock | None = None,
    run_to_completion: AsyncMock | None = None,
    **kwargs: int,
) -> tuple[BatchOrchestrator, Mock, Mock]:
    provider = Mock()
    provider.complete = completion or AsyncMock(return_value="generated")
    runner = Mock(spec=BatchJobRunner)
    runner.run_to_completion = run_to_completion or AsyncMock(side_effect=_echo_batch)
    return BatchOrchestrator(provider, runner, **kwargs), provider, runner


# =============================================================================
# Small batches
# =============================================================================


class TestSmallBatchPath:
    """Tests for requests handled as concurrent single completions."""

    async def test_small_batch_uses_direct_completions(self) -> None:
        """Three or fewer requests never touch the batch runner."""
        orchestrator, provider, runner = _create_orchestrator()

        results = await orchestrator.ask_batch(_requests(3))

        assert provider.complete.await_count == 3
        runner.run_to_completion.assert_not_called()
        assert {r.custom_id for r in results} == {"req-0", "req-1", "req-2"}
        assert all(r.status == "completed" and r.result == "generated" for r in results)

    async def test_one_failing_completion_does_not_fail_the_call(self) -> None:
        """A failing item becomes a failed result while siblings succeed."""

        async def complete(request: GenerationRequest) -> str:
            if request.prompt == "Rewrite recipe 1":
                raise LLMConnectionError("Completion failed: overloaded")
            return "generated"

        orchestrator, _, _ = _create_orchestrator(AsyncMock(side_effect=complete))

        results = await orchestrator.ask_batch(_requests(3))

        by_id = {r.custom_id: r for r in results}
        assert len(results) == 3
        assert by_id["req-0"].ok
        assert by_id["req-2"].ok
        assert by_id["req-1"].status == "failed"
        assert by_id["req-1"].result is None
        assert by_id["req-1"].error == "Completion failed: overloaded"

    async def test_completion_receives_the_request(self) -> None:
        """The orchestrator forwards each request object unchanged."""
        orchestrator, provider, _ = _create_orchestrator()
        request = BatchRequest(custom_id="only", prompt={"title": "Soup"}, system="Be brief")

        await orchestrator.ask_batch([request])

        provider.complete.assert_awaited_once_with(request)

    async def test_threshold_is_configurable(self) -> None:
        """A zero threshold sends even a single request through the batch path."""
        orchestrator, provider, runner = _create_orchestrator(small_batch_threshold=0)

        results = await orchestrator.ask_batch(_requests(1))

        provider.complete.assert_not_called()
        runner.run_to_completion.assert_awaited_once()
        assert results[0].result == "done req-0"


# =============================================================================
# Chunked batches
# =============================================================================


class TestChunkedBatchPath:
    """Tests for requests handled as sequential batch jobs."""

    async def test_requests_split_into_chunks_of_requested_size(self) -> None:
        """120 requests at chunk size 50 → three jobs of 50, 50 and 20."""
        orchestrator, provider, runner = _create_orchestrator()

        results = await orchestrator.ask_batch(_requests(120), chunk_size=50)

        provider.complete.assert_not_called()
        sizes = [len(call.args[0]) for call in runner.run_to_completion.await_args_list]
        assert sizes == [50, 50, 20]
        assert len(results) == 120
        assert len({r.custom_id for r in results}) == 120

    async def test_chunks_preserve_request_order(self) -> None:
        """Chunks are consecutive slices of the input list."""
        orchestrator, _, runner = _create_orchestrator()
        requests = _requests(7)

        await orchestrator.ask_batch(requests, chunk_size=3)

        chunks = [call.args[0] for call in runner.run_to_completion.await_args_list]
        assert chunks == [requests[0:3], requests[3:6], requests[6:7]]

    async def test_default_chunk_size_used_when_not_given(self) -> None:
        """The orchestrator's chunk size applies when ask_batch gets none."""
        orchestrator, _, runner = _create_orchestrator(chunk_size=4)

        await orchestrator.ask_batch(_requests(10))

        sizes = [len(call.args[0]) for call in runner.run_to_completion.await_args_list]
        assert sizes == [4, 4, 2]

    async def test_failed_chunk_does_not_affect_other_chunks(self) -> None:
        """A chunk that raises yields failed results only for its own items."""
        calls = 0

        async def run(chunk: list[BatchRequest]) -> list[BatchResult]:
            nonlocal calls
            calls += 1
            if calls == 2:
                raise BatchTimeoutError("batch-2", 1800)
            return _echo_batch(chunk)

        orchestrator, _, _ = _create_orchestrator(
            run_to_completion=AsyncMock(side_effect=run)
        )

        results = await orchestrator.ask_batch(_requests(120), chunk_size=50)

        assert len(results) == 120
        failed = [r for r in results if r.status == "failed"]
        succeeded = [r for r in results if r.ok]
        assert len(failed) == 50
        assert len(succeeded) == 70
        assert {r.custom_id for r in failed} == {f"req-{i}" for i in range(50, 100)}
        assert all(
            r.error is not None and r.error.startswith("Batch processing failed: ")
            for r in failed
        )
        assert "timeout" in (failed[0].error or "")

    async def test_per_item_failures_pass_through(self) -> None:
        """Item failures reported by the batch job are returned as-is."""

        async def run(chunk: list[BatchRequest]) -> list[BatchResult]:
            return [
                BatchResult.failure(r.custom_id, "Request expired")
                if r.custom_id == "req-4"
                else BatchResult.success(r.custom_id, "ok")
                for r in chunk
            ]

        orchestrator, _, _ = _create_orchestrator(
            run_to_completion=AsyncMock(side_effect=run)
        )

        results = await orchestrator.ask_batch(_requests(5))

        by_id = {r.custom_id: r for r in results}
        assert by_id["req-4"].error == "Request expired"
        assert sum(r.ok for r in results) == 4

    async def test_missing_results_are_synthesised(self) -> None:
        """Requests the backend never reported get a failed result."""
        orchestrator, _, _ = _create_orchestrator(
            run_to_completion=AsyncMock(
                return_value=[BatchResult.success("req-0", "ok")]
            )
        )

        results = await orchestrator.ask_batch(_requests(4))

        by_id = {r.custom_id: r for r in results}
        assert len(results) == 4
        assert by_id["req-0"].ok
        for custom_id in ("req-1", "req-2", "req-3"):
            assert by_id[custom_id].status == "failed"
            assert by_id[custom_id].error == MISSING_RESULT_ERROR

    async def test_unknown_result_ids_are_dropped(self) -> None:
        """Results for ids that were never submitted are discarded."""

        async def run(chunk: list[BatchRequest]) -> list[BatchResult]:
            return [*_echo_batch(chunk), BatchResult.success("stranger", "??")]

        orchestrator, _, _ = _create_orchestrator(
            run_to_completion=AsyncMock(side_effect=run)
        )

        results = await orchestrator.ask_batch(_requests(4))

        assert sorted(r.custom_id for r in results) == [f"req-{i}" for i in range(4)]


# =============================================================================
# Input validation
# =============================================================================


class TestAskBatchValidation:
    """Tests for argument handling in ask_batch()."""

    async def test_empty_input_returns_empty_list_without_calls(self) -> None:
        orchestrator, provider, runner = _create_orchestrator()

        results = await orchestrator.ask_batch([])

        assert results == []
        provider.complete.assert_not_called()
        runner.run_to_completion.assert_not_called()

    @pytest.mark.parametrize("chunk_size", [0, -5])
    async def test_non_positive_chunk_size_raises(self, chunk_size: int) -> None:
        orchestrator, _, runner = _create_orchestrator()

        with pytest.raises(ValueError, match="chunk_size must be positive"):
            await orchestrator.ask_batch(_requests(10), chunk_size=chunk_size)

        runner.run_to_completion.assert_not_called()

    async def test_duplicate_custom_ids_raise(self) -> None:
        orchestrator, provider, _ = _create_orchestrator()
        requests = [
            BatchRequest(custom_id="dup", prompt="a"),
            BatchRequest(custom_id="dup", prompt="b"),
        ]

        with pytest.raises(ValueError, match="unique"):
            await orchestrator.ask_batch(requests)

        provider.complete.assert_not_called()

    def test_constructor_rejects_non_positive_chunk_size(self) -> None:
        with pytest.raises(ValueError):
            BatchOrchestrator(Mock(), Mock(spec=BatchJobRunner), chunk_size=0)

    def test_constructor_rejects_negative_threshold(self) -> None:
        with pytest.raises(ValueError):
            BatchOrchestrator(Mock(), Mock(spec=BatchJobRunner), small_batch_threshold=-1)
