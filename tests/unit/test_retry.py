"""
Tests for the deadline-bounded retry primitive.

Tests:
- Happy path: predicates and operations that succeed, sync and async
- Negative path: invalid configuration
- Failure modes: deadline expiry carries the last error, errors never end
  the loop early, cancellation propagates
- Edge cases: zero timeout evaluates exactly once
"""

import asyncio
import time

import pytest

from finality_harness.errors import ConstructionFailed, ConvergenceTimeout
from finality_harness.reliability import (
    CONSTRUCTION_RETRY,
    CONVERGENCE_RETRY,
    RetryConfig,
    RetryExecutor,
    add_jitter,
)


def fast_executor(timeout: float = 1.0, poll_interval: float = 0.01) -> RetryExecutor:
    return RetryExecutor(RetryConfig(timeout=timeout, poll_interval=poll_interval))


# =============================================================================
# Configuration
# =============================================================================


class TestRetryConfig:
    def test_default_tunings(self) -> None:
        assert CONVERGENCE_RETRY.timeout == 300.0
        assert CONVERGENCE_RETRY.poll_interval == 0.5
        assert CONSTRUCTION_RETRY.timeout == 5.0
        assert CONSTRUCTION_RETRY.poll_interval == 0.5

    def test_negative_timeout_rejected(self) -> None:
        with pytest.raises(ValueError):
            RetryConfig(timeout=-1.0)

    def test_zero_poll_interval_rejected(self) -> None:
        with pytest.raises(ValueError):
            RetryConfig(poll_interval=0.0)

    def test_jitter_factor_bounds(self) -> None:
        with pytest.raises(ValueError):
            RetryConfig(jitter_factor=1.0)

    def test_add_jitter_stays_within_factor(self) -> None:
        for _ in range(100):
            jittered = add_jitter(1.0, 0.2)
            assert 0.8 <= jittered <= 1.2

    def test_add_jitter_disabled(self) -> None:
        assert add_jitter(0.5, 0.0) == 0.5


# =============================================================================
# until()
# =============================================================================


class TestRetryUntil:
    @pytest.mark.asyncio
    async def test_immediate_success_takes_one_attempt(self) -> None:
        attempts = await fast_executor().until(lambda: True, "always true")

        assert attempts == 1

    @pytest.mark.asyncio
    async def test_async_predicate(self) -> None:
        calls = 0

        async def predicate() -> bool:
            nonlocal calls
            calls += 1
            return calls >= 3

        attempts = await fast_executor().until(predicate, "third call")

        assert attempts == 3

    @pytest.mark.asyncio
    async def test_errors_are_treated_as_not_yet(self) -> None:
        """A raising predicate is retried, and later success is reported."""
        calls = 0

        def predicate() -> bool:
            nonlocal calls
            calls += 1
            if calls < 4:
                raise ConnectionError("transient")
            return True

        attempts = await fast_executor().until(predicate, "recovers")

        assert attempts == 4

    @pytest.mark.asyncio
    async def test_timeout_carries_last_error(self) -> None:
        def predicate() -> bool:
            raise ConnectionError("endpoint refused")

        with pytest.raises(ConvergenceTimeout) as exc_info:
            await fast_executor(timeout=0.1).until(predicate, "never")

        error = exc_info.value
        assert error.description == "never"
        assert isinstance(error.last_error, ConnectionError)
        assert error.__cause__ is error.last_error
        assert error.attempts >= 2
        assert "endpoint refused" in str(error)

    @pytest.mark.asyncio
    async def test_timeout_without_errors_has_no_last_error(self) -> None:
        with pytest.raises(ConvergenceTimeout) as exc_info:
            await fast_executor(timeout=0.05).until(lambda: False, "false")

        assert exc_info.value.last_error is None

    @pytest.mark.asyncio
    async def test_last_error_is_most_recent(self) -> None:
        calls = 0

        def predicate() -> bool:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise ValueError("first")
            if calls == 2:
                raise KeyError("second")
            return False

        with pytest.raises(ConvergenceTimeout) as exc_info:
            await fast_executor(timeout=0.1).until(predicate, "mixed")

        assert isinstance(exc_info.value.last_error, KeyError)

    @pytest.mark.asyncio
    async def test_zero_timeout_evaluates_once(self) -> None:
        calls = 0

        def predicate() -> bool:
            nonlocal calls
            calls += 1
            return False

        with pytest.raises(ConvergenceTimeout) as exc_info:
            await fast_executor(timeout=0.0).until(predicate, "once")

        assert calls == 1
        assert exc_info.value.attempts == 1

    @pytest.mark.asyncio
    async def test_zero_timeout_can_succeed(self) -> None:
        assert await fast_executor(timeout=0.0).until(lambda: True) == 1

    @pytest.mark.asyncio
    async def test_sleep_is_clamped_to_deadline(self) -> None:
        """A long poll interval never pushes the wait far past its timeout."""
        executor = fast_executor(timeout=0.1, poll_interval=5.0)
        start = time.monotonic()

        with pytest.raises(ConvergenceTimeout):
            await executor.until(lambda: False, "clamped")

        assert time.monotonic() - start < 1.0

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self) -> None:
        executor = fast_executor(timeout=10.0)
        task = asyncio.create_task(executor.until(lambda: False, "forever"))
        await asyncio.sleep(0.05)

        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


# =============================================================================
# execute()
# =============================================================================


class TestRetryExecute:
    @pytest.mark.asyncio
    async def test_returns_first_successful_result(self) -> None:
        calls = 0

        async def build() -> str:
            nonlocal calls
            calls += 1
            if calls < 3:
                raise ConnectionRefusedError("not listening")
            return "client"

        assert await fast_executor().execute(build, "client") == "client"
        assert calls == 3

    @pytest.mark.asyncio
    async def test_falsy_result_is_success(self) -> None:
        assert await fast_executor().execute(lambda: 0, "zero") == 0

    @pytest.mark.asyncio
    async def test_raises_construction_failed(self) -> None:
        def build() -> None:
            raise ConnectionRefusedError("not listening")

        with pytest.raises(ConstructionFailed) as exc_info:
            await fast_executor(timeout=0.05).execute(build, "controller")

        error = exc_info.value
        assert error.operation_name == "controller"
        assert error.attempts >= 1
        assert isinstance(error.last_error, ConnectionRefusedError)
