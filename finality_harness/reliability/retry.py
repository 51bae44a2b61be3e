"""
Deadline-bounded retry primitive.

Every wait in the harness is an instance of the same loop: evaluate an
attempt, and if it has not succeeded, sleep for the poll interval and try
again until the deadline passes. Two tunings are used:

- CONVERGENCE_RETRY: long timeout for distributed properties (votes,
  finalization, actor registration) that may take minutes to hold.
- CONSTRUCTION_RETRY: short timeout for building clients against an
  endpoint that has only just started listening.

Errors raised by an attempt are recorded as "not yet" and never end the
loop early. Only the deadline does. asyncio.CancelledError is not an
Exception and always propagates.
"""

import asyncio
import inspect
import random
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from finality_harness.errors import ConstructionFailed, ConvergenceTimeout
from finality_harness.logging import Logger

from .logging_models import ConvergenceDebug, ConvergenceTrace

T = TypeVar("T")

Predicate = Callable[[], bool | Awaitable[bool]]
Operation = Callable[[], T | Awaitable[T]]


@dataclass(slots=True, frozen=True)
class RetryConfig:
    """Timeout and spacing for a retry loop."""

    timeout: float = 300.0  # seconds
    poll_interval: float = 0.5  # seconds
    jitter_factor: float = 0.0  # fraction of poll_interval

    def __post_init__(self) -> None:
        if self.timeout < 0:
            raise ValueError("timeout must be >= 0")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        if not 0 <= self.jitter_factor < 1:
            raise ValueError("jitter_factor must be in [0, 1)")


CONVERGENCE_RETRY = RetryConfig(timeout=300.0, poll_interval=0.5)
CONSTRUCTION_RETRY = RetryConfig(timeout=5.0, poll_interval=0.5)


def add_jitter(
    interval: float,
    jitter_factor: float = 0.1,
) -> float:
    """
    Add jitter to a fixed interval.

    Args:
        interval: Base interval in seconds
        jitter_factor: Maximum jitter as fraction of interval

    Returns:
        Interval with random jitter applied
    """
    if jitter_factor <= 0:
        return interval

    jitter_amount = interval * jitter_factor
    return interval + random.uniform(-jitter_amount, jitter_amount)


class RetryExecutor:
    """
    Deadline-bounded retry execution.

    Example usage:
        executor = RetryExecutor(CONSTRUCTION_RETRY)

        controller = await executor.execute(
            lambda: build_controller(config),
            operation_name="consensus controller",
        )

        await RetryExecutor(CONVERGENCE_RETRY).until(
            lambda: node.is_ready(),
            description="node ready",
        )
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        logger: Logger | None = None,
    ):
        self._config = config or CONVERGENCE_RETRY
        self._logger = logger or Logger()

    @property
    def config(self) -> RetryConfig:
        return self._config

    async def until(
        self,
        predicate: Predicate,
        description: str = "condition",
    ) -> int:
        """
        Poll predicate until it returns True or the deadline passes.

        Returns:
            Number of attempts made

        Raises:
            ConvergenceTimeout carrying the last predicate error, if any
        """
        succeeded, _, attempts, last_error = await self._run(
            predicate,
            description,
            accept=bool,
        )

        if not succeeded:
            raise ConvergenceTimeout(
                description,
                self._config.timeout,
                attempts,
                last_error=last_error,
            ) from last_error

        return attempts

    async def execute(
        self,
        operation: Operation[T],
        operation_name: str = "operation",
    ) -> T:
        """
        Retry operation until it returns without raising.

        Returns:
            Result of the first successful attempt

        Raises:
            ConstructionFailed carrying the last error once the deadline passes
        """
        succeeded, result, attempts, last_error = await self._run(
            operation,
            operation_name,
            accept=lambda _: True,
        )

        if not succeeded:
            raise ConstructionFailed(
                operation_name,
                attempts=attempts,
                last_error=last_error,
            ) from last_error

        return result

    async def _run(
        self,
        attempt_fn: Callable[[], object],
        description: str,
        accept: Callable[[object], bool],
    ) -> tuple[bool, object, int, BaseException | None]:
        start = time.monotonic()
        deadline = start + self._config.timeout
        attempts = 0
        last_error: BaseException | None = None

        while True:
            attempts += 1

            try:
                result = attempt_fn()
                if inspect.isawaitable(result):
                    result = await result

                if accept(result):
                    await self._logger.log(
                        ConvergenceTrace(
                            message=f"Satisfied '{description}'",
                            description=description,
                            attempt=attempts,
                            elapsed=time.monotonic() - start,
                        )
                    )
                    return True, result, attempts, None

            except Exception as err:
                last_error = err
                await self._logger.log(
                    ConvergenceDebug(
                        message=f"Attempt for '{description}' failed: {err}",
                        description=description,
                        attempt=attempts,
                        elapsed=time.monotonic() - start,
                    )
                )

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False, None, attempts, last_error

            await asyncio.sleep(
                min(
                    remaining,
                    add_jitter(
                        self._config.poll_interval,
                        self._config.jitter_factor,
                    ),
                )
            )
