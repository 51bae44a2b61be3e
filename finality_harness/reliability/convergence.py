import time
from dataclasses import dataclass

from finality_harness.errors import ConvergenceTimeout
from finality_harness.logging import Logger

from .logging_models import ConvergenceError, ConvergenceInfo
from .retry import CONVERGENCE_RETRY, Predicate, RetryConfig, RetryExecutor


@dataclass(slots=True)
class ConvergenceCheck:
    """
    A predicate being awaited. Built per wait call and never stored.

    The predicate returns True once the property holds. Raising is treated
    as "not yet satisfied".
    """

    predicate: Predicate
    description: str
    timeout: float = CONVERGENCE_RETRY.timeout
    poll_interval: float = CONVERGENCE_RETRY.poll_interval

    def to_retry_config(self) -> RetryConfig:
        return RetryConfig(
            timeout=self.timeout,
            poll_interval=self.poll_interval,
        )


class ConvergencePoller:
    """
    Waits for eventually-true distributed properties.

    Every readiness, vote and finalization wait in the harness goes
    through wait_for().
    """

    def __init__(
        self,
        timeout: float = CONVERGENCE_RETRY.timeout,
        poll_interval: float = CONVERGENCE_RETRY.poll_interval,
        logger: Logger | None = None,
    ) -> None:
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._logger = logger or Logger()

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    def check(
        self,
        predicate: Predicate,
        description: str,
        timeout: float | None = None,
        poll_interval: float | None = None,
    ) -> ConvergenceCheck:
        return ConvergenceCheck(
            predicate=predicate,
            description=description,
            timeout=self._timeout if timeout is None else timeout,
            poll_interval=(
                self._poll_interval if poll_interval is None else poll_interval
            ),
        )

    async def wait_for(self, check: ConvergenceCheck) -> int:
        start = time.monotonic()
        executor = RetryExecutor(
            check.to_retry_config(),
            logger=self._logger,
        )

        try:
            attempts = await executor.until(
                check.predicate,
                description=check.description,
            )

        except ConvergenceTimeout as timeout_error:
            await self._logger.log(
                ConvergenceError(
                    message=str(timeout_error),
                    description=check.description,
                    attempt=timeout_error.attempts,
                    elapsed=time.monotonic() - start,
                )
            )
            raise

        await self._logger.log(
            ConvergenceInfo(
                message=f"Condition '{check.description}' satisfied",
                description=check.description,
                attempt=attempts,
                elapsed=time.monotonic() - start,
            )
        )

        return attempts

    async def eventually(
        self,
        predicate: Predicate,
        description: str,
        timeout: float | None = None,
        poll_interval: float | None = None,
    ) -> int:
        return await self.wait_for(
            self.check(
                predicate,
                description,
                timeout=timeout,
                poll_interval=poll_interval,
            )
        )
