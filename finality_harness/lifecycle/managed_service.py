"""
Uniform start / ready / stop contract for externally running services.

Start and readiness are split: spawning a process or container returns
before the service inside it has opened its listener. wait_ready() polls the
service's health probe until it passes, so no fixed sleeps are needed.
"""

import asyncio
import time
from abc import ABC, abstractmethod

from finality_harness.errors import (
    ConvergenceTimeout,
    InvalidServiceTransition,
    ServiceUnavailable,
)
from finality_harness.logging import Logger
from finality_harness.reliability import ConvergencePoller

from .logging_models import ServiceDebug, ServiceError, ServiceInfo
from .service_state import VALID_TRANSITIONS, ServiceState, StateTransition


class ManagedService(ABC):
    """
    One externally running process or container.

    Subclasses implement _launch(), _probe() and _shutdown(). The base class
    enforces the lifecycle: a service only becomes RUNNING after its probe
    has succeeded, and stop() is safe to call any number of times.
    """

    def __init__(
        self,
        name: str,
        logger: Logger | None = None,
    ) -> None:
        self.name = name
        self._logger = logger or Logger()
        self._state = ServiceState.NOT_STARTED
        self._history: list[StateTransition] = []
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def history(self) -> list[StateTransition]:
        return list(self._history)

    @property
    def is_running(self) -> bool:
        return self._state == ServiceState.RUNNING

    async def start(self) -> None:
        async with self._lock:
            self._transition(ServiceState.STARTING, "start requested")

            try:
                await self._launch()

            except Exception as err:
                self._transition(ServiceState.FAILED, f"launch failed: {err}")
                await self._logger.log(
                    ServiceError(
                        message=f"Failed to launch {self.name}: {err}",
                        service_name=self.name,
                        state=self._state.value,
                    )
                )
                raise

        await self._logger.log(
            ServiceDebug(
                message=f"Launched {self.name}",
                service_name=self.name,
                state=self._state.value,
            )
        )

    async def health_check(self) -> bool:
        """Run the probe once. Probe errors count as unhealthy."""
        try:
            return bool(await self._probe())

        except Exception:
            return False

    async def wait_ready(
        self,
        timeout: float,
        poll_interval: float = 0.5,
    ) -> None:
        if self._state == ServiceState.RUNNING:
            return

        if self._state != ServiceState.STARTING:
            raise InvalidServiceTransition(
                self.name,
                self._state.value,
                ServiceState.RUNNING.value,
            )

        poller = ConvergencePoller(
            timeout=timeout,
            poll_interval=poll_interval,
            logger=self._logger,
        )

        try:
            await poller.eventually(
                self._probe,
                f"{self.name} ready",
            )

        except ConvergenceTimeout as timeout_error:
            self._transition(ServiceState.FAILED, "readiness budget exhausted")
            raise ServiceUnavailable(
                self.name,
                timeout,
                last_error=timeout_error.last_error,
            ) from timeout_error

        self._transition(ServiceState.RUNNING, "health check passed")
        await self._logger.log(
            ServiceInfo(
                message=f"{self.name} is ready",
                service_name=self.name,
                state=self._state.value,
            )
        )

    async def stop(self) -> None:
        async with self._lock:
            if self._state == ServiceState.STOPPED:
                return

            if self._state == ServiceState.NOT_STARTED:
                self._transition(ServiceState.STOPPED, "stopped before start")
                return

            self._transition(ServiceState.STOPPING, "stop requested")

            try:
                await self._shutdown()

            except Exception as err:
                self._transition(ServiceState.FAILED, f"shutdown failed: {err}")
                await self._logger.log(
                    ServiceError(
                        message=f"Failed to stop {self.name}: {err}",
                        service_name=self.name,
                        state=self._state.value,
                    )
                )
                raise

            self._transition(ServiceState.STOPPED, "shutdown complete")

        await self._logger.log(
            ServiceInfo(
                message=f"Stopped {self.name}",
                service_name=self.name,
                state=self._state.value,
            )
        )

    def _transition(self, to_state: ServiceState, reason: str) -> None:
        if to_state not in VALID_TRANSITIONS[self._state]:
            raise InvalidServiceTransition(
                self.name,
                self._state.value,
                to_state.value,
            )

        self._history.append(
            StateTransition(
                from_state=self._state,
                to_state=to_state,
                timestamp=time.monotonic(),
                reason=reason,
            )
        )
        self._state = to_state

    @abstractmethod
    async def _launch(self) -> None:
        ...

    @abstractmethod
    async def _probe(self) -> bool:
        ...

    @abstractmethod
    async def _shutdown(self) -> None:
        ...
