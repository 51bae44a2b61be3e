import asyncio
import time
from typing import Callable

from finality_harness.clients import HarnessBackend
from finality_harness.env import HarnessEnv
from finality_harness.errors import TeardownError
from finality_harness.lifecycle import ContainerManager
from finality_harness.logging import Logger

from ..actions.action_registry import ActionRegistry
from ..actions.default_registry import build_default_registry
from ..logging_models import ScenarioError, ScenarioInfo
from ..results.action_outcome import ActionOutcome
from ..results.scenario_outcome import ScenarioOutcome
from ..results.scenario_result import ScenarioResult
from ..runtime.scenario_runtime import ScenarioRuntime
from ..specs.action_spec import ActionSpec
from ..specs.scenario_spec import ScenarioSpec

BackendFactory = Callable[[HarnessEnv], HarnessBackend]
ContainerManagerFactory = Callable[[], ContainerManager]


class ScenarioRunner:
    """
    Runs a scenario's actions in order against a fresh harness, then tears the
    harness down whether or not the actions passed.

    An action fails the scenario by raising. Its time limit is its own
    timeout_seconds, else the scenario's limit for its type, else the
    scenario default. The scenario limit is checked between actions.
    """

    def __init__(
        self,
        backend_factory: BackendFactory,
        container_manager_factory: ContainerManagerFactory,
        registry: ActionRegistry | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._backend_factory = backend_factory
        self._container_manager_factory = container_manager_factory
        self._registry = registry or build_default_registry()
        self._logger = logger or Logger(name='scenario')

    async def run(self, spec: ScenarioSpec) -> ScenarioOutcome:
        runtime = ScenarioRuntime(
            spec=spec,
            backend=self._backend_factory(spec.env),
            container_manager=self._container_manager_factory(),
        )
        outcome = ScenarioOutcome(
            name=spec.name,
            result=ScenarioResult.PASSED,
            duration_seconds=0.0,
            runtime=runtime,
        )
        started = time.monotonic()

        try:
            await self._run_actions(spec, runtime, outcome, started)

        except Exception as error:
            outcome.result = ScenarioResult.FAILED
            outcome.error = str(error)
            await self._logger.log(
                ScenarioError(
                    message=f"Scenario failed: {error}",
                    scenario=spec.name,
                )
            )

        finally:
            await self._teardown(spec, runtime, outcome)
            outcome.duration_seconds = time.monotonic() - started

        return outcome

    async def _run_actions(
        self,
        spec: ScenarioSpec,
        runtime: ScenarioRuntime,
        outcome: ScenarioOutcome,
        started: float,
    ) -> None:
        limit = spec.scenario_timeout_seconds

        for step, action in enumerate(spec.actions, start=1):
            action_outcome = await self._run_action(
                step,
                action,
                runtime,
                action.resolve_timeout(spec.timeouts, spec.default_action_timeout_seconds),
            )
            outcome.actions.append(action_outcome)

            await self._logger.log(
                ScenarioInfo(
                    message=f"Step {step} finished in {action_outcome.duration_seconds:.2f}s",
                    scenario=spec.name,
                    action=action.action_type,
                )
            )

            elapsed = time.monotonic() - started
            if limit is not None and elapsed > limit:
                raise AssertionError(
                    f"Scenario ran {elapsed:.2f}s, over its {limit:.2f}s limit"
                )

    async def _run_action(
        self,
        step: int,
        action: ActionSpec,
        runtime: ScenarioRuntime,
        timeout: float | None,
    ) -> ActionOutcome:
        handler = self._registry.get(action.action_type)

        # A zero or missing limit means the action may run unbounded
        if not timeout:
            return await handler(runtime, action)

        try:
            return await asyncio.wait_for(handler(runtime, action), timeout)

        except asyncio.TimeoutError as error:
            raise AssertionError(
                f"Step {step} ({action.action_type}) timed out after {timeout:.2f}s "
                f"with params {action.params}"
            ) from error

    async def _teardown(
        self,
        spec: ScenarioSpec,
        runtime: ScenarioRuntime,
        outcome: ScenarioOutcome,
    ) -> None:
        try:
            await runtime.teardown()

        except TeardownError as error:
            # Only the first failure is reported as the scenario error
            if outcome.result == ScenarioResult.PASSED:
                outcome.result = ScenarioResult.FAILED
                outcome.error = str(error)

            await self._logger.log(
                ScenarioError(
                    message=f"Teardown failed: {error}",
                    scenario=spec.name,
                    action="teardown",
                )
            )
