import asyncio
from pathlib import Path

from ..results.scenario_outcome import ScenarioOutcome
from ..results.scenario_result import ScenarioResult
from ..specs.scenario_spec import ScenarioSpec
from .scenario_runner import BackendFactory, ContainerManagerFactory, ScenarioRunner


async def run_from_json(
    path: str | Path,
    backend_factory: BackendFactory,
    container_manager_factory: ContainerManagerFactory,
) -> ScenarioOutcome:
    loop = asyncio.get_running_loop()
    spec = await loop.run_in_executor(None, ScenarioSpec.from_json, Path(path))
    runner = ScenarioRunner(backend_factory, container_manager_factory)
    outcome = await runner.run(spec)
    if outcome.result != ScenarioResult.PASSED:
        raise AssertionError(outcome.error or "Scenario failed")
    return outcome
