import time

from ..results.action_outcome import ActionOutcome
from ..runtime.scenario_runtime import ScenarioRuntime
from ..specs.action_spec import ActionSpec


async def run(runtime: ScenarioRuntime, action: ActionSpec) -> ActionOutcome:
    start = time.monotonic()
    manager = runtime.require_manager()
    count = int(action.params.get("count", len(runtime.handles)))
    await manager.wait_for_registered_actors(count)
    return ActionOutcome(
        name="wait_for_actors",
        succeeded=True,
        duration_seconds=time.monotonic() - start,
        details=f"{count} actors registered",
    )
