import time

from ..results.action_outcome import ActionOutcome
from ..runtime.scenario_runtime import ScenarioRuntime
from ..specs.action_spec import ActionSpec


async def run(runtime: ScenarioRuntime, action: ActionSpec) -> ActionOutcome:
    start = time.monotonic()
    manager = runtime.require_manager()
    handle = runtime.resolve_handle(action.params.get("instance"))
    height = await manager.wait_for_vote_cast(handle)
    runtime.last_voted_height = height
    return ActionOutcome(
        name="wait_for_vote",
        succeeded=True,
        duration_seconds=time.monotonic() - start,
        details=f"voted at height {height}",
    )
